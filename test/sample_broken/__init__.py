"""Namespace whose leaf module fails while importing."""
