"""Namespace whose package itself fails while importing."""

raise ValueError("bad package")
