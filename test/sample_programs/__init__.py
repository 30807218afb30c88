"""Sample namespace scanned by the discovery tests."""
