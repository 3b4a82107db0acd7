"""Data access layer; repositories flush but never commit."""
