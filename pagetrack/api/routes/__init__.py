"""Core routes of the host app."""
