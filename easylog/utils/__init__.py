"""Small parsing and formatting helpers."""
