"""Data model, persistence and store."""
