"""CSV interchange."""
