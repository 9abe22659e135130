"""Domain layer: retry policy model and exceptions."""
