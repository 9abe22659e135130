"""Infrastructure layer: executing operations under a retry policy."""
