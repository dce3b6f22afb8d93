"""Request descriptor, query parameters, and response value types."""
