"""Host adapters for the indentation engine."""
