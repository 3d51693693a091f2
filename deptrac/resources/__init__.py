"""Built-in container definitions."""
