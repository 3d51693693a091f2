"""Infrastructure layer: container assembly, AST parsing, events and logging."""
