"""Service definition files loaded by the container assembler."""
