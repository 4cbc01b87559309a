"""Documentation-style backends: JSON Schema document and Markdown reference."""
