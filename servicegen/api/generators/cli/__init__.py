"""Command-line backend: click module and command grammar tree."""
