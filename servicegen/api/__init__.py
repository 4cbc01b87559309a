"""Extraction pipeline, conventions and backend emitters."""
