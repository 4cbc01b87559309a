"""Immutable descriptors and type references."""
