"""Adapters for key sources, converters and identifier naming."""
