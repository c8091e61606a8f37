"""Streaming engines built on the bedGraph readers."""
