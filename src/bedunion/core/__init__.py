"""Coordinate model shared by the readers and the union engine."""
