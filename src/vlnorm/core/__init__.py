"""Core types, lookup tables and spec utilities."""
