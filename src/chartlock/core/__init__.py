"""Core resolution engine: constraints, indexes, resolver, and locks."""
