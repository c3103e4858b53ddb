"""Dependency catalog: categories, their dependencies and setup guides."""
