"""depman: dependency catalog and blog backed by flat JSON documents."""

__version__ = "0.3.0"
