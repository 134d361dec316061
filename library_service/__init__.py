"""Library management back-end: catalog, membership and circulation."""

__version__ = "1.0.0"
