"""upver - latest stable upstream release lookup."""

__version__ = "0.1.0"
