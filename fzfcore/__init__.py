"""Key names, key bindings, layout settings and a small HTTP control server for a fuzzy finder."""

__version__ = "0.1.0"