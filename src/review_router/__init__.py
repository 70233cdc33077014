"""Edge router for snapshot review sites."""

__version__ = "0.1.0"
