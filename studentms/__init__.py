"""Student management backend: authentication and academic records API."""

__version__ = "0.1.0"
