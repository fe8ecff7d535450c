"""bhms: property store adapter + user business core."""

__version__ = "0.1.0"
