"""Version history engine for a hierarchical project wiki."""

__version__ = "1.0.0"
