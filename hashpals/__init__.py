"""HashPals: a virtual pet that eats, plays and mines coins."""

__version__ = "0.1.0"
