"""Concord — compare one prompt across several AI backends."""

__version__ = "0.1.0"
