"""Olamco Digital Hub backend."""

__version__ = "1.0.0"
