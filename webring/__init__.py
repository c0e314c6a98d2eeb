"""Webring directory — member ring, neighbour lookup and site health scanning."""

__version__ = "0.1.0"
