"""Quiver government contracts downloader and universe builder."""

__version__ = "0.1.0"
