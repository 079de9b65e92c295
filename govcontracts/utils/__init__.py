"""Shared helpers for the government contracts downloader."""
