"""Medialib command-line interface."""
