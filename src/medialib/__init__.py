"""Medialib — personal media collection manager."""
