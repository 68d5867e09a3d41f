"""Configuration, input preparation and small shared utilities."""
