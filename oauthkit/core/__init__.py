"""Shared infrastructure: configuration, logging and base exceptions."""
