"""Observability: structured logging and correlation IDs."""
