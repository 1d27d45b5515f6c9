"""HTTP API for the Heritage AI application."""
