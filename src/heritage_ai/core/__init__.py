"""Core request orchestration."""
