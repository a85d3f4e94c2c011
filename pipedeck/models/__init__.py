"""Data models for pipedeck."""
