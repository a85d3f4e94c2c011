"""pipedeck - terminal editor and monitor for container pipelines."""

__version__ = "0.1.0"
