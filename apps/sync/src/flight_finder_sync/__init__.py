"""Destination discovery and price cache refresh pipelines."""
