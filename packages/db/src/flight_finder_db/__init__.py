"""Async SQLAlchemy models and session helpers for the flight finder datastore."""
