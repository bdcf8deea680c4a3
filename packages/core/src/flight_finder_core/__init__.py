"""Shared schemas, errors and pure helpers for the weekend flight finder."""
