"""FastAPI service for the weekend flight finder."""
