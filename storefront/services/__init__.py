"""Business logic used by the API routes."""
