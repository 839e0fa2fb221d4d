"""HTTP middleware for authentication, CORS and request logging."""
