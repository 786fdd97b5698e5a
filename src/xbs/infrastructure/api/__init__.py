"""API layer: FastAPI application, routes and schemas."""
