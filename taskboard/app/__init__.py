"""FastAPI application: factory, lifespan, routing, middleware."""
