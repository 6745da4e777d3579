"""HTTP layer: routers, schemas and FastAPI dependencies."""
