"""HTTP backends: FastAPI router module, combined server and OpenAPI document."""
