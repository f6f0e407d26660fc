"""GraphQL calculation service (FastAPI + Strawberry)."""
