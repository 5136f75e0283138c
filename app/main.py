from contextlib import asynccontextmanager
from fastapi import FastAPI
from app.db.neo4j_connector import close_driver

# Routers
from app.api.routers.entities import router as entities_router
from app.api.routers.imports import router as imports_router
from app.api.routers.integrity import router as integrity_router
from app.api.routers.network import router as network_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Ensure resources (like the Neo4j driver) are closed on shutdown."""
    try:
        yield
    finally:
        close_driver()


app = FastAPI(title="Beneficial Ownership Register", version="0.1", lifespan=lifespan)

app.include_router(entities_router)
app.include_router(network_router)
app.include_router(imports_router)
app.include_router(integrity_router)
