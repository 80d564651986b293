from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from core import db
from core.config import settings
from core.models import Base

from . import audit, auth, cycles, participants


@asynccontextmanager
async def lifespan(app: FastAPI):
    async with db.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield
    finally:
        await db.engine.dispose()


app = FastAPI(title=settings.app_name, lifespan=lifespan)

app.include_router(participants.router, prefix="/api")
app.include_router(cycles.router, prefix="/api")
app.include_router(auth.router, prefix="/api")
app.include_router(audit.router, prefix="/api")


@app.get("/")
async def root() -> dict[str, str]:
    return {"status": "ok", "environment": settings.environment}
