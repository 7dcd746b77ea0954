# backend/salescast/main.py

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse

from salescast.api.auth_routes import router as auth_router
from salescast.api.routes import router as api_router
from salescast.core.config import settings
from salescast.core.database import init_db
from salescast.core.logging import setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    # dev convenience; production schema comes from alembic
    init_db()
    yield


app = FastAPI(title="SalesCast API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["Content-Type"],
)

app.include_router(auth_router, prefix="/auth", tags=["auth"])
app.include_router(api_router, prefix="/api")


@app.get("/health")
def health():
    return {"status": "ok"}


# Catch-all goes last: real files from the SPA build, index.html for everything else
@app.get("/{full_path:path}", include_in_schema=False)
def spa(full_path: str):
    dist = Path(settings.frontend_dist).resolve()

    if full_path:
        candidate = (dist / full_path).resolve()
        if candidate.is_file() and candidate.is_relative_to(dist):
            return FileResponse(candidate)

    index = dist / "index.html"
    if not index.is_file():
        raise HTTPException(status_code=404, detail="Frontend build not found")
    return FileResponse(index)
