from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import api_router
from .config import get_settings
from .database import close_database, database_path, is_database_open, open_database


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Tests open their own ledger before the app starts
    if not is_database_open():
        open_database(Path(get_settings().database_path))
    yield
    close_database()


app = FastAPI(
    title="Cash Flow Reconciliation",
    description="OFX statement import and bank reconciliation for the cash-flow ledger",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api")


@app.get("/health")
def health_check():
    """Liveness plus which ledger file is open."""
    path = database_path()
    return {
        "status": "ok",
        "database_open": is_database_open(),
        "database_path": str(path) if path else None,
    }
