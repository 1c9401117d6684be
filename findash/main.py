import logging
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from findash import config
from findash.data.base import create_tables
from findash.presentation.auth_api import router as auth_router
from findash.presentation.envelope import register_exception_handlers, success
from findash.presentation.transactions_api import router as transactions_router

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Financial Dashboard API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(auth_router)
app.include_router(transactions_router)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@app.get("/")
@app.get("/api")
def welcome():
    return success(
        message="Welcome to the Financial Dashboard API", timestamp=_timestamp()
    )


@app.get("/api/health")
def health():
    return {
        "status": "OK",
        "message": "Financial Dashboard API is running",
        "timestamp": _timestamp(),
    }


# Ensure tables exist at startup
create_tables()
