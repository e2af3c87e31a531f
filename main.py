"""Run the FastAPI app for RepoSentinel."""

from __future__ import annotations

import logging
import os

import uvicorn
from fastapi import FastAPI

from repo_sentinel import __version__
from repo_sentinel.api import router as agent_router

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="RepoSentinel", version=__version__)
app.include_router(agent_router)


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
