"""Entry point for running the FastAPI application with Uvicorn."""
from __future__ import annotations

import os

import uvicorn

from buzztalks.config import get_settings


def main() -> None:
  settings = get_settings()
  port = int(os.getenv("BUZZTALKS_PORT", "8000"))
  reload = os.getenv("UVICORN_RELOAD", "true").lower() == "true"
  uvicorn.run("buzztalks.main:app", host="0.0.0.0", port=port, reload=reload, log_level=settings.log_level)


if __name__ == "__main__":
  main()
