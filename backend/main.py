"""Entry point for running the FastAPI application."""

import logging
import os

import uvicorn
from dotenv import load_dotenv

load_dotenv()

if __name__ == "__main__":
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())

    # Can be overridden: PORT=7860 python -m backend.main
    port = int(os.getenv("PORT", "8000"))

    uvicorn.run(
        "backend.src.api.main:app",
        host="0.0.0.0",
        port=port,
        reload=os.getenv("RELOAD", "false").lower() in {"1", "true", "yes"},
    )
