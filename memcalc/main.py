"""Serve the calculator API with uvicorn.

    MEMCALC_HOST       bind address (default 0.0.0.0)
    MEMCALC_PORT       port (default 8001)
    MEMCALC_LOG_LEVEL  uvicorn/app log level (default info)
"""
from __future__ import annotations

import logging
import os

import uvicorn

from memcalc.api.main import app

log = logging.getLogger("memcalc.server")


def run() -> None:
    host = os.getenv("MEMCALC_HOST", "0.0.0.0")
    port = int(os.getenv("MEMCALC_PORT", "8001"))
    level = (os.getenv("MEMCALC_LOG_LEVEL") or "info").strip().lower()

    logging.basicConfig(level=level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    log.info("Starting JVM memory calculator API on %s:%d", host, port)
    uvicorn.run(app, host=host, port=port, log_level=level)


if __name__ == "__main__":
    run()
