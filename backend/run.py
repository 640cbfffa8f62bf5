#!/usr/bin/env python3
# backend/run.py
"""
Development server runner.

Creates and seeds the tables first, then serves the API with reload on.
For local development only.
"""
import logging
from pathlib import Path
import os
import sys

# Add backend to path
backend_dir = Path(__file__).parent
sys.path.insert(0, str(backend_dir))
os.chdir(backend_dir)

import uvicorn

from app.init_db import init_db

logger = logging.getLogger(__name__)

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    init_db()
    port = int(os.getenv("PORT", "8000"))
    logger.info("Serving on http://localhost:%s (docs at /docs)", port)
    uvicorn.run("app.main:app", host="0.0.0.0", port=port, reload=True, log_level="info")
