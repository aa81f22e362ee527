#!/usr/bin/env python3
# backend/run.py
"""
Development server runner.

Creates the tables, seeds the default service types and product categories,
then serves the API with auto-reload. For local development only.
"""
import logging
import os
import sys
from pathlib import Path

# Add backend to path
backend_dir = Path(__file__).parent
sys.path.insert(0, str(backend_dir))
os.chdir(backend_dir)

# Local runs never call a real geocoder unless asked to
os.environ.setdefault("GEOCODING_PROVIDER", "mock")

import uvicorn

from app.init_db import init_db

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()

    print("Starting development server")
    print("Access at: http://localhost:8000")
    print("API Docs: http://localhost:8000/docs")

    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
