"""Production runtime app for sharedrive.

Builds the app from environment variables so it can be served with
``uvicorn sharedrive.runtime:app``. STORAGE_PATH is required; STATIC_DIR
serves the browser UI from the same process.
"""

from __future__ import annotations

from .api import create_app
from .observability import configure_logging

configure_logging()
app = create_app()
