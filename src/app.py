"""Marketplace FastAPI application.

Commands are processed synchronously per request; every request runs inside
the marketplace domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the config overlay in marketplace/domain.toml.
from marketplace.domain import marketplace

marketplace.init()

from marketplace.api.app import create_app  # noqa: E402

app = create_app()
