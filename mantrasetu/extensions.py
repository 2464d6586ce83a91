"""Flask extension instances shared across the web client."""
from __future__ import annotations

import httpx
from flask import Flask, current_app
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
migrate = Migrate()


class Backend:
    """Owns the pooled ``httpx.Client`` used to talk to the REST backend."""

    extension_key = "mantrasetu_backend"

    def __init__(self, app: Flask | None = None) -> None:
        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask) -> None:
        app.extensions[self.extension_key] = {"http": None}

    def http_client(self) -> httpx.Client:
        """Return the application's HTTP client, building it on first use."""

        state = current_app.extensions[self.extension_key]
        if state["http"] is None:
            config = current_app.config
            state["http"] = httpx.Client(
                base_url=config["API_BASE_URL"].rstrip("/") + "/",
                timeout=httpx.Timeout(config["API_TIMEOUT_SECONDS"]),
                headers={"Accept": "application/json"},
                transport=config.get("API_TRANSPORT"),
            )
        return state["http"]

    def close(self, app: Flask) -> None:
        state = app.extensions.get(self.extension_key) or {}
        http = state.get("http")
        if http is not None:
            http.close()
            state["http"] = None


backend = Backend()
