"""LOGSMITH FILE PURPOSE
Purpose: create FastAPI app and mount enabled features.
Hot path: no (startup only).
Feature flags: LOGSMITH_FEATURE_*.
Failure mode: start with core routes even if no features enabled.
"""

from __future__ import annotations

from fastapi import FastAPI

from core.feature_loader import load_features
from core.registry import discovered_features, enabled_features


def create_app() -> FastAPI:
    app = FastAPI(title="logsmith")

    @app.get("/")
    async def root() -> dict[str, object]:
        return {
            "ok": True,
            "features": sorted(enabled_features().keys()),
            "discovered": sorted(discovered_features().keys()),
        }

    load_features(app)
    return app
