"""HTTP API for rng-monitor (FastAPI)."""

from rng_monitor.api.app import create_app

__all__ = ["create_app"]
