"""HTTP API for skillbox."""

from skillbox.api.app import create_app

__all__ = ["create_app"]
