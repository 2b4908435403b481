"""HTTP clients for remote services."""

from .asana_client import AsanaClient

__all__ = ["AsanaClient"]
