"""Alert delivery API client."""

from .client import AsyncAPIClient

__all__ = ["AsyncAPIClient"]
