"""Configuration management module for posture alert system."""

from .settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
