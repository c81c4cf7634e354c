"""
Camera integration module for live posture monitoring.
"""

from .live_detector import LiveCameraPostureDetector

__all__ = ["LiveCameraPostureDetector"]
