"""Webclipper configuration and result models."""

from .config import ClipperOptions, ClipProfile
from .page import PageMetadata, PageSnapshot, ScrapResult, SelectionInfo
from .profiles import PROFILES, apply_profile

__all__ = [
    # Config
    "ClipperOptions",
    "ClipProfile",
    # Page and results
    "PageMetadata",
    "PageSnapshot",
    "ScrapResult",
    "SelectionInfo",
    # Profiles
    "PROFILES",
    "apply_profile",
]
