"""Built-in clipping profiles for the common entry points."""

from __future__ import annotations

from typing import Any

from .config import ClipperOptions, ClipProfile

PROFILES: dict[ClipProfile, dict[str, Any]] = {
    ClipProfile.FULL: {
        # Detected main content with the metadata header
    },
    ClipProfile.SELECTION: {
        "selection_only": True,
    },
    ClipProfile.MINIMAL: {
        # Body only, no images
        "include_metadata": False,
        "preserve_images": False,
    },
    ClipProfile.CUSTOM: {
        # No overrides - use explicit options
    },
}


def apply_profile(options: ClipperOptions, profile: ClipProfile) -> ClipperOptions:
    """
    Apply profile overrides on top of the given options.

    Args:
        options: Base options
        profile: Profile to apply

    Returns:
        A new ClipperOptions with the profile overrides applied

    Example:
        >>> applied = apply_profile(ClipperOptions(), ClipProfile.MINIMAL)
        >>> applied.include_metadata
        False
    """
    overrides = PROFILES.get(profile, {})
    if not overrides:
        return options
    return options.merge(**overrides)
