"""Pydantic configuration models for webclipper."""

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


class ClipProfile(str, Enum):
    """Built-in clipping presets."""

    FULL = "full"
    SELECTION = "selection"
    MINIMAL = "minimal"
    CUSTOM = "custom"


class ClipperOptions(BaseModel):
    """
    Options controlling a single clip.

    Every flag is independently toggleable. The defaults produce a full
    clip of the detected main content with a metadata header.

    Example:
        options = ClipperOptions(preserve_images=False)
        minimal = options.merge(include_metadata=False)

    YAML format:
        include_metadata: true
        preserve_images: false
        preserve_links: true
        clean_html: true
        selection_only: false
    """

    include_metadata: bool = Field(True, description="Prepend a generated metadata header to the content")
    preserve_images: bool = Field(True, description="Keep <img> elements as Markdown images")
    preserve_links: bool = Field(True, description="Keep [text](url) links instead of flattening to text")
    clean_html: bool = Field(True, description="Run the HTML sanitizer before conversion")
    selection_only: bool = Field(
        False,
        description="Clip only the current text selection instead of the detected main content",
    )

    model_config = {"extra": "forbid", "frozen": True}

    def merge(self, **overrides: Any) -> "ClipperOptions":
        """Return a copy with the given non-None overrides applied."""
        updates = {key: value for key, value in overrides.items() if value is not None}
        if not updates:
            return self
        return ClipperOptions.model_validate({**self.model_dump(), **updates})

    def to_yaml(self) -> str:
        """Serialize options to YAML string."""
        import yaml

        return yaml.dump(self.model_dump(mode="json"), default_flow_style=False)

    @classmethod
    def from_yaml(cls, yaml_str: str) -> "ClipperOptions":
        """Load options from YAML string."""
        import yaml

        data = yaml.safe_load(yaml_str) or {}
        return cls.model_validate(data)

    @classmethod
    def from_yaml_file(cls, path: Path) -> "ClipperOptions":
        """Load options from YAML file."""
        return cls.from_yaml(path.read_text(encoding="utf-8"))
