"""Upload modes."""

from enum import Enum
from typing import Any, Optional


class Mode(str, Enum):
    """Where uploaded files land in the Design Manager."""

    PUBLISH = "publish"
    """Files go live immediately"""

    DRAFT = "draft"
    """Files are written to the draft buffer and must be published later"""

    @property
    def query(self) -> dict[str, Any]:
        """Query parameters the file mapper API expects for this mode."""
        return {"buffer": self is Mode.DRAFT}

    @classmethod
    def from_string(cls, value: Optional[str]) -> "Mode":
        """Parse a mode name (case-insensitive).

        Raises:
            ValueError: If ``value`` is not a known mode
        """
        if not value:
            raise ValueError("Mode must not be empty")
        try:
            return cls(value.strip().lower())
        except ValueError:
            valid = ", ".join(m.value for m in cls)
            raise ValueError(
                f"Invalid mode {value!r}, expected one of: {valid}"
            ) from None


DEFAULT_MODE = Mode.PUBLISH

