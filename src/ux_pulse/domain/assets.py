"""Domain models for uploaded media."""

from dataclasses import dataclass
from enum import StrEnum


class SourceKind(StrEnum):
    """Where the screens of a workflow came from."""

    IMAGES = "images"
    VIDEO = "video"


@dataclass(frozen=True)
class SourceAsset:
    """An uploaded file: raw bytes plus MIME type and display name."""

    name: str
    mime_type: str
    data: bytes

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")

    @property
    def is_video(self) -> bool:
        return self.mime_type.startswith("video/")


@dataclass(frozen=True)
class Frame:
    """A still image sampled from a video."""

    index: int
    timestamp: float
    data: bytes
    mime_type: str = "image/png"

    def to_asset(self) -> SourceAsset:
        """Return the frame as a screen asset."""
        return SourceAsset(
            name=f"frame_{self.index:03d}.png",
            mime_type=self.mime_type,
            data=self.data,
        )
