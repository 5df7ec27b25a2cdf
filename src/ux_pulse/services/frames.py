"""Video-to-frame extraction for per-screen analysis."""

import asyncio
import logging
import math
from collections.abc import Callable, Iterator
from contextlib import closing
from dataclasses import dataclass
from typing import Protocol

from ux_pulse.domain.assets import Frame, SourceAsset
from ux_pulse.domain.errors import MediaDecodeError, NoFramesExtracted

MAX_FRAMES = 30

_logger = logging.getLogger(__name__)


class VideoDecoder(Protocol):
    """Seekable decode handle for a single video."""

    @property
    def duration(self) -> float:
        """Return the video duration in seconds."""

    def seek(self, seconds: float) -> None:
        """Move the read position to the given timestamp."""

    def read_frame(self) -> bytes | None:
        """Return the frame at the read position as PNG bytes, if any."""

    def close(self) -> None:
        """Release decode buffers and temporary files."""


DecoderFactory = Callable[[SourceAsset], VideoDecoder]


def sample_timestamps(duration: float, max_frames: int = MAX_FRAMES) -> list[float]:
    """Return capture times spaced at max(1s, duration / max_frames)."""
    if max_frames <= 0 or not math.isfinite(duration) or duration <= 0:
        return []
    interval = max(1.0, duration / max_frames)
    timestamps: list[float] = []
    while len(timestamps) < max_frames:
        # index * interval, not a running sum.
        timestamp = len(timestamps) * interval
        if timestamp >= duration:
            break
        timestamps.append(timestamp)
    return timestamps


@dataclass
class FrameExtractor:
    """Samples a bounded, evenly spaced sequence of frames from a video."""

    decoder_factory: DecoderFactory
    max_frames: int = MAX_FRAMES

    def iter_frames(self, asset: SourceAsset) -> Iterator[Frame]:
        """Yield frames lazily; the decoder is released when iteration ends."""
        if not asset.is_video:
            raise MediaDecodeError(f"{asset.name} is not a video ({asset.mime_type})")
        with closing(self.decoder_factory(asset)) as decoder:
            timestamps = sample_timestamps(decoder.duration, self.max_frames)
            for index, timestamp in enumerate(timestamps):
                decoder.seek(timestamp)
                data = decoder.read_frame()
                if data is None:
                    _logger.warning(
                        "Frame read failed: video=%s timestamp=%.2f", asset.name, timestamp
                    )
                    break
                yield Frame(index=index, timestamp=timestamp, data=data)

    def extract(self, asset: SourceAsset) -> list[Frame]:
        """Decode the whole sample set, failing if it is empty."""
        frames = list(self.iter_frames(asset))
        if not frames:
            raise NoFramesExtracted(f"No frames could be extracted from {asset.name}")
        _logger.info("Extracted frames: video=%s count=%s", asset.name, len(frames))
        return frames

    async def extract_async(self, asset: SourceAsset) -> list[Frame]:
        """Run extraction in a worker thread."""
        return await asyncio.to_thread(self.extract, asset)
