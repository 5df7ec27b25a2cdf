"""OpenCV-backed video decoder."""

import mimetypes
import os
import tempfile
from pathlib import Path

import cv2

from ux_pulse.domain.assets import SourceAsset
from ux_pulse.domain.errors import MediaDecodeError
from ux_pulse.services.frames import VideoDecoder


class OpenCvVideoDecoder(VideoDecoder):
    """Decodes a video from a temporary file with cv2.VideoCapture."""

    def __init__(self, capture: cv2.VideoCapture, path: Path) -> None:
        self._capture = capture
        self._path = path

    @classmethod
    def open(cls, asset: SourceAsset) -> "OpenCvVideoDecoder":
        """Spill the asset to disk and open a capture on it."""
        suffix = mimetypes.guess_extension(asset.mime_type) or ".bin"
        fd, name = tempfile.mkstemp(prefix="ux_pulse_", suffix=suffix)
        path = Path(name)
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(asset.data)
            capture = cv2.VideoCapture(str(path))
            if not capture.isOpened():
                capture.release()
                raise MediaDecodeError(f"Unable to decode video {asset.name}")
        except Exception:
            path.unlink(missing_ok=True)
            raise
        return cls(capture, path)

    @property
    def duration(self) -> float:
        fps = float(self._capture.get(cv2.CAP_PROP_FPS) or 0.0)
        frame_count = float(self._capture.get(cv2.CAP_PROP_FRAME_COUNT) or 0.0)
        if fps > 0 and frame_count > 0:
            return frame_count / fps
        return self._duration_from_end()

    def _duration_from_end(self) -> float:
        # Streams without an index report no frame count; read the end position.
        self._capture.set(cv2.CAP_PROP_POS_AVI_RATIO, 1.0)
        end_msec = float(self._capture.get(cv2.CAP_PROP_POS_MSEC) or 0.0)
        self._capture.set(cv2.CAP_PROP_POS_AVI_RATIO, 0.0)
        return max(end_msec, 0.0) / 1000.0

    def seek(self, seconds: float) -> None:
        self._capture.set(cv2.CAP_PROP_POS_MSEC, seconds * 1000.0)

    def read_frame(self) -> bytes | None:
        ok, frame = self._capture.read()
        if not ok or frame is None:
            return None
        encoded, buffer = cv2.imencode(".png", frame)
        if not encoded:
            raise MediaDecodeError("Unable to encode frame as PNG")
        return buffer.tobytes()

    def close(self) -> None:
        self._capture.release()
        self._path.unlink(missing_ok=True)
