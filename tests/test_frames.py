"""Tests for video frame extraction."""

import asyncio

import pytest

from tests.conftest import PNG_HEADER, FakeDecoderFactory
from ux_pulse.domain.assets import SourceAsset
from ux_pulse.domain.errors import MediaDecodeError, NoFramesExtracted
from ux_pulse.services.frames import MAX_FRAMES, FrameExtractor, sample_timestamps

VIDEO = SourceAsset(name="flow.mp4", mime_type="video/mp4", data=b"video-bytes")


def test_short_video_samples_one_frame_per_second() -> None:
    assert sample_timestamps(10.0) == [float(second) for second in range(10)]


def test_fractional_duration_rounds_up() -> None:
    assert len(sample_timestamps(10.5)) == 11


def test_thirty_second_video_hits_the_cap_exactly() -> None:
    assert len(sample_timestamps(30.0)) == MAX_FRAMES


def test_long_video_is_spread_over_max_frames() -> None:
    timestamps = sample_timestamps(120.0)

    assert len(timestamps) == MAX_FRAMES
    assert timestamps[1] == pytest.approx(4.0)
    assert timestamps[-1] < 120.0


@pytest.mark.parametrize("duration", [0.0, -1.0, float("nan"), float("inf")])
def test_unusable_duration_has_no_samples(duration: float) -> None:
    assert sample_timestamps(duration) == []


def test_extract_returns_indexed_png_frames(
    frame_extractor: FrameExtractor, decoder_factory: FakeDecoderFactory
) -> None:
    frames = frame_extractor.extract(VIDEO)

    assert [frame.index for frame in frames] == [0, 1, 2, 3, 4]
    assert [frame.timestamp for frame in frames] == [0.0, 1.0, 2.0, 3.0, 4.0]
    assert all(frame.data.startswith(PNG_HEADER) for frame in frames)
    assert all(frame.mime_type == "image/png" for frame in frames)
    assert decoder_factory.decoders[0].seeks == [0.0, 1.0, 2.0, 3.0, 4.0]
    assert decoder_factory.decoders[0].closed


def test_extract_redecodes_on_every_call(
    frame_extractor: FrameExtractor, decoder_factory: FakeDecoderFactory
) -> None:
    frame_extractor.extract(VIDEO)
    frame_extractor.extract(VIDEO)

    assert len(decoder_factory.decoders) == 2


def test_long_video_never_exceeds_cap() -> None:
    factory = FakeDecoderFactory(video_duration=600.0)
    frames = FrameExtractor(decoder_factory=factory).extract(VIDEO)

    assert len(frames) == MAX_FRAMES


def test_zero_duration_raises_no_frames() -> None:
    factory = FakeDecoderFactory(video_duration=0.0)

    with pytest.raises(NoFramesExtracted):
        FrameExtractor(decoder_factory=factory).extract(VIDEO)
    assert factory.decoders[0].closed


def test_failed_first_read_raises_no_frames() -> None:
    factory = FakeDecoderFactory(video_duration=5.0, fail_at=0)

    with pytest.raises(NoFramesExtracted):
        FrameExtractor(decoder_factory=factory).extract(VIDEO)


def test_read_failure_truncates_sequence() -> None:
    factory = FakeDecoderFactory(video_duration=10.0, fail_at=3)
    frames = FrameExtractor(decoder_factory=factory).extract(VIDEO)

    assert len(frames) == 3
    assert factory.decoders[0].closed


def test_non_video_asset_is_rejected(frame_extractor: FrameExtractor) -> None:
    image = SourceAsset(name="shot.png", mime_type="image/png", data=PNG_HEADER)

    with pytest.raises(MediaDecodeError):
        frame_extractor.extract(image)


def test_decoder_released_when_iteration_stops_early(
    frame_extractor: FrameExtractor, decoder_factory: FakeDecoderFactory
) -> None:
    frames = frame_extractor.iter_frames(VIDEO)
    first = next(frames)
    frames.close()

    assert first.index == 0
    assert decoder_factory.decoders[0].closed


def test_decoder_released_on_error() -> None:
    class ExplodingFactory(FakeDecoderFactory):
        def __call__(self, asset: SourceAsset):
            decoder = super().__call__(asset)

            def explode() -> bytes:
                raise MediaDecodeError("corrupt packet")

            decoder.read_frame = explode
            return decoder

    factory = ExplodingFactory()
    with pytest.raises(MediaDecodeError):
        FrameExtractor(decoder_factory=factory).extract(VIDEO)
    assert factory.decoders[0].closed


def test_extract_async_matches_sync(frame_extractor: FrameExtractor) -> None:
    frames = asyncio.run(frame_extractor.extract_async(VIDEO))

    assert len(frames) == 5


def test_frame_to_asset_names_by_index(frame_extractor: FrameExtractor) -> None:
    asset = frame_extractor.extract(VIDEO)[2].to_asset()

    assert asset.name == "frame_002.png"
    assert asset.is_image
