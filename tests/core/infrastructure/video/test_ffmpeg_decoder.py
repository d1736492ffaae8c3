import asyncio
import json
from pathlib import Path

import pytest

from core.config import AppConfig
from core.infrastructure.video import ffmpeg_decoder
from core.infrastructure.video.ffmpeg_decoder import FfmpegVideoDecoder, VideoDecoderError

VIDEO = Path("/tmp/video-test.bin")


class FakeProcess:
    def __init__(self, returncode: int, stdout: bytes = b"", stderr: bytes = b"") -> None:
        self.returncode = returncode
        self._stdout = stdout
        self._stderr = stderr

    async def communicate(self):
        return self._stdout, self._stderr


@pytest.fixture
def fake_exec(monkeypatch):
    """Replace subprocess spawning; returns the list of argv tuples seen."""
    calls: list[tuple[str, ...]] = []
    results: list[object] = []

    async def _exec(*args, **kwargs):
        calls.append(args)
        outcome = results.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    monkeypatch.setattr(ffmpeg_decoder.asyncio, "create_subprocess_exec", _exec)
    return calls, results


class TestProbeDuration:
    def test_parses_duration(self, fake_exec):
        calls, results = fake_exec
        results.append(FakeProcess(0, json.dumps({"format": {"duration": "12.480000"}}).encode()))

        duration = asyncio.run(FfmpegVideoDecoder().probe_duration(VIDEO))

        assert duration == pytest.approx(12.48)
        assert calls[0][0] == "ffprobe"
        assert calls[0][-1] == str(VIDEO)

    def test_uses_configured_binary(self, fake_exec):
        calls, results = fake_exec
        results.append(FakeProcess(0, b'{"format": {"duration": "1"}}'))
        config = AppConfig(bucket_name="b", region="r", ffprobe_path="/opt/bin/ffprobe")

        asyncio.run(FfmpegVideoDecoder(config).probe_duration(VIDEO))

        assert calls[0][0] == "/opt/bin/ffprobe"

    @pytest.mark.parametrize("stdout", [b"", b"{}", b'{"format": {}}', b'{"format": {"duration": "N/A"}}'])
    def test_unknown_duration(self, fake_exec, stdout):
        _, results = fake_exec
        results.append(FakeProcess(0, stdout))

        with pytest.raises(VideoDecoderError) as exc:
            asyncio.run(FfmpegVideoDecoder().probe_duration(VIDEO))

        assert str(exc.value) == "Unable to determine video duration"

    def test_nonzero_exit_carries_stderr_tail(self, fake_exec):
        _, results = fake_exec
        stderr = "\n".join(f"line {i}" for i in range(10)).encode()
        results.append(FakeProcess(1, b"", stderr))

        with pytest.raises(VideoDecoderError) as exc:
            asyncio.run(FfmpegVideoDecoder().probe_duration(VIDEO))

        assert exc.value.stderr_tail == "line 5\nline 6\nline 7\nline 8\nline 9"
        assert "ffmpeg stderr:" in str(exc.value)

    def test_missing_binary_propagates(self, fake_exec):
        _, results = fake_exec
        results.append(FileNotFoundError(2, "No such file or directory", "ffprobe"))

        with pytest.raises(FileNotFoundError):
            asyncio.run(FfmpegVideoDecoder().probe_duration(VIDEO))


class TestExtractFrame:
    def test_returns_frame_bytes(self, fake_exec):
        calls, results = fake_exec
        results.append(FakeProcess(0, b"\xff\xd8jpeg\xff\xd9"))

        frame = asyncio.run(FfmpegVideoDecoder().extract_frame(VIDEO, 1.5))

        assert frame == b"\xff\xd8jpeg\xff\xd9"
        argv = calls[0]
        assert argv[0] == "ffmpeg"
        assert argv[argv.index("-ss") + 1] == "1.500000"
        assert argv[argv.index("-i") + 1] == str(VIDEO)
        assert argv[argv.index("-frames:v") + 1] == "1"
        assert argv[-1] == "pipe:1"

    @pytest.mark.parametrize("seconds,expected", [(0.00001, "0.000010"), (0, "0.000000"), (2.0, "2.000000")])
    def test_seek_offset_is_fixed_point(self, fake_exec, seconds, expected):
        calls, results = fake_exec
        results.append(FakeProcess(0, b"\xff\xd8\xff\xd9"))

        asyncio.run(FfmpegVideoDecoder().extract_frame(VIDEO, seconds))

        argv = calls[0]
        assert argv[argv.index("-ss") + 1] == expected

    def test_empty_output_is_error(self, fake_exec):
        _, results = fake_exec
        results.append(FakeProcess(0, b""))

        with pytest.raises(VideoDecoderError) as exc:
            asyncio.run(FfmpegVideoDecoder().extract_frame(VIDEO, 0))

        assert str(exc.value).startswith("No frame data produced")

    def test_nonzero_exit_is_error(self, fake_exec):
        _, results = fake_exec
        results.append(FakeProcess(69, b"", b"Invalid data found when processing input"))

        with pytest.raises(VideoDecoderError) as exc:
            asyncio.run(FfmpegVideoDecoder().extract_frame(VIDEO, 0))

        assert "ffmpeg exited with code 69" in str(exc.value)
        assert "Invalid data found" in str(exc.value)
