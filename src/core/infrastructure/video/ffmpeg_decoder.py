"""ffprobe / ffmpeg subprocess wrappers."""

import asyncio
import json
import math
from pathlib import Path

from aws_lambda_powertools import Logger

from core.config import AppConfig
from core.utils.constants import (
    DEFAULT_FFMPEG_BINARY,
    DEFAULT_FFPROBE_BINARY,
    STDERR_TAIL_LINES,
)

logger = Logger(UTC=True)


class VideoDecoderError(RuntimeError):
    """Raised when ffprobe/ffmpeg exits abnormally or yields no usable output."""

    def __init__(self, message: str, *, stderr_tail: str = "") -> None:
        self.stderr_tail = stderr_tail
        if stderr_tail:
            message = f"{message}. ffmpeg stderr:\n{stderr_tail}"
        super().__init__(message)


def _tail(stderr: bytes) -> str:
    lines = stderr.decode("utf-8", errors="replace").strip().splitlines()
    return "\n".join(lines[-STDERR_TAIL_LINES:])


async def _run(*args: str) -> tuple[int, bytes, bytes]:
    """Run a binary and collect its output.

    Raises:
        FileNotFoundError: If the binary is not installed
    """
    process = await asyncio.create_subprocess_exec(
        *args,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    stdout, stderr = await process.communicate()
    return process.returncode or 0, stdout, stderr


class FfmpegVideoDecoder:
    """Duration probe and single-frame extraction via the ffmpeg toolchain."""

    def __init__(self, config: AppConfig | None = None) -> None:
        self._ffmpeg = config.ffmpeg_path if config else DEFAULT_FFMPEG_BINARY
        self._ffprobe = config.ffprobe_path if config else DEFAULT_FFPROBE_BINARY

    async def probe_duration(self, path: Path) -> float:
        returncode, stdout, stderr = await _run(
            self._ffprobe,
            "-v",
            "error",
            "-show_entries",
            "format=duration",
            "-of",
            "json",
            str(path),
        )
        if returncode != 0:
            raise VideoDecoderError("ffprobe failed", stderr_tail=_tail(stderr))

        try:
            payload = json.loads(stdout or b"{}")
            duration = float(payload["format"]["duration"])
        except (ValueError, KeyError, TypeError) as exc:
            raise VideoDecoderError("Unable to determine video duration") from exc

        if math.isnan(duration):
            raise VideoDecoderError("Unable to determine video duration")

        logger.debug("Probed video duration", extra={"duration": duration})
        return duration

    async def extract_frame(self, path: Path, seconds: float) -> bytes:
        # -ss before -i seeks the input, then one frame is decoded from there.
        # ffmpeg rejects exponent notation, so the offset is always fixed-point
        returncode, stdout, stderr = await _run(
            self._ffmpeg,
            "-hide_banner",
            "-loglevel",
            "error",
            "-ss",
            f"{seconds:.6f}",
            "-i",
            str(path),
            "-frames:v",
            "1",
            "-vcodec",
            "mjpeg",
            "-f",
            "image2",
            "pipe:1",
        )
        if returncode != 0:
            raise VideoDecoderError(
                f"ffmpeg exited with code {returncode}", stderr_tail=_tail(stderr)
            )
        if not stdout:
            raise VideoDecoderError("No frame data produced", stderr_tail=_tail(stderr))

        return stdout
