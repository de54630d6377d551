"""Clip extraction: cut time ranges out of a stream with ffmpeg.

Each range is tried against an ordered ladder of named strategies. The ladder
exists because some runtimes lack a working audio encoder; a strategy is only
abandoned when ffmpeg exits non-zero. Which strategy won is logged so dead
rungs can be pruned later.
"""

from __future__ import annotations

import asyncio
import logging
import math
import secrets
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable
from urllib.parse import quote

from models import ClipRequest, ClipResult
from services.errors import InvalidInputError
from services.settings import get_clip_output_dir, get_ffmpeg_binary

logger = logging.getLogger(__name__)

DOWNLOAD_ROUTE = "/api/clips/download"

# (returncode, stderr text)
FfmpegRunner = Callable[[list[str]], Awaitable[tuple[int, str]]]
ProgressCallback = Callable[[int, int], None]


@dataclass(frozen=True)
class ExtractionStrategy:
    name: str
    codec_args: tuple[str, ...]
    silent_audio: bool = False   # mix in a generated silent track as second input


STRATEGIES: tuple[ExtractionStrategy, ...] = (
    ExtractionStrategy(
        name="reencode_silent_audio",
        codec_args=(
            "-map", "0:v:0", "-map", "1:a:0",
            "-c:v", "libx264", "-preset", "veryfast",
            "-c:a", "aac", "-shortest",
        ),
        silent_audio=True,
    ),
    ExtractionStrategy(
        name="reencode_video_only",
        codec_args=("-c:v", "libx264", "-preset", "veryfast", "-an"),
    ),
    ExtractionStrategy(name="stream_copy", codec_args=("-c", "copy")),
    ExtractionStrategy(name="minimal_copy", codec_args=("-c:v", "copy", "-an")),
)


class ClipExtractionError(Exception):
    """Every strategy failed for one clip; carries the last strategy's stderr."""

    def __init__(self, message: str, *, strategy: str, returncode: int) -> None:
        super().__init__(message)
        self.strategy = strategy
        self.returncode = returncode


async def run_ffmpeg(args: list[str]) -> tuple[int, str]:
    """Run one ffmpeg invocation; returns (returncode, stderr)."""
    proc = await asyncio.create_subprocess_exec(
        *args,
        stdout=asyncio.subprocess.DEVNULL,
        stderr=asyncio.subprocess.PIPE,
    )
    _, stderr = await proc.communicate()
    return proc.returncode if proc.returncode is not None else -1, stderr.decode(errors="replace")


def build_ffmpeg_args(
    binary: str,
    strategy: ExtractionStrategy,
    source_url: str,
    start: float,
    duration: float,
    output_path: Path,
) -> list[str]:
    args = [binary, "-y", "-loglevel", "error", "-ss", f"{start:.3f}", "-i", source_url]
    if strategy.silent_audio:
        args += ["-f", "lavfi", "-i", "anullsrc=channel_layout=stereo:sample_rate=44100"]
    args += ["-t", f"{duration:.3f}", *strategy.codec_args, str(output_path)]
    return args


def clip_file_name(index: int, request: ClipRequest) -> str:
    """clip_{n}_{start}s-{end}s_{8 hex}.mp4; the random suffix keeps concurrent jobs apart."""
    return f"clip_{index + 1}_{request.start:.1f}s-{request.end:.1f}s_{secrets.token_hex(4)}.mp4"


def download_url_for(file_name: str) -> str:
    return f"{DOWNLOAD_ROUTE}?file={quote(file_name)}"


def resolve_clip_path(file_name: str, output_dir: Path | None = None) -> Path:
    """Map a requested download name onto the scratch dir, refusing anything but a bare file name."""
    if not file_name:
        raise InvalidInputError("File name is required.")
    if Path(file_name).name != file_name or file_name in (".", "..") or "\\" in file_name:
        raise InvalidInputError("Invalid file name.", details="File name must not contain path components.")
    return (output_dir or get_clip_output_dir()) / file_name


class ClipExtractor:
    """
    Sequential batch extractor with per-item isolation.

    :param output_dir: scratch directory for produced clips (never cleaned here)
    :param runner: coroutine running one ffmpeg argv; swapped out in tests
    :param strategies: ordered fallback ladder
    """

    def __init__(
        self,
        *,
        output_dir: Path | None = None,
        runner: FfmpegRunner = run_ffmpeg,
        strategies: tuple[ExtractionStrategy, ...] = STRATEGIES,
        ffmpeg_binary: str | None = None,
    ) -> None:
        if not strategies:
            raise ValueError("at least one extraction strategy is required")
        self._output_dir = output_dir or get_clip_output_dir()
        self._output_dir.mkdir(parents=True, exist_ok=True)
        self._runner = runner
        self._strategies = strategies
        self._binary = ffmpeg_binary or get_ffmpeg_binary()

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    async def extract_clip(self, source_url: str, request: ClipRequest, file_name: str) -> tuple[Path, str]:
        """Cut one clip; returns (path, winning strategy name)."""
        if not math.isfinite(request.start) or request.start < 0:
            raise InvalidInputError("Start time must be a non-negative number.")
        duration = request.duration
        if not math.isfinite(duration) or duration <= 0:
            raise InvalidInputError("End time must be after start time.")
        output_path = self._output_dir / file_name
        last_error = ""
        last_code = 0
        for strategy in self._strategies:
            args = build_ffmpeg_args(self._binary, strategy, source_url, request.start, duration, output_path)
            returncode, stderr = await self._runner(args)
            if returncode == 0:
                logger.info("[clips] %s extracted with strategy=%s", file_name, strategy.name)
                return output_path, strategy.name
            last_error, last_code = stderr.strip(), returncode
            logger.warning(
                "[clips] Strategy %s failed for %s (exit %s): %.200s",
                strategy.name,
                file_name,
                returncode,
                last_error,
            )
        raise ClipExtractionError(
            f"FFmpeg failed: {last_error or 'Unknown error'}. Exit code: {last_code}",
            strategy=self._strategies[-1].name,
            returncode=last_code,
        )

    async def extract_batch(
        self,
        source_url: str,
        requests: list[ClipRequest],
        *,
        progress: ProgressCallback | None = None,
    ) -> list[ClipResult]:
        """Exactly one ClipResult per request, in input order; one failure never drops a sibling."""
        total = len(requests)
        results: list[ClipResult] = []
        for index, request in enumerate(requests):
            file_name = clip_file_name(index, request)
            duration = request.duration
            logger.info("[clips] Generating clip %d/%d: %ss - %ss", index + 1, total, request.start, request.end)
            try:
                path, strategy = await self.extract_clip(source_url, request, file_name)
            except (InvalidInputError, ClipExtractionError, OSError) as exc:
                error = exc.message if isinstance(exc, InvalidInputError) else str(exc)
                logger.error("[clips] Failed to generate clip %d/%d: %s", index + 1, total, error)
                results.append(
                    ClipResult(
                        id=request.id,
                        file_name=file_name,
                        download_url="",
                        message=f"Failed to generate clip ({duration:.1f}s duration)",
                        error=error,
                    )
                )
            else:
                results.append(
                    ClipResult(
                        id=request.id,
                        file_name=path.name,
                        download_url=download_url_for(path.name),
                        message=f"Clip generated successfully ({duration:.1f}s duration)",
                        strategy=strategy,
                    )
                )
            if progress is not None:
                progress(index + 1, total)
        failed = sum(1 for r in results if not r.ok)
        logger.info("[clips] Clip generation complete: %d successful, %d failed", total - failed, failed)
        return results


def get_clip_extractor() -> ClipExtractor:
    """FastAPI dependency."""
    return ClipExtractor()
