"""Typesetting backend: a long-lived MathJax process driven over stdio.

The Node side (``js/typeset.js``) reads one JSON request per line and answers
with one JSON line ``{"svg": ..., "errors": [...]}``. Starting the process is
the only global initialization; afterwards each call is a single round trip.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Sequence

from mathsvg.config import Settings, settings as default_settings
from mathsvg.errors import BackendUnavailable

logger = logging.getLogger(__name__)


@dataclass
class TypesetResult:
    """Raw reply from the backend."""

    svg: Optional[str] = None
    errors: List[str] = field(default_factory=list)


def mathjax_format(format: str, display: bool = True) -> str:
    """Map a source format and mode to mathjax-node's ``format`` option.

    mathjax-node has no display flag; inline TeX is its own input format.
    """
    if format == "TeX" and not display:
        return "inline-TeX"
    return format


class Typesetter(Protocol):
    async def start(self) -> None: ...

    async def typeset(self, math: str, format: str, display: bool = True) -> TypesetResult: ...

    async def close(self) -> None: ...


class MathJaxNodeBackend:
    """Talks to ``node typeset.js`` through its stdin/stdout pipes."""

    def __init__(
        self,
        command: Sequence[str],
        timeout: Optional[float] = None,
        line_limit: int = 16 * 1024 * 1024,
    ) -> None:
        self.command = list(command)
        self.timeout = timeout
        self.line_limit = line_limit
        self._process: Optional[asyncio.subprocess.Process] = None
        self._lock = asyncio.Lock()

    @property
    def running(self) -> bool:
        return self._process is not None and self._process.returncode is None

    async def start(self) -> None:
        async with self._lock:
            await self._ensure_started()

    async def _ensure_started(self) -> None:
        if self.running:
            return

        logger.info("Starting typesetting backend: %s", " ".join(self.command))
        try:
            process = await asyncio.create_subprocess_exec(
                *self.command,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                limit=self.line_limit,
            )
        except OSError as exc:
            raise BackendUnavailable(f"Failed to start typesetting backend: {exc}") from exc

        self._process = process
        reply = await self._read_reply()
        if not reply.get("ready"):
            await self._discard()
            raise BackendUnavailable(f"Unexpected output from typesetting backend: {reply}")

    async def typeset(self, math: str, format: str, display: bool = True) -> TypesetResult:
        request = {"math": math, "format": mathjax_format(format, display), "svg": True}
        async with self._lock:
            await self._ensure_started()
            payload = json.dumps(request) + "\n"
            try:
                try:
                    self._process.stdin.write(payload.encode("utf-8"))
                    await self._process.stdin.drain()
                except (BrokenPipeError, ConnectionResetError) as exc:
                    await self._discard()
                    raise BackendUnavailable("Typesetting backend closed its input") from exc

                reply = await self._read_reply()
            except asyncio.CancelledError:
                # a late reply would be read as the answer to the next request
                await self._discard()
                raise

        errors = reply.get("errors") or []
        if isinstance(errors, str):
            errors = [errors]
        return TypesetResult(svg=reply.get("svg"), errors=list(errors))

    async def _read_reply(self) -> dict:
        try:
            if self.timeout is None:
                line = await self._process.stdout.readline()
            else:
                line = await asyncio.wait_for(self._process.stdout.readline(), self.timeout)
        except asyncio.TimeoutError as exc:
            await self._discard()
            raise BackendUnavailable(
                f"Typesetting backend timed out after {self.timeout} seconds"
            ) from exc
        except ValueError as exc:
            # reply longer than the stream limit; the pipe is out of sync now
            await self._discard()
            raise BackendUnavailable(f"Typesetting backend reply too large: {exc}") from exc

        if not line:
            await self._discard()
            raise BackendUnavailable("Typesetting backend exited unexpectedly")

        try:
            reply = json.loads(line)
        except json.JSONDecodeError as exc:
            await self._discard()
            raise BackendUnavailable(f"Unreadable reply from typesetting backend: {exc}") from exc
        if not isinstance(reply, dict):
            await self._discard()
            raise BackendUnavailable(f"Unexpected reply from typesetting backend: {reply!r}")
        return reply

    async def _discard(self) -> None:
        process, self._process = self._process, None
        if process is None or process.returncode is not None:
            return
        try:
            process.kill()
        except ProcessLookupError:
            pass  # already exited
        await process.wait()

    async def close(self) -> None:
        async with self._lock:
            process, self._process = self._process, None
            if process is None or process.returncode is not None:
                return
            logger.info("Stopping typesetting backend (pid %s)", process.pid)
            process.stdin.close()
            try:
                await asyncio.wait_for(process.wait(), 5)
            except asyncio.TimeoutError:
                process.kill()
                await process.wait()


def create_backend(settings: Optional[Settings] = None) -> MathJaxNodeBackend:
    settings = settings or default_settings
    return MathJaxNodeBackend(
        [settings.node_command, str(settings.typeset_script)],
        timeout=settings.backend_timeout_seconds,
        line_limit=settings.backend_line_limit,
    )
