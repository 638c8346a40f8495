"""Line-delimited stdio session.

``rpc`` mode answers every line with an RpcResponse line and survives bad
input. ``plain`` mode reads ``{"content": ..., "inline": ...}`` objects,
answers with raw SVG lines, and stops at the first failure.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import TextIO

from mathsvg.backend import Typesetter
from mathsvg.conversion import convert_markup
from mathsvg.errors import MathSvgError, TransportError, ValidationError
from mathsvg.rpc import RpcDispatcher

logger = logging.getLogger(__name__)

SESSION_MODES = ("rpc", "plain")


async def _read_line(stream: TextIO) -> str:
    return await asyncio.to_thread(stream.readline)


def _write_line(stream: TextIO, text: str) -> None:
    stream.write(text + "\n")
    stream.flush()


async def _plain_request(backend: Typesetter, line: str) -> str:
    try:
        request = json.loads(line)
    except ValueError as exc:
        raise TransportError(f"Malformed request line: {exc}") from exc
    if not isinstance(request, dict):
        raise TransportError("Malformed request line: expected a JSON object")

    method = request.get("method", "mathjax")
    if method != "mathjax":
        raise TransportError(f"Unsupported method: {method}")
    inline = request.get("inline", False)
    if not isinstance(inline, bool):
        raise ValidationError("inline must be a boolean")

    return await convert_markup(backend, request.get("content"), display=not inline)


async def run_session(
    backend: Typesetter,
    stdin: TextIO,
    stdout: TextIO,
    stderr: TextIO,
    mode: str = "rpc",
    dispatcher: RpcDispatcher | None = None,
) -> int:
    """Serve requests from ``stdin`` until it closes; return the exit code."""
    if mode not in SESSION_MODES:
        raise ValueError(f"Unknown session mode: {mode}")

    if mode == "rpc":
        dispatcher = dispatcher or RpcDispatcher(backend)
        logger.info("Running in JSON-RPC mode over stdio, one request per line")
    else:
        logger.info("Running in stdio mode, one request per line")

    while True:
        line = await _read_line(stdin)
        if not line:
            logger.info("Input stream closed")
            return 0
        line = line.rstrip("\r\n")

        if mode == "rpc":
            response = await dispatcher.handle_text(line)
            _write_line(stdout, response.to_line())
            continue

        try:
            svg = await _plain_request(backend, line)
        except MathSvgError as exc:
            _write_line(stderr, f"Error: {exc.message}")
            return 1
        _write_line(stdout, " ".join(svg.splitlines()))
