"""JSON-RPC style envelopes and method dispatch.

Shared by the HTTP ``/rpc`` endpoint and the stdio session. Every reply echoes
the request id and carries exactly one of ``result`` or ``error``.
"""

from __future__ import annotations

import base64
import json
import logging
import uuid
from typing import Any, Awaitable, Callable, Dict, Optional

from pydantic import BaseModel

from mathsvg.backend import Typesetter
from mathsvg.constants import (
    APPLICATION_ERROR,
    DEFAULT_BITMAP_HEIGHT,
    DEFAULT_BITMAP_WIDTH,
    JSONRPC_VERSION,
    PARSE_ERROR,
    SVG_MEDIA_TYPE,
)
from mathsvg.conversion import convert_markup
from mathsvg.errors import MathSvgError, TransportError, ValidationError

logger = logging.getLogger(__name__)


class RpcError(BaseModel):
    code: int
    message: str


class RpcResponse(BaseModel):
    jsonrpc: str = JSONRPC_VERSION
    id: Any = None
    result: Any = None
    error: Optional[RpcError] = None

    @classmethod
    def success(cls, request_id: Any, result: Any) -> "RpcResponse":
        return cls(id=request_id, result=result)

    @classmethod
    def failure(cls, request_id: Any, code: int, message: str) -> "RpcResponse":
        return cls(id=request_id, error=RpcError(code=code, message=message))

    def to_line(self) -> str:
        return json.dumps(self.model_dump(), separators=(",", ":"))


def parse_error(exc: Exception) -> RpcResponse:
    return RpcResponse.failure(None, PARSE_ERROR, f"Parse error: {exc}")


def _int_param(params: Dict[str, Any], name: str, default: int) -> int:
    value = params.get(name)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError(f"{name} must be a positive integer")
    return value


class RpcDispatcher:
    """Routes an envelope to its method and wraps the outcome."""

    def __init__(
        self,
        backend: Typesetter,
        bitmap_width: int = DEFAULT_BITMAP_WIDTH,
        bitmap_height: int = DEFAULT_BITMAP_HEIGHT,
    ) -> None:
        self.backend = backend
        self.bitmap_width = bitmap_width
        self.bitmap_height = bitmap_height
        self._methods: Dict[str, Callable[[Dict[str, Any]], Awaitable[Any]]] = {
            "convert": self._convert,
            "paint": self._paint,
            "render_bitmap": self._render_bitmap,
        }

    async def handle_text(self, text: str) -> RpcResponse:
        try:
            payload = json.loads(text)
        except ValueError as exc:
            return parse_error(exc)
        return await self.handle(payload)

    async def handle(self, payload: Any) -> RpcResponse:
        if not isinstance(payload, dict):
            return RpcResponse.failure(None, APPLICATION_ERROR, "Invalid request: expected a JSON object")

        request_id = payload.get("id")
        try:
            method = payload.get("method")
            params = payload.get("params")
            if params is None:
                params = {}
            if not isinstance(params, dict):
                raise ValidationError("params must be an object")
            handler = self._methods.get(method) if isinstance(method, str) else None
            if handler is None:
                raise TransportError(f"Unknown method: {method}")
            result = await handler(params)
        except MathSvgError as exc:
            return RpcResponse.failure(request_id, APPLICATION_ERROR, exc.message)
        except Exception as exc:
            logger.exception("RPC method %r failed", payload.get("method"))
            return RpcResponse.failure(request_id, APPLICATION_ERROR, str(exc) or type(exc).__name__)
        return RpcResponse.success(request_id, result)

    async def _convert(self, params: Dict[str, Any]) -> str:
        return await convert_markup(
            self.backend,
            params.get("equation"),
            params.get("format"),
            params.get("display"),
        )

    async def _paint(self, params: Dict[str, Any]) -> Dict[str, str]:
        inline = params.get("inline", False)
        if not isinstance(inline, bool):
            raise ValidationError("inline must be a boolean")
        svg = await convert_markup(self.backend, params.get("content"), params.get("format"), not inline)
        return {"svg": svg}

    async def _render_bitmap(self, params: Dict[str, Any]) -> Dict[str, Any]:
        # Placeholder: the SVG is returned base64-encoded, nothing is rasterized.
        paint = params.get("paint")
        if not isinstance(paint, dict):
            raise ValidationError("paint parameters are required")
        width = _int_param(params, "width", self.bitmap_width)
        height = _int_param(params, "height", self.bitmap_height)

        painted = await self._paint(paint)
        return {
            "id": uuid.uuid4().hex,
            "data": base64.b64encode(painted["svg"].encode("utf-8")).decode("ascii"),
            "encoding": "base64",
            "mime_type": SVG_MEDIA_TYPE,
            "width": width,
            "height": height,
            "placeholder": True,
        }
