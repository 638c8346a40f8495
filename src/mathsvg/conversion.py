"""Request validation and the single conversion entry point used by every transport."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from mathsvg.backend import Typesetter
from mathsvg.constants import ALLOWED_FORMATS, DEFAULT_FORMAT
from mathsvg.errors import BackendError, ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversionRequest:
    markup: str
    source_format: str = DEFAULT_FORMAT
    display: bool = True


def build_request(
    markup: Any,
    source_format: Any = None,
    display: Any = None,
) -> ConversionRequest:
    """Validate raw transport fields into a ConversionRequest.

    Raises:
        ValidationError: markup is missing or blank, the format is not one of
            ALLOWED_FORMATS, or display is not a boolean.
    """
    if markup is None or (isinstance(markup, str) and not markup.strip()):
        raise ValidationError("Equation is required")
    if not isinstance(markup, str):
        raise ValidationError("Equation must be a string")

    if source_format is None or source_format == "":
        source_format = DEFAULT_FORMAT
    if source_format not in ALLOWED_FORMATS:
        raise ValidationError(f"Invalid format. Supported formats: {', '.join(ALLOWED_FORMATS)}")

    if display is None:
        display = True
    if not isinstance(display, bool):
        raise ValidationError("Display mode must be a boolean")

    return ConversionRequest(markup=markup, source_format=source_format, display=display)


async def convert(request: ConversionRequest, backend: Typesetter) -> str:
    """Typeset one request and return the backend's SVG unmodified."""
    result = await backend.typeset(request.markup, request.source_format, request.display)
    if result.errors:
        logger.warning("Backend rejected %s input: %s", request.source_format, result.errors)
        raise BackendError(result.errors)
    if not result.svg:
        raise BackendError(["backend returned no SVG"])
    return result.svg


async def convert_markup(
    backend: Typesetter,
    markup: Any,
    source_format: Optional[Any] = None,
    display: Optional[Any] = None,
) -> str:
    return await convert(build_request(markup, source_format, display), backend)
