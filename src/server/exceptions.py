"""Shared API exceptions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class AppError(Exception):
    message: str
    status_code: int = 400
    code: str = "app_error"
    headers: Optional[dict[str, str]] = None


class InvalidRequest(AppError):
    def __init__(self, message: str) -> None:
        super().__init__(message=message, status_code=400, code="invalid_request")
