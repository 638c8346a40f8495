"""Conversion domain exceptions."""

from server.exceptions import AppError


class ConvertFailed(AppError):
    def __init__(self, message: str) -> None:
        super().__init__(message=message, status_code=500, code="convert_failed")
