"""Pydantic models for the legacy conversion endpoint."""

from typing import Any

from pydantic import BaseModel, ConfigDict


class EquationRequest(BaseModel):
    """Fields are left loose; the shared validator decides what is acceptable."""

    model_config = ConfigDict(extra="ignore")

    equation: Any = None
    format: Any = None
    display: Any = None
