"""Shared fixtures: a scripted stand-in for the typesetting backend."""

from typing import Iterable, Optional

import pytest

from mathsvg.backend import TypesetResult

SAMPLE_SVG = '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 10 10"><path d="M0 0"/></svg>'


class StubBackend:
    """Records every typeset call and answers from a fixed script."""

    def __init__(self, svg: Optional[str] = SAMPLE_SVG, errors: Iterable[str] = (), exc: Exception = None):
        self.svg = svg
        self.errors = list(errors)
        self.exc = exc
        self.calls = []
        self.started = 0
        self.closed = 0

    async def start(self):
        self.started += 1

    async def typeset(self, math, format, display=True):
        self.calls.append((math, format, display))
        if self.exc is not None:
            raise self.exc
        if self.errors:
            return TypesetResult(svg=None, errors=list(self.errors))
        return TypesetResult(svg=self.svg)

    async def close(self):
        self.closed += 1


@pytest.fixture
def backend():
    return StubBackend()


@pytest.fixture
def failing_backend():
    return StubBackend(errors=["TeX parse error: Missing close brace"])
