"""Tests for request validation and the conversion contract."""

import pytest

from mathsvg.constants import ALLOWED_FORMATS
from mathsvg.conversion import ConversionRequest, build_request, convert, convert_markup
from mathsvg.errors import BackendError, ValidationError

from conftest import SAMPLE_SVG, StubBackend


class TestBuildRequest:

    def test_defaults(self):
        request = build_request("x^2")
        assert request == ConversionRequest(markup="x^2", source_format="TeX", display=True)

    def test_empty_format_defaults_to_tex(self):
        assert build_request("x", "").source_format == "TeX"

    @pytest.mark.parametrize("markup", [None, "", "   ", "\n\t"])
    def test_missing_markup(self, markup):
        with pytest.raises(ValidationError, match="Equation is required"):
            build_request(markup)

    def test_non_string_markup(self):
        with pytest.raises(ValidationError, match="must be a string"):
            build_request(42)

    @pytest.mark.parametrize("fmt", ["tex", "LaTeX", "mathml", 3])
    def test_invalid_format_names_allowed_set(self, fmt):
        with pytest.raises(ValidationError) as excinfo:
            build_request("x", fmt)
        assert "TeX, MathML, AsciiMath" in excinfo.value.message

    def test_inline_flag(self):
        assert build_request("x", "TeX", False).display is False

    def test_non_boolean_display(self):
        with pytest.raises(ValidationError):
            build_request("x", "TeX", "inline")


class TestConvert:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("fmt", ALLOWED_FORMATS)
    async def test_every_format_yields_svg(self, backend, fmt):
        svg = await convert(build_request("x", fmt), backend)
        assert "<svg" in svg
        assert backend.calls == [("x", fmt, True)]

    @pytest.mark.asyncio
    async def test_svg_is_returned_unmodified(self):
        backend = StubBackend(svg="<svg>...</svg>")
        svg = await convert(ConversionRequest(markup="x^2", source_format="TeX"), backend)
        assert svg == "<svg>...</svg>"

    @pytest.mark.asyncio
    async def test_backend_errors_are_joined(self):
        backend = StubBackend(errors=["first", "second"])
        with pytest.raises(BackendError) as excinfo:
            await convert(build_request("\\frac{"), backend)
        assert excinfo.value.message == "MathJax error: first, second"
        assert excinfo.value.messages == ["first", "second"]

    @pytest.mark.asyncio
    async def test_empty_svg_is_an_error(self):
        with pytest.raises(BackendError):
            await convert(build_request("x"), StubBackend(svg=""))

    @pytest.mark.asyncio
    async def test_validation_failure_skips_backend(self, backend):
        with pytest.raises(ValidationError):
            await convert_markup(backend, "")
        with pytest.raises(ValidationError):
            await convert_markup(backend, "x", "Markdown")
        assert backend.calls == []

    @pytest.mark.asyncio
    async def test_no_caching(self, backend):
        await convert_markup(backend, "x")
        await convert_markup(backend, "x")
        assert len(backend.calls) == 2

    @pytest.mark.asyncio
    async def test_sample_svg_passthrough(self, backend):
        assert await convert_markup(backend, "a+b") == SAMPLE_SVG
