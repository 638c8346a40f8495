"""mathsvg - CLI Entry Point."""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Callable, Optional

import click

from mathsvg.backend import Typesetter, create_backend
from mathsvg.config import settings
from mathsvg.constants import DEFAULT_FORMAT
from mathsvg.conversion import ConversionRequest, build_request, convert
from mathsvg.errors import MathSvgError
from mathsvg.rpc import RpcDispatcher
from mathsvg.stdio import SESSION_MODES, run_session

logger = logging.getLogger(__name__)

BackendFactory = Callable[[], Typesetter]

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _backend_factory(ctx: click.Context) -> BackendFactory:
    return ctx.obj.get("backend_factory") or create_backend


def _read_stdin() -> str:
    with click.get_text_stream("stdin") as stream:
        return "\n".join(line.rstrip("\r\n") for line in stream)


async def _convert_once(backend: Typesetter, request: ConversionRequest) -> str:
    await backend.start()
    try:
        return await convert(request, backend)
    finally:
        await backend.close()


async def _stdio_session(backend: Typesetter, mode: str) -> int:
    dispatcher = RpcDispatcher(
        backend,
        bitmap_width=settings.bitmap_default_width,
        bitmap_height=settings.bitmap_default_height,
    )
    await backend.start()
    try:
        return await run_session(
            backend,
            click.get_text_stream("stdin"),
            click.get_text_stream("stdout"),
            click.get_text_stream("stderr"),
            mode=mode,
            dispatcher=dispatcher,
        )
    finally:
        await backend.close()


@click.group()
@click.option("--log-level", type=click.Choice(LOG_LEVELS, case_sensitive=False), default=settings.log_level,
              show_default=True, help="Logging level for stderr diagnostics")
@click.pass_context
def cli(ctx: click.Context, log_level: str):
    """Convert TeX, MathML or AsciiMath equations to SVG."""
    ctx.ensure_object(dict)
    _configure_logging(log_level)


@cli.command("convert")
@click.option("-i", "--input", "equation", help="Input equation (read from stdin when omitted)")
@click.option("-f", "--format", "fmt", default=DEFAULT_FORMAT, show_default=True, help="Input format (TeX, MathML, AsciiMath)")
@click.option("-o", "--output", type=click.Path(dir_okay=False, path_type=Path), help="Output file (defaults to stdout)")
@click.option("--inline", is_flag=True, help="Typeset in inline rather than display mode")
@click.pass_context
def convert_command(ctx: click.Context, equation: Optional[str], fmt: str, output: Optional[Path], inline: bool):
    """Convert a single equation."""
    if not equation:
        equation = _read_stdin().strip()
        if not equation:
            click.echo("Error: No equation provided via --input or stdin.", err=True)
            sys.exit(1)

    try:
        request = build_request(equation, fmt, not inline)
        backend = _backend_factory(ctx)()
        svg = asyncio.run(_convert_once(backend, request))
        if output:
            output.write_text(svg, encoding="utf-8")
    except MathSvgError as e:
        click.echo(f"Conversion failed: {e.message}", err=True)
        sys.exit(1)
    except OSError as e:
        click.echo(f"Conversion failed: {e}", err=True)
        sys.exit(1)
    except Exception as e:
        logger.exception("Unexpected conversion failure")
        click.echo(f"Fatal error: {e}", err=True)
        sys.exit(1)

    if output:
        click.echo(f"SVG written to {output}", err=True)
    else:
        click.echo(svg)


@cli.command()
@click.option("--host", default=None, help="Interface to bind (default from server settings)")
@click.option("--port", type=int, default=None, help="Server port (default from server settings)")
@click.pass_context
def serve(ctx: click.Context, host: Optional[str], port: Optional[int]):
    """Run as a web server."""
    import uvicorn

    from server.config import settings as server_settings
    from server.main import create_app

    app = create_app(backend=_backend_factory(ctx)())
    uvicorn.run(
        app,
        host=host or server_settings.host,
        port=port or server_settings.port,
        log_level=server_settings.log_level.lower(),
    )


@cli.command()
@click.option("--mode", type=click.Choice(SESSION_MODES), default="rpc", show_default=True,
              help="rpc: JSON-RPC envelopes per line; plain: {content, inline} lines, stop on first error")
@click.pass_context
def stdio(ctx: click.Context, mode: str):
    """Run a request loop over stdin/stdout."""
    backend = _backend_factory(ctx)()
    try:
        code = asyncio.run(_stdio_session(backend, mode))
    except MathSvgError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)
    except Exception as e:
        logger.exception("Stdio session failed")
        click.echo(f"Fatal error: {e}", err=True)
        sys.exit(1)
    sys.exit(code)


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
