"""Click command line for previewing and forwarding NDJSON log streams.

Purpose
-------
Let operators pipe a structured log stream into Slack
(``app | lib_log_slack forward``) or inspect the generated payloads offline.

Contents
--------
* :func:`cli` - command group with the ``--use-dotenv`` toggle.
* ``info`` / ``preview`` / ``forward`` subcommands.

System Role
-----------
Presentation layer. Configuration flows through :mod:`lib_log_slack.config`,
delivery through :func:`lib_log_slack.create_transport`; diagnostics are
rendered on stderr by Rich.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator
from typing import IO, Any

import click
from rich.console import Console
from rich.logging import RichHandler

from . import __init__conf__
from . import config as log_config
from .adapters.framing import FrameSplitter
from .application.use_cases.build_payload import build_payload
from .domain import TransportOptions
from .lib_log_slack import create_transport, summary_info

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
READ_SIZE = 64 * 1024

logger = logging.getLogger(__name__)


def _configure_diagnostics(verbose: bool) -> None:
    """Route package diagnostics to stderr through Rich."""
    package_logger = logging.getLogger("lib_log_slack")
    if any(isinstance(handler, RichHandler) for handler in package_logger.handlers):
        return
    handler = RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=verbose)
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG if verbose else logging.INFO)


def _resolve_options(ctx: click.Context, **overrides: Any) -> TransportOptions:
    try:
        return log_config.options_from_env(**overrides)
    except ValueError as exc:
        raise click.UsageError(str(exc), ctx=ctx) from exc


def _read_chunk(stream: IO[bytes]) -> bytes:
    """Return the bytes available now, up to ``READ_SIZE``; ``b""`` at end of input.

    ``read1`` returns as soon as a pipe has data instead of waiting for a full
    buffer, so records from a long-running producer are forwarded as they arrive.
    """
    read1 = getattr(stream, "read1", None)
    if read1 is not None:
        return read1(READ_SIZE)
    return stream.read(READ_SIZE)


async def _read_records(stream: IO[bytes]) -> AsyncIterator[Any]:
    splitter = FrameSplitter()
    while True:
        chunk = _read_chunk(stream)
        batch = splitter.feed(chunk) if chunk else splitter.close()
        for frame in batch.rejected:
            logger.error("Dropping unparseable log frame (%d chars)", len(frame))
        for record in batch.records:
            yield record
        if not chunk:
            return


@click.group(invoke_without_command=True, context_settings=CONTEXT_SETTINGS)
@click.option(
    "--use-dotenv/--no-use-dotenv",
    default=None,
    help=f"Load the nearest .env before reading configuration (default from {log_config.DOTENV_ENV_VAR}).",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug diagnostics and full tracebacks.")
@click.version_option(version=__init__conf__.version, prog_name=__init__conf__.shell_command, message="%(version)s")
@click.pass_context
def cli(ctx: click.Context, use_dotenv: bool | None, verbose: bool) -> None:
    """Forward structured JSON log records to a Slack incoming webhook."""

    if use_dotenv is None:
        use_dotenv = log_config.env_bool(log_config.DOTENV_ENV_VAR, False)
    if use_dotenv:
        log_config.enable_dotenv()
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    if ctx.invoked_subcommand is None:
        click.echo(summary_info(), nl=False)


@cli.command("info", context_settings=CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print package metadata."""

    click.echo(summary_info(), nl=False)


@cli.command("preview", context_settings=CONTEXT_SETTINGS)
@click.argument("source", type=click.File("rb"), default="-")
@click.option("--channel-key", default=None, help="Binding that overrides the destination channel.")
@click.option("--message-key", default=None, help="Record key holding the message text.")
@click.option("--image-url-key", default=None, help="Binding holding the attachment image URL.")
@click.pass_context
def cli_preview(
    ctx: click.Context,
    source: IO[bytes],
    channel_key: str | None,
    message_key: str | None,
    image_url_key: str | None,
) -> None:
    """Print the webhook payload for every record in SOURCE without sending it."""

    options = _resolve_options(ctx, channel_key=channel_key, message_key=message_key, image_url_key=image_url_key)
    console = Console()
    splitter = FrameSplitter()

    def _render(records: list[Any], rejected: list[str]) -> None:
        for frame in rejected:
            click.echo(f"skipped unparseable frame ({len(frame)} chars)", err=True)
        for record in records:
            try:
                payload = build_payload(record, options)
            except (TypeError, ValueError) as exc:
                click.echo(f"skipped malformed record: {exc}", err=True)
                continue
            console.print_json(json.dumps(payload, default=str))

    while chunk := _read_chunk(source):
        batch = splitter.feed(chunk)
        _render(batch.records, batch.rejected)
    batch = splitter.close()
    _render(batch.records, batch.rejected)


@cli.command("forward", context_settings=CONTEXT_SETTINGS)
@click.argument("source", type=click.File("rb"), default="-")
@click.option("--webhook-url", default=None, help="Incoming Webhook URL (default: SLACK_WEBHOOK_URL).")
@click.option("--channel-key", default=None, help="Binding that overrides the destination channel.")
@click.option("--message-key", default=None, help="Record key holding the message text.")
@click.option("--image-url-key", default=None, help="Binding holding the attachment image URL.")
@click.option("--keep-alive/--no-keep-alive", default=None, help="Reuse one HTTP connection pool.")
@click.option("--timeout", type=float, default=None, help="HTTP timeout in seconds.")
@click.option(
    "--concurrent",
    is_flag=True,
    help="Send the records of each read chunk concurrently instead of strictly in order.",
)
@click.pass_context
def cli_forward(
    ctx: click.Context,
    source: IO[bytes],
    webhook_url: str | None,
    channel_key: str | None,
    message_key: str | None,
    image_url_key: str | None,
    keep_alive: bool | None,
    timeout: float | None,
    concurrent: bool,
) -> None:
    """Forward every JSON record read from SOURCE (default: stdin) to Slack.

    Delivery failures are reported on stderr and never change the exit code.
    """

    _configure_diagnostics(bool(ctx.obj and ctx.obj.get("verbose")))
    options = _resolve_options(
        ctx,
        webhook_url=webhook_url,
        channel_key=channel_key,
        message_key=message_key,
        image_url_key=image_url_key,
        keep_alive=keep_alive,
        timeout=timeout,
    )
    if not options.webhook_url:
        raise click.UsageError(
            f"No webhook URL configured; pass --webhook-url or set {log_config.WEBHOOK_URL_ENV_VAR}",
            ctx=ctx,
        )
    asyncio.run(_forward(options, source, concurrent=concurrent))


async def _forward(options: TransportOptions, source: IO[bytes], *, concurrent: bool) -> None:
    async with create_transport(options) as transport:
        if concurrent:
            while chunk := _read_chunk(source):
                await transport.write(chunk)
            return
        await transport.consume(_read_records(source))


__all__ = ["cli"]
