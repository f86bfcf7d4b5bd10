"""Static distribution metadata shown by ``lib_log_slack info``.

Kept in sync with ``pyproject.toml``; the CLI banner and
:func:`lib_log_slack.summary_info` read from here instead of querying
``importlib.metadata`` so the banner also works from a source checkout.
"""

from __future__ import annotations

from typing import Callable

name = "lib_log_slack"
title = "Forward structured log records to Slack incoming webhooks"
version = "0.1.0"
homepage = "https://github.com/lib-log-slack/lib_log_slack"
author = "lib_log_slack maintainers"
author_email = "maintainers@lib-log-slack.invalid"
shell_command = "lib_log_slack"


def print_info(writer: Callable[[str], None] | None = None) -> None:
    """Emit the metadata banner line by line.

    Parameters
    ----------
    writer:
        Callable receiving each line (newline included); defaults to stdout.

    Examples
    --------
    >>> lines = []
    >>> print_info(writer=lines.append)
    >>> lines[0]
    'Info for lib_log_slack:\\n'
    """

    fields = [
        ("name", name),
        ("title", title),
        ("version", version),
        ("homepage", homepage),
        ("author", author),
        ("author_email", author_email),
        ("shell_command", shell_command),
    ]
    pad = max(len(label) for label, _ in fields)
    emit = writer if writer is not None else (lambda text: print(text, end=""))
    emit(f"Info for {name}:\n")
    emit("\n")
    for label, value in fields:
        emit(f"    {label:<{pad}} = {value}\n")
