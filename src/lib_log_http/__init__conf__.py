"""Static package metadata surfaced by the CLI banner."""

from __future__ import annotations

from typing import Callable

name = "lib_log_http"
title = "Ship structured log records to HTTP endpoints"
version = "0.1.0"
homepage = "https://github.com/bitranox/lib_log_http"
author = "bitranox"
author_email = "bitranox@gmail.com"
shell_command = "lib_log_http"


def print_info(writer: Callable[[str], None] | None = None) -> None:
    """Write the metadata banner line by line.

    Examples
    --------
    >>> lines = []
    >>> print_info(writer=lines.append)
    >>> lines[0]
    'Info for lib_log_http:\\n'
    """

    emit = writer or (lambda text: print(text, end=""))
    fields = (
        ("name", name),
        ("title", title),
        ("version", version),
        ("homepage", homepage),
        ("author", author),
        ("author_email", author_email),
        ("shell_command", shell_command),
    )
    pad = max(len(label) for label, _ in fields)
    emit(f"Info for {name}:\n")
    emit("\n")
    for label, value in fields:
        emit(f"    {label.ljust(pad)} = {value}\n")
