"""Request command -- send an authenticated request to the repository.

Implements ``nexusgem request METHOD PATH``. The setup flow runs first (so a
missing URL or credential is prompted for), then the request is sent
relative to the stored repository URL. The status line goes to stderr and
the body to stdout, so the output can be piped::

    nexusgem request GET api/v1/dependencies?gems=rails | jq .
    nexusgem request POST api/v1/gems --data @pkg/foo-1.0.0.gem \\
        --header Content-Type:application/octet-stream
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from nexusgem.commands import manager_from_context
from nexusgem.exceptions import InvalidUsageError, NexusError
from nexusgem.models import RequestDraft
from nexusgem.output import error, info, print_body, success, warning


def _parse_headers(raw_headers: list[str]) -> dict[str, str]:
    headers: dict[str, str] = {}
    for raw in raw_headers:
        name, sep, value = raw.partition(":")
        if not sep or not name.strip():
            raise InvalidUsageError(f"Invalid header {raw!r}; expected 'Name: value'")
        headers[name.strip()] = value.strip()
    return headers


def _read_body(data: Optional[str]) -> Optional[bytes]:
    if data is None:
        return None
    if data.startswith("@"):
        path = Path(data[1:]).expanduser()
        try:
            return path.read_bytes()
        except OSError as exc:
            raise InvalidUsageError(f"Cannot read request body from {path}: {exc}") from exc
    return data.encode("utf-8")


def request_command(
    ctx: typer.Context,
    method: str = typer.Argument(help="HTTP method: GET, POST, PUT or DELETE."),
    path: str = typer.Argument(help="Path relative to the repository URL."),
    data: Optional[str] = typer.Option(
        None, "--data", "-d", help="Request body, or @FILE to read it from a file."
    ),
    header: list[str] = typer.Option(
        [], "--header", "-H", help="Extra header as 'Name: value'. Repeatable."
    ),
) -> None:
    """Send an authenticated request and print the response body.

    Raises:
        typer.Exit: With code 1 when the server answers with an error
            status, or with the error's exit code on other failures.
    """
    manager = manager_from_context(ctx)
    try:
        headers = _parse_headers(header)
        body = _read_body(data)

        def customize(draft: RequestDraft) -> None:
            draft.headers.update(headers)
            if body is not None:
                draft.content = body

        manager.setup()
        response = manager.make_request(method, path, customize)
    except NexusError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    status = f"HTTP {response.status_code} {response.reason_phrase}".rstrip()
    if response.is_success:
        success(status)
    elif response.status_code in (401, 403):
        warning(f"{status} -- check your credentials (nexusgem --nexus-clear setup)")
    else:
        info(status)

    if response.content:
        print_body(response.text, response.headers.get("content-type", ""))
    if response.is_error:
        raise typer.Exit(code=1)
