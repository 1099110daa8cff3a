"""Console output for the c64u CLI: text with optional color, or JSON."""

from __future__ import annotations

import json
from typing import Any, Iterable, Mapping, Optional, Sequence

from rich.console import Console
from rich.table import Table
from rich.text import Text

SUCCESS_STYLE = "bold bright_green"
ERROR_STYLE = "bold bright_red"
WARNING_STYLE = "bold bright_yellow"
INFO_STYLE = "bright_cyan"
LABEL_STYLE = "bold bright_cyan"
HEADER_STYLE = "bold underline bright_blue"
DIM_STYLE = "bright_black"


def _json_default(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).hex()
    return str(value)


class Formatter:
    """Render messages and data in text or JSON mode.

    Text mode writes successes and data to stdout and errors and warnings to
    stderr. JSON mode writes every document to stdout.
    """

    def __init__(
        self,
        json_mode: bool = False,
        no_color: bool = False,
        console: Optional[Console] = None,
        err_console: Optional[Console] = None,
    ):
        """Create the stdout and stderr consoles."""
        self.json_mode = json_mode
        self.no_color = no_color
        self.console = console or Console(
            no_color=no_color, highlight=False, soft_wrap=True
        )
        self.err_console = err_console or Console(
            stderr=True, no_color=no_color, highlight=False, soft_wrap=True
        )

    def _styled(self, text: str, style: str) -> Text:
        return Text(text) if self.no_color else Text(text, style=style)

    def print_json(self, data: Any) -> None:
        self.console.out(json.dumps(data, indent=2, default=_json_default))

    def success(
        self, message: str, data: Optional[Mapping[str, Any]] = None
    ) -> None:
        """Report a successful operation with optional details."""
        if self.json_mode:
            document: dict[str, Any] = {"success": True, "message": message}
            if data:
                document["data"] = dict(data)
            self.print_json(document)
            return
        self.console.print(
            Text.assemble(self._styled("✓", SUCCESS_STYLE), " ", message)
        )
        for key, value in (data or {}).items():
            self.console.print(
                Text.assemble(
                    "  ", self._styled(f"{key}:", LABEL_STYLE), " ", str(value)
                )
            )

    def error(self, message: str, errors: Optional[Iterable[str]] = None) -> None:
        """Report a failure; the caller decides the exit code."""
        details = list(errors or [])
        if self.json_mode:
            self.print_json(
                {"success": False, "message": message, "errors": details}
            )
            return
        self.err_console.print(
            Text.assemble(
                self._styled("✗", ERROR_STYLE),
                " ",
                self._styled(f"Error: {message}", ERROR_STYLE),
            )
        )
        for detail in details:
            self.err_console.print(
                Text.assemble("  ", self._styled("-", DIM_STYLE), " ", detail)
            )

    def info(self, message: str) -> None:
        """Print an informational line; silent in JSON mode."""
        if self.json_mode:
            return
        self.console.print(
            Text.assemble(self._styled("ℹ", INFO_STYLE), " ", message)
        )

    def warning(self, message: str) -> None:
        if self.json_mode:
            self.print_json({"warning": message})
            return
        self.err_console.print(
            Text.assemble(
                self._styled("⚠", WARNING_STYLE),
                " ",
                self._styled(f"Warning: {message}", WARNING_STYLE),
            )
        )

    def print_data(self, data: Any) -> None:
        """Print arbitrary data: JSON in JSON mode, a simple listing otherwise."""
        if self.json_mode:
            self.print_json(data)
            return
        if isinstance(data, str):
            self.console.out(data)
        elif isinstance(data, Mapping):
            for key, value in data.items():
                self.console.out(f"  {key}: {_text_value(value)}")
        elif isinstance(data, (list, tuple)):
            for item in data:
                self.console.out(f"  - {_text_value(item)}")
        else:
            self.console.out(str(data))

    def print_text(self, text: str) -> None:
        """Write preformatted text (e.g. a memory dump) without wrapping."""
        if text:
            self.console.out(text, end="")

    def print_key_value(self, key: str, value: Any) -> None:
        if self.json_mode:
            return
        self.console.print(
            Text.assemble(
                "  ", self._styled(f"{key + ':':<18}", LABEL_STYLE), " ", str(value)
            )
        )

    def print_header(self, text: str) -> None:
        if self.json_mode:
            return
        self.console.print(self._styled(text, HEADER_STYLE))

    def blank_line(self) -> None:
        if not self.json_mode:
            self.console.out("")

    def print_table(
        self, headers: Sequence[str], rows: Iterable[Sequence[Any]]
    ) -> None:
        """Print rows as a table, or as a list of objects in JSON mode."""
        materialized = [list(row) for row in rows]
        if self.json_mode:
            self.print_json(
                [dict(zip(headers, row)) for row in materialized]
            )
            return
        table = Table(
            *headers,
            show_header=True,
            header_style="bold",
            box=None,
            pad_edge=False,
        )
        for row in materialized:
            table.add_row(*(Text(str(cell)) for cell in row))
        self.console.print(table)


def _text_value(value: Any) -> str:
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=_json_default)
    return str(value)
