"""Output formatting with strict stdout/stderr discipline.

* **stdout** carries data only: API results, URLs, tables. This is what
  downstream tools pipe and parse.
* **stderr** carries every diagnostic: status lines, warnings, errors and
  ``--verbose`` debug lines.

``AUTO`` picks Rich rendering for an interactive terminal and plain text
otherwise; ``NO_COLOR``, ``TERM=dumb`` and ``--no-color`` disable colour.

Plain mode knows the shape of VK results: the ``{"response": ...}``
envelope is stripped and a ``{"count": N, "items": [...]}`` page is
printed as a tab-separated table of its items, so
``vksdk --plain call friends.get fields=city | cut -f1`` works.

The library side of vksdk reports through the same channel: the gateways
call :func:`get_output` and emit ``debug`` lines that only appear with
``--verbose``. Nothing that carries the app secret or an access token is
ever passed here.
"""

from __future__ import annotations

import json
import os
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table


class OutputFormat(str, Enum):
    """Output formats selectable with ``--json`` / ``--plain``.

    ``AUTO`` resolves to ``RICH`` on an interactive, colour-capable
    terminal and to ``PLAIN`` otherwise.
    """

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


@dataclass(frozen=True)
class _Level:
    prefix: str
    markup: str
    quiet_hides: bool


_LEVELS = {
    "info": _Level("", "{}", True),
    "success": _Level("", "[green]{}[/green]", True),
    "suggest": _Level("→ ", "[dim]→ {}[/dim]", True),
    "warning": _Level("Warning: ", "[yellow]Warning:[/yellow] {}", False),
    "error": _Level("Error: ", "[bold red]Error:[/bold red] {}", False),
    "debug": _Level("[debug] ", "[dim]\\[debug] {}[/dim]", False),
}


def unwrap_result(data: Any) -> Any:
    """Strip the VK ``response`` envelope and an ``items`` page wrapper.

    Anything else, error payloads included, is returned unchanged.
    """
    if isinstance(data, dict) and list(data) == ["response"]:
        data = data["response"]
    if (
        isinstance(data, dict)
        and isinstance(data.get("items"), list)
        and set(data) <= {"count", "items", "next_from"}
    ):
        data = data["items"]
    return data


def _cell(value: Any) -> str:
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    if value is None:
        return ""
    return str(value)


class OutputManager:
    """Routes data to stdout and diagnostics to stderr in the chosen format.

    Args:
        format: Desired output format. ``AUTO`` is resolved from the TTY.
        no_color: Disable colour and Rich markup.
        quiet: Hide info, success and suggestion lines.
        verbose: Show debug lines.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose

        if format == OutputFormat.AUTO:
            rich_ok = _is_tty() and not self._no_color
            format = OutputFormat.RICH if rich_ok else OutputFormat.PLAIN
        self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=(format == OutputFormat.RICH),
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def is_quiet(self) -> bool:
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    # ------------------------------------------------------------------ #
    # Data (stdout)
    # ------------------------------------------------------------------ #

    def format_response(self, data: Any) -> None:
        """Render a call result: decoded JSON or raw body text."""
        if self._format == OutputFormat.JSON:
            self._render_json(data)
        elif self._format == OutputFormat.PLAIN:
            self._render_plain(unwrap_result(data))
        else:
            self._render_rich(data)

    def print_data(self, text: str) -> None:
        print(text, file=sys.stdout, flush=True)

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Print rows as a Rich table, a JSON array of objects, or TSV."""
        if self._format == OutputFormat.JSON:
            records = [dict(zip(headers, row)) for row in rows]
            self.print_data(json.dumps(records, indent=2, ensure_ascii=False))
            return
        if self._format == OutputFormat.PLAIN:
            for line in [headers, *rows]:
                self.print_data("\t".join(line))
            return
        table = Table(title=title, header_style="bold cyan")
        for header in headers:
            table.add_column(header)
        for row in rows:
            table.add_row(*(escape(cell) for cell in row))
        self._stdout.print(table)

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def info(self, message: str) -> None:
        self._emit("info", message)

    def success(self, message: str) -> None:
        self._emit("success", message)

    def suggest(self, message: str) -> None:
        """A next-step hint, e.g. the command to run after ``auth url``."""
        self._emit("suggest", message)

    def warning(self, message: str) -> None:
        self._emit("warning", message)

    def error(self, message: str) -> None:
        self._emit("error", message)

    def debug(self, message: str) -> None:
        if self._verbose:
            self._emit("debug", message)

    def _emit(self, level: str, message: str) -> None:
        style = _LEVELS[level]
        if style.quiet_hides and self._quiet:
            return
        if self._no_color:
            print(f"{style.prefix}{message}", file=sys.stderr, flush=True)
        else:
            self._stderr.print(style.markup.format(escape(message)))

    # ------------------------------------------------------------------ #
    # Renderers
    # ------------------------------------------------------------------ #

    def _render_json(self, data: Any) -> None:
        if isinstance(data, str):
            try:
                data = json.loads(data)
            except ValueError:
                self.print_data(data)
                return
        self.print_data(json.dumps(data, indent=2, ensure_ascii=False, default=str))

    def _render_plain(self, data: Any) -> None:
        if isinstance(data, dict):
            for key, value in data.items():
                self.print_data(f"{key}\t{_cell(value)}")
        elif isinstance(data, list) and data and all(isinstance(i, dict) for i in data):
            headers: list[str] = []
            for item in data:
                headers.extend(k for k in item if k not in headers)
            rows = [[_cell(item.get(h)) for h in headers] for item in data]
            self.print_table(headers, rows)
        elif isinstance(data, list):
            for item in data:
                self.print_data(_cell(item))
        else:
            self.print_data(_cell(data))

    def _render_rich(self, data: Any) -> None:
        if isinstance(data, (dict, list)):
            text = json.dumps(data, indent=2, ensure_ascii=False, default=str)
            self._stdout.print(Syntax(text, "json", theme="monokai", word_wrap=True))
        else:
            self._stdout.print(str(data), markup=False)


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


# ------------------------------------------------------------------ #
# Process-wide instance, installed by the CLI callback
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the global :class:`OutputManager`, creating a default one lazily."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Drop the global instance (used by tests)."""
    global _output
    _output = None


def format_response(data: Any) -> None:
    get_output().format_response(data)


def print_data(text: str) -> None:
    get_output().print_data(text)


def print_table(
    headers: list[str],
    rows: list[list[str]],
    title: Optional[str] = None,
) -> None:
    get_output().print_table(headers, rows, title)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def suggest(message: str) -> None:
    get_output().suggest(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)


def debug(message: str) -> None:
    get_output().debug(message)
