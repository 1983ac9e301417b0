from __future__ import annotations

from typing import Optional, Sequence

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .controller import SelectionView, State
from .fuzzy import MatchSpan

# Lines used around the result rows: panel border (2), query line, rule, prompt, spare
_CHROME_LINES = 6


def highlight_text(value: str, spans: Sequence[MatchSpan], style: str = "bold blue") -> Text:
    """Return ``value`` as rich Text with each matched span styled."""
    text = Text(value)
    for span in spans:
        text.stylize(style, span.start, span.end)
    return text


class RichRenderer:
    """Draws a ``SelectionView`` to a rich console, one full frame per call."""

    def __init__(
        self,
        console: Optional[Console] = None,
        title: str = "Select books",
        highlight_style: str = "bold blue",
        clear: bool = True,
    ) -> None:
        self.console = console or Console()
        self.title = title
        self.highlight_style = highlight_style
        self.clear = clear

    @property
    def viewport_height(self) -> int:
        return max(self.console.size.height - _CHROME_LINES, 1)

    def _query_line(self, view: SelectionView) -> Text:
        line = Text("🔎 ", style="bold cyan")
        before = view.query_text[:view.cursor]
        at = view.query_text[view.cursor:view.cursor + 1] or " "
        after = view.query_text[view.cursor + 1:]
        line.append(before)
        line.append(at, style="reverse")
        line.append(after)
        return line

    def _row(self, row) -> Text:
        marker = Text("[x] " if row.is_selected else "[ ] ", style="green" if row.is_selected else "dim")
        line = marker + highlight_text(row.display_text, row.spans, self.highlight_style)
        # One terminal line per row keeps the viewport height accurate
        line.no_wrap = True
        line.overflow = "ellipsis"
        if row.is_highlighted:
            line.stylize("reverse")
        return line

    def render(self, view: SelectionView) -> int:
        parts = []
        if view.state is State.EDITING:
            parts.append(self._query_line(view))
            parts.append(Text(f"{view.total_results} result(s)", style="dim"))
        else:
            parts.append(Text("Selected books", style="bold"))
        if view.rows:
            parts.extend(self._row(row) for row in view.rows)
        else:
            parts.append(Text("No matching books.", style="yellow"))

        if self.clear:
            self.console.clear()
        self.console.print(Panel(Group(*parts), title=self.title, border_style="cyan"))
        self.console.print(Text(view.prompt, style="dim", no_wrap=True, overflow="ellipsis"))
        return self.viewport_height
