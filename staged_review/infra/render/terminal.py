from __future__ import annotations

import io
import logging

from rich.console import Console, RenderableType
from rich.markdown import Markdown


logger = logging.getLogger(__name__)

DEFAULT_MARKDOWN_WIDTH = 80


def render_to_ansi(renderable: RenderableType, *, width: int, height: int | None = None) -> str:
    """Renders any rich renderable to a string with ANSI escape codes."""
    buffer = io.StringIO()
    console = Console(
        file=buffer,
        width=max(width, 1),
        height=height,
        force_terminal=True,
        color_system="256",
        legacy_windows=False,
    )
    console.print(renderable, end="")
    return buffer.getvalue()


def render_markdown(markdown: str, width: int) -> str:
    """Renders markdown for the terminal; returns the raw text if rendering fails."""
    if width <= 0:
        width = DEFAULT_MARKDOWN_WIDTH

    try:
        return render_to_ansi(Markdown(markdown), width=width)
    except Exception:  # noqa: BLE001 - fall back to the unrendered text
        logger.warning("Failed to render markdown, showing raw text", exc_info=True)
        return markdown
