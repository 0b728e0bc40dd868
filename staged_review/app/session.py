from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Union

from rich import box
from rich.align import Align
from rich.console import Group, RenderableType
from rich.padding import Padding
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from staged_review.infra.render.terminal import render_markdown, render_to_ansi


logger = logging.getLogger(__name__)

SPINNER_FRAMES = ("⣾", "⣽", "⣻", "⢿", "⡿", "⣟", "⣯", "⣷")
SPINNER_INTERVAL_SECONDS = 0.1

QUIT_KEYS = frozenset({"q", "ctrl+c"})
UP_KEYS = frozenset({"up", "k"})
DOWN_KEYS = frozenset({"down", "j"})

LOADING_TEXT = (
    "Reviewing the staged Go changes with the AI reviewer, please wait...\n"
    "(press q to quit)"
)
EMPTY_TEXT = (
    "No staged .go changes found.\n"
    "\n"
    "Stage some Go changes with git add and run again.\n"
    "\n"
    "Press q to quit."
)
NO_REVIEW_PLACEHOLDER = "_No review available for this file._"
NO_SELECTION_PLACEHOLDER = "_No file selected._"

DEFAULT_TOTAL_WIDTH = 100
MIN_COLUMN_WIDTH = 20

SPINNER_STYLE = "color(205)"
INFO_STYLE = "color(244)"
ERROR_STYLE = "color(1)"
BORDER_STYLE = "color(240)"
SELECTED_FILE_STYLE = "bold color(229) on color(57)"
NORMAL_FILE_STYLE = "color(252)"


class SessionState(str, Enum):
    LOADING = "loading"
    ERROR = "error"
    CONTENT = "content"


@dataclass(frozen=True)
class SpinnerTick:
    pass


@dataclass(frozen=True)
class ReviewLoaded:
    files: List[str] = field(default_factory=list)
    reviews: Dict[str, str] = field(default_factory=dict)
    error: BaseException | None = None


@dataclass(frozen=True)
class KeyPressed:
    key: str


@dataclass(frozen=True)
class WindowResized:
    width: int
    height: int


SessionMessage = Union[SpinnerTick, ReviewLoaded, KeyPressed, WindowResized]


class ReviewSession:
    """State machine behind the interactive review screen.

    The session is driven only through `update()` with one message at a time
    and rendered with `view()`; it never touches the terminal itself.
    """

    def __init__(self, *, width: int = 0, height: int = 0) -> None:
        self.width = width
        self.height = height
        self.files: List[str] = []
        self.reviews: Dict[str, str] = {}
        self.selected = 0
        self.error: BaseException | None = None
        self.spinner_frame = 0
        self.quitting = False
        self._state = SessionState.LOADING

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def loading(self) -> bool:
        return self._state is SessionState.LOADING

    def update(self, message: SessionMessage) -> None:
        if isinstance(message, WindowResized):
            self.width = message.width
            self.height = message.height
            return
        if isinstance(message, SpinnerTick):
            if self.loading:
                self.spinner_frame = (self.spinner_frame + 1) % len(SPINNER_FRAMES)
            return
        if isinstance(message, ReviewLoaded):
            self._on_review_loaded(message)
            return
        if isinstance(message, KeyPressed):
            self._on_key(message.key)
            return
        raise TypeError(f"Unknown session message type: {type(message)}")

    def _on_review_loaded(self, message: ReviewLoaded) -> None:
        if not self.loading:
            logger.warning("Ignoring review result received in state %s", self._state.value)
            return

        if message.error is not None:
            self.error = message.error
            self._state = SessionState.ERROR
            return

        self.files = list(message.files)
        self.reviews = dict(message.reviews)
        if self.files and not 0 <= self.selected < len(self.files):
            self.selected = 0
        self._state = SessionState.CONTENT

    def _on_key(self, key: str) -> None:
        if key in QUIT_KEYS:
            self.quitting = True
            return

        if self._state is not SessionState.CONTENT or not self.files:
            return

        if key in UP_KEYS and self.selected > 0:
            self.selected -= 1
        elif key in DOWN_KEYS and self.selected < len(self.files) - 1:
            self.selected += 1

    @property
    def selected_file(self) -> str | None:
        if 0 <= self.selected < len(self.files):
            return self.files[self.selected]
        return None

    def column_widths(self) -> tuple[int, int]:
        total = self.width if self.width > 0 else DEFAULT_TOTAL_WIDTH
        left = max(total // 4, MIN_COLUMN_WIDTH)
        right = max(total - left - 4, MIN_COLUMN_WIDTH)
        return left, right

    def view(self) -> str:
        if self._state is SessionState.LOADING:
            return self._center(self._loading_renderable())
        if self._state is SessionState.ERROR:
            return self._center(self._error_renderable())
        if not self.files:
            return self._center(Padding(Text(EMPTY_TEXT, style=INFO_STYLE), (0, 2)))
        return self._content_view()

    def _center(self, renderable: RenderableType) -> str:
        if self.width <= 0 or self.height <= 0:
            return render_to_ansi(renderable, width=self.width or DEFAULT_TOTAL_WIDTH)

        aligned = Align.center(renderable, vertical="middle", height=self.height)
        return render_to_ansi(aligned, width=self.width, height=self.height)

    def _loading_renderable(self) -> RenderableType:
        frame = SPINNER_FRAMES[self.spinner_frame % len(SPINNER_FRAMES)]
        return Group(
            Padding(Text(frame, style=SPINNER_STYLE), (1, 2)),
            Padding(Text(LOADING_TEXT, style=INFO_STYLE), (0, 2)),
        )

    def _error_renderable(self) -> RenderableType:
        message = f"An error occurred:\n\n{self.error}\n\nPress q to quit."
        return Padding(Text(message, style=ERROR_STYLE), (1, 2))

    def _content_view(self) -> str:
        left_width, right_width = self.column_widths()

        lines = []
        for index, path in enumerate(self.files):
            if index == self.selected:
                lines.append(Text(f"> {path}", style=SELECTED_FILE_STYLE))
            else:
                lines.append(Text(f"  {path}", style=NORMAL_FILE_STYLE))

        file_list = Panel(
            Text("\n").join(lines),
            box=box.ROUNDED,
            border_style=BORDER_STYLE,
            padding=(0, 1),
            width=left_width + 2,
        )

        path = self.selected_file
        if path is None:
            review_md = NO_SELECTION_PLACEHOLDER
        else:
            review_md = self.reviews.get(path, "")
            if not review_md.strip():
                review_md = NO_REVIEW_PLACEHOLDER

        rendered = render_markdown(review_md, right_width - 2)
        review = Padding(Text.from_ansi(rendered), (0, 1))

        grid = Table.grid()
        grid.add_column(width=left_width + 2, no_wrap=True)
        grid.add_column(width=right_width)
        grid.add_row(file_list, review)

        return render_to_ansi(grid, width=left_width + 2 + right_width)
