"""Commands that drive a presentation."""

from __future__ import annotations

import enum
from dataclasses import dataclass

_U32_MAX = 2**32 - 1


class CommandKind(enum.Enum):
    """The kinds of commands a presentation understands."""

    REDRAW = "Redraw"
    NEXT = "Next"
    NEXT_FAST = "NextFast"
    PREVIOUS = "Previous"
    PREVIOUS_FAST = "PreviousFast"
    FIRST_SLIDE = "FirstSlide"
    LAST_SLIDE = "LastSlide"
    GO_TO_SLIDE = "GoToSlide"
    RENDER_ASYNC_OPERATIONS = "RenderAsyncOperations"
    EXIT = "Exit"
    SUSPEND = "Suspend"
    RELOAD = "Reload"
    HARD_RELOAD = "HardReload"
    TOGGLE_SLIDE_INDEX = "ToggleSlideIndex"
    TOGGLE_KEY_BINDINGS_CONFIG = "ToggleKeyBindingsConfig"
    CLOSE_MODAL = "CloseModal"


@dataclass(frozen=True)
class Command:
    """A command; only ``GO_TO_SLIDE`` carries a slide number."""

    kind: CommandKind
    slide: int | None = None

    def __post_init__(self) -> None:
        if self.kind is CommandKind.GO_TO_SLIDE:
            if self.slide is None:
                raise ValueError("go to slide command requires a slide number")
            if not 0 <= self.slide <= _U32_MAX:
                raise ValueError(f"slide number out of range: {self.slide}")
        elif self.slide is not None:
            raise ValueError(f"{self.kind.value} command takes no slide number")

    @staticmethod
    def go_to_slide(slide: int) -> Command:
        """Build a command that jumps to a specific slide."""
        return Command(CommandKind.GO_TO_SLIDE, slide)