"""Key bindings: parsing, matching key events and mapping them to commands."""

from __future__ import annotations

import enum
import string
from dataclasses import dataclass, field
from typing import Any, ClassVar, Iterable, Sequence

from termslides.commands import Command, CommandKind

_U32_MAX = 2**32 - 1
_MAX_FUNCTION_KEY = 12

# Relative order of key codes, used to sort bindings deterministically.
_KEY_ORDER = {
    "Backspace": 0,
    "Enter": 1,
    "Left": 2,
    "Right": 3,
    "Up": 4,
    "Down": 5,
    "Home": 6,
    "End": 7,
    "PageUp": 8,
    "PageDown": 9,
    "Tab": 10,
    "F": 14,
    "Char": 15,
    "Esc": 17,
}


@dataclass(frozen=True)
class KeyCode:
    """A key: a named key, a function key ``F`` with a number, or a ``Char``."""

    BACKSPACE: ClassVar[KeyCode]
    ENTER: ClassVar[KeyCode]
    LEFT: ClassVar[KeyCode]
    RIGHT: ClassVar[KeyCode]
    UP: ClassVar[KeyCode]
    DOWN: ClassVar[KeyCode]
    HOME: ClassVar[KeyCode]
    END: ClassVar[KeyCode]
    PAGE_UP: ClassVar[KeyCode]
    PAGE_DOWN: ClassVar[KeyCode]
    TAB: ClassVar[KeyCode]
    ESC: ClassVar[KeyCode]

    name: str
    value: str | int | None = None

    @classmethod
    def char(cls, c: str) -> KeyCode:
        return cls("Char", c)

    @classmethod
    def function(cls, number: int) -> KeyCode:
        return cls("F", number)

    def _sort_key(self) -> tuple[int, Any]:
        value = self.value if self.value is not None else 0
        return (_KEY_ORDER.get(self.name, len(_KEY_ORDER) + 100), value)

    def _debug(self) -> str:
        if self.name == "Char":
            return f"Char({self.value!r})"
        if self.name == "F":
            return f"F({self.value})"
        return self.name


KeyCode.BACKSPACE = KeyCode("Backspace")
KeyCode.ENTER = KeyCode("Enter")
KeyCode.LEFT = KeyCode("Left")
KeyCode.RIGHT = KeyCode("Right")
KeyCode.UP = KeyCode("Up")
KeyCode.DOWN = KeyCode("Down")
KeyCode.HOME = KeyCode("Home")
KeyCode.END = KeyCode("End")
KeyCode.PAGE_UP = KeyCode("PageUp")
KeyCode.PAGE_DOWN = KeyCode("PageDown")
KeyCode.TAB = KeyCode("Tab")
KeyCode.ESC = KeyCode("Esc")


@dataclass(frozen=True)
class KeyEvent:
    """A key press (or release) coming from the terminal."""

    code: KeyCode
    control: bool = False
    released: bool = False


@dataclass(frozen=True)
class KeyCombination:
    """A key, optionally pressed together with control."""

    key: KeyCode
    control: bool = False


@dataclass(frozen=True)
class KeyMatcher:
    """Matches either one key combination or a number (when ``combination`` is None)."""

    combination: KeyCombination | None = None

    @classmethod
    def number(cls) -> KeyMatcher:
        return cls(None)

    @classmethod
    def key(cls, code: KeyCode, control: bool = False) -> KeyMatcher:
        return cls(KeyCombination(code, control))

    @property
    def is_number(self) -> bool:
        return self.combination is None

    def _sort_key(self) -> tuple[Any, ...]:
        if self.combination is None:
            return (1,)
        return (0, self.combination.key._sort_key(), self.combination.control)

    def _try_match(self, events: Sequence[KeyEvent]) -> tuple[int | None, Sequence[KeyEvent]] | None:
        """Match the head of ``events``; return (number matched, remaining events)."""
        if self.combination is None:
            return _match_number(events)
        if not events:
            return None
        event = events[0]
        if event.code == self.combination.key and event.control == self.combination.control:
            return None, events[1:]
        return None

    def __str__(self) -> str:
        if self.combination is None:
            return "<number>"
        key = self.combination.key
        if key.name == "Char":
            rendered = "' '" if key.value == " " else str(key.value)
        else:
            rendered = f"<{key._debug()}>"
        if self.combination.control:
            return f"<c-{rendered}>"
        return rendered


def _match_number(events: Sequence[KeyEvent]) -> tuple[int | None, Sequence[KeyEvent]] | None:
    number: int | None = None
    while events:
        head = events[0]
        if head.code.name != "Char" or not isinstance(head.code.value, str):
            break
        c = head.code.value
        if not (c.isascii() and c.isdigit()):
            break
        following = (number or 0) * 10 + int(c)
        if following > _U32_MAX:
            return None
        number = following
        events = events[1:]
    if number is None:
        return None
    return number, events


@dataclass(frozen=True)
class BindingMatch:
    """The outcome of matching events against a binding."""

    class Kind(enum.Enum):
        FULL = "full"
        PARTIAL = "partial"
        NONE = "none"

    PARTIAL: ClassVar[BindingMatch]
    NONE: ClassVar[BindingMatch]

    kind: BindingMatch.Kind
    number: int | None = None

    @classmethod
    def full(cls, number: int | None = None) -> BindingMatch:
        return cls(cls.Kind.FULL, number)


BindingMatch.PARTIAL = BindingMatch(BindingMatch.Kind.PARTIAL)
BindingMatch.NONE = BindingMatch(BindingMatch.Kind.NONE)


class KeyBindingParseError(ValueError):
    """A key binding string is malformed."""


class KeyBindingsValidationError(ValueError):
    """A set of key bindings is invalid or conflicting."""


_ALIASES: list[tuple[tuple[str, ...], KeyCode]] = [
    (("<PageUp>", "<page_up>"), KeyCode.PAGE_UP),
    (("<PageDown>", "<page_down>"), KeyCode.PAGE_DOWN),
    (("<cr>", "<CR>", "<Enter>", "<enter>"), KeyCode.ENTER),
    (("<Home>", "<home>"), KeyCode.HOME),
    (("<End>", "<end>"), KeyCode.END),
    (("<Left>", "<left>"), KeyCode.LEFT),
    (("<Right>", "<right>"), KeyCode.RIGHT),
    (("<Up>", "<up>"), KeyCode.UP),
    (("<Down>", "<down>"), KeyCode.DOWN),
    (("<Esc>", "<esc>"), KeyCode.ESC),
    (("<Tab>", "<tab>"), KeyCode.TAB),
    (("<Backspace>", "<backspace>"), KeyCode.BACKSPACE),
]


def _strip_any(text: str, prefixes: Iterable[str]) -> str | None:
    for prefix in prefixes:
        if text.startswith(prefix):
            return text[len(prefix):]
    return None


def _parse_key_code(text: str) -> tuple[KeyCode, str]:
    for aliases, code in _ALIASES:
        rest = _strip_any(text, aliases)
        if rest is not None:
            return code, rest
    rest = _strip_any(text, ("<F", "<f"))
    if rest is not None:
        digits, separator, remainder = rest.partition(">")
        if not separator:
            raise KeyBindingParseError("invalid control sequence")
        body = digits[1:] if digits.startswith("+") else digits
        if not body or not (body.isascii() and body.isdigit()):
            raise KeyBindingParseError("invalid control sequence")
        number = int(body)
        if number > _MAX_FUNCTION_KEY:
            raise KeyBindingParseError("invalid control sequence")
        return KeyCode.function(number), remainder
    if not text:
        raise KeyBindingParseError("no input")
    first = text[0]
    # These would make bindings ambiguous.
    if first in "<>":
        raise KeyBindingParseError(f"not a valid key: {first}")
    if first.isalnum() or first in string.punctuation or first == " ":
        return KeyCode.char(first), text[1:]
    raise KeyBindingParseError(f"not a valid key: {first}")


def _parse_matcher(text: str) -> tuple[KeyMatcher, str]:
    if text.startswith("<number>"):
        return KeyMatcher.number(), text[len("<number>"):]
    rest = _strip_any(text, ("<c-", "<C-"))
    if rest is not None:
        code, rest = _parse_key_code(rest)
        if not rest.startswith(">"):
            raise KeyBindingParseError("invalid control sequence")
        return KeyMatcher.key(code, control=True), rest[1:]
    code, rest = _parse_key_code(text)
    return KeyMatcher.key(code), rest


@dataclass(frozen=True)
class KeyBinding:
    """A sequence of key matchers that together trigger a command."""

    matchers: tuple[KeyMatcher, ...] = field(default_factory=tuple)

    @staticmethod
    def parse(text: str) -> KeyBinding:
        """Parse a binding such as ``gg``, ``<c-w>`` or ``<number>G``."""
        matchers: list[KeyMatcher] = []
        has_number = False
        while text:
            matcher, text = _parse_matcher(text)
            if matcher.is_number:
                if has_number:
                    raise KeyBindingParseError("too many number placeholders")
                has_number = True
            matchers.append(matcher)
        return KeyBinding(tuple(matchers))

    def match_events(self, events: Sequence[KeyEvent]) -> BindingMatch:
        """Match a sequence of events against this binding."""
        number: int | None = None
        remaining: Sequence[KeyEvent] = list(events)
        last = len(self.matchers) - 1
        for index, matcher in enumerate(self.matchers):
            result = matcher._try_match(remaining)
            if result is None:
                return BindingMatch.NONE
            matched_number, remaining = result
            if matched_number is not None:
                number = matched_number
            if index != last and not remaining:
                return BindingMatch.PARTIAL
        return BindingMatch.full(number)

    def expects_number(self) -> bool:
        return any(matcher.is_number for matcher in self.matchers)

    def _sort_key(self) -> tuple[Any, ...]:
        return tuple(matcher._sort_key() for matcher in self.matchers)

    def __str__(self) -> str:
        return "".join(str(matcher) for matcher in self.matchers)


_CONFIG_FIELDS: list[tuple[str, CommandKind]] = [
    ("next", CommandKind.NEXT),
    ("next_fast", CommandKind.NEXT_FAST),
    ("previous", CommandKind.PREVIOUS),
    ("previous_fast", CommandKind.PREVIOUS_FAST),
    ("first_slide", CommandKind.FIRST_SLIDE),
    ("last_slide", CommandKind.LAST_SLIDE),
    ("go_to_slide", CommandKind.GO_TO_SLIDE),
    ("exit", CommandKind.EXIT),
    ("suspend", CommandKind.SUSPEND),
    ("reload", CommandKind.HARD_RELOAD),
    ("toggle_slide_index", CommandKind.TOGGLE_SLIDE_INDEX),
    ("toggle_bindings", CommandKind.TOGGLE_KEY_BINDINGS_CONFIG),
    ("execute_code", CommandKind.RENDER_ASYNC_OPERATIONS),
    ("close_modal", CommandKind.CLOSE_MODAL),
]


class CommandKeyBindings:
    """Maps key bindings to the commands they trigger."""

    def __init__(self, bindings: Iterable[tuple[KeyBinding, CommandKind]]) -> None:
        self.bindings = list(bindings)

    @staticmethod
    def from_config(config: Any) -> CommandKeyBindings:
        """Build and validate bindings from a key bindings configuration."""
        if not all(binding.expects_number() for binding in config.go_to_slide):
            raise KeyBindingsValidationError(
                "invalid binding for go_to_slide: <number> matcher required"
            )
        bindings = [
            (binding, kind)
            for attribute, kind in _CONFIG_FIELDS
            for binding in getattr(config, attribute)
        ]
        CommandKeyBindings.validate_conflicts(binding for binding, _ in bindings)
        return CommandKeyBindings(bindings)

    def apply(self, events: Sequence[KeyEvent]) -> tuple[Command | None, bool]:
        """Return the command the events trigger, if any, and whether to keep buffering them."""
        any_partial = False
        for binding, kind in self.bindings:
            result = binding.match_events(events)
            if result.kind is BindingMatch.Kind.FULL:
                return self._instantiate(kind, result.number)
            if result.kind is BindingMatch.Kind.PARTIAL:
                any_partial = True
        return None, any_partial

    @staticmethod
    def _instantiate(kind: CommandKind, number: int | None) -> tuple[Command | None, bool]:
        if kind is CommandKind.GO_TO_SLIDE:
            # A malformed binding; this is rejected when building from config.
            if number is None:
                return None, False
            return Command.go_to_slide(number), False
        return Command(kind), False

    @staticmethod
    def validate_conflicts(bindings: Iterable[KeyBinding]) -> None:
        """Raise if any binding is equal to, or a prefix of, another one."""
        ordered = sorted(bindings, key=KeyBinding._sort_key)
        for first, second in zip(ordered, ordered[1:]):
            prefix = second.matchers[: len(first.matchers)]
            if first.matchers == prefix:
                raise KeyBindingsValidationError(
                    f"conflicting keybindings: {first} and {second}"
                )


class KeyboardListener:
    """Buffers key events until they form a command."""

    def __init__(self, bindings: CommandKeyBindings) -> None:
        self.bindings = bindings
        self._events: list[KeyEvent] = []

    def feed(self, event: KeyEvent) -> Command | None:
        """Process one key event and return the command it completes, if any."""
        if event.released:
            return None
        events = [*self._events, event]
        command, keep = self.bindings.apply(events)
        self._events = events if command is None and keep else []
        return command