"""Styled text rendered as HTML."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import ClassVar

_U8_MAX = 2**8 - 1

_NAMED_HTML = {
    "Black": "#000000",
    "DarkGrey": "#5a5a5a",
    "Red": "#ff0000",
    "DarkRed": "#8b0000",
    "Green": "#00ff00",
    "DarkGreen": "#006400",
    "Yellow": "#ffff00",
    "DarkYellow": "#8b8000",
    "Blue": "#0000ff",
    "DarkBlue": "#00008b",
    "Magenta": "#ff00ff",
    "DarkMagenta": "#8b008b",
    "Cyan": "#00ffff",
    "DarkCyan": "#008b8b",
    "White": "#ffffff",
    "Grey": "#808080",
}


@dataclass(frozen=True)
class Color:
    """A named terminal color or an RGB color (``name == "Rgb"``)."""

    BLACK: ClassVar[Color]
    DARK_GREY: ClassVar[Color]
    RED: ClassVar[Color]
    DARK_RED: ClassVar[Color]
    GREEN: ClassVar[Color]
    DARK_GREEN: ClassVar[Color]
    YELLOW: ClassVar[Color]
    DARK_YELLOW: ClassVar[Color]
    BLUE: ClassVar[Color]
    DARK_BLUE: ClassVar[Color]
    MAGENTA: ClassVar[Color]
    DARK_MAGENTA: ClassVar[Color]
    CYAN: ClassVar[Color]
    DARK_CYAN: ClassVar[Color]
    WHITE: ClassVar[Color]
    GREY: ClassVar[Color]

    name: str
    components: tuple[int, int, int] | None = None

    def __post_init__(self) -> None:
        if self.name == "Rgb":
            if self.components is None or any(not 0 <= c <= _U8_MAX for c in self.components):
                raise ValueError(f"invalid rgb components: {self.components!r}")
        elif self.name not in _NAMED_HTML:
            raise ValueError(f"unknown color: {self.name!r}")
        elif self.components is not None:
            raise ValueError("named colors take no components")

    @staticmethod
    def rgb(r: int, g: int, b: int) -> Color:
        return Color("Rgb", (r, g, b))


Color.BLACK = Color("Black")
Color.DARK_GREY = Color("DarkGrey")
Color.RED = Color("Red")
Color.DARK_RED = Color("DarkRed")
Color.GREEN = Color("Green")
Color.DARK_GREEN = Color("DarkGreen")
Color.YELLOW = Color("Yellow")
Color.DARK_YELLOW = Color("DarkYellow")
Color.BLUE = Color("Blue")
Color.DARK_BLUE = Color("DarkBlue")
Color.MAGENTA = Color("Magenta")
Color.DARK_MAGENTA = Color("DarkMagenta")
Color.CYAN = Color("Cyan")
Color.DARK_CYAN = Color("DarkCyan")
Color.WHITE = Color("White")
Color.GREY = Color("Grey")


def color_to_html(color: Color) -> str:
    """The CSS hex representation of a color."""
    if color.components is not None:
        r, g, b = color.components
        return f"#{r:02x}{g:02x}{b:02x}"
    return _NAMED_HTML[color.name]


@dataclass(frozen=True)
class TextStyle:
    """Text attributes, colors and size."""

    is_bold: bool = False
    is_italics: bool = False
    is_strikethrough: bool = False
    is_underlined: bool = False
    foreground: Color | None = None
    background: Color | None = None
    size: int = 1

    def __post_init__(self) -> None:
        if not 0 <= self.size <= _U8_MAX:
            raise ValueError(f"invalid text size: {self.size}")

    def bold(self) -> TextStyle:
        return replace(self, is_bold=True)

    def italics(self) -> TextStyle:
        return replace(self, is_italics=True)

    def strikethrough(self) -> TextStyle:
        return replace(self, is_strikethrough=True)

    def underlined(self) -> TextStyle:
        return replace(self, is_underlined=True)

    def fg_color(self, color: Color) -> TextStyle:
        return replace(self, foreground=color)

    def bg_color(self, color: Color) -> TextStyle:
        return replace(self, background=color)

    def with_size(self, size: int) -> TextStyle:
        return replace(self, size=size)


@dataclass(frozen=True)
class FontSize:
    """A base font size in pixels."""

    pixels: int

    def scale(self, size: int) -> str:
        return f"{self.pixels * size}px"


@dataclass(frozen=True)
class HtmlText:
    """Text, either plain or wrapped in a styled span (when ``style`` is set)."""

    text: str
    style: str | None = None

    @staticmethod
    def new(text: str, style: TextStyle, font_size: FontSize) -> HtmlText:
        if style == TextStyle():
            return HtmlText(text)
        css: list[str] = []
        decorations: list[str] = []
        if style.is_bold:
            css.append("font-weight: bold")
        if style.is_italics:
            css.append("font-style: italic")
        if style.is_strikethrough:
            decorations.append("line-through")
        if style.is_underlined:
            decorations.append("underline")
        if style.foreground is not None:
            css.append(f"color: {color_to_html(style.foreground)}")
        if style.background is not None:
            css.append(f"background-color: {color_to_html(style.background)}")
        if decorations:
            css.append(f"text-decoration: {' '.join(decorations)}")
        if style.size > 1:
            css.append(f"font-size: {font_size.scale(style.size)}")
        return HtmlText(text, "; ".join(css))

    def __str__(self) -> str:
        if self.style is None:
            return self.text
        return f'<span style="{self.style}">{self.text}</span>'