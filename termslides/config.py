"""Configuration file model and loading."""

from __future__ import annotations

import enum
import ipaddress
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Mapping

import yaml

from termslides.keyboard import KeyBinding, KeyBindingParseError

_U8_MAX = 2**8 - 1
_U16_MAX = 2**16 - 1
_U32_MAX = 2**32 - 1
_USIZE_MAX = 2**64 - 1
_SPEAKER_NOTES_PORT = 59418

Parser = Callable[[Any, str], Any]


class ConfigLoadError(Exception):
    """The configuration could not be loaded."""


class ConfigNotFoundError(ConfigLoadError):
    """The configuration file does not exist."""

    def __init__(self, message: str = "config file not found") -> None:
        super().__init__(message)


def _invalid(where: str, message: str) -> ConfigLoadError:
    location = f"{where}: " if where else ""
    return ConfigLoadError(f"invalid configuration: {location}{message}")


def _join(where: str, key: str) -> str:
    return f"{where}.{key}" if where else key


def _build(
    cls: type,
    data: Any,
    where: str,
    parsers: Mapping[str, Parser],
    *,
    required: tuple[str, ...] = (),
    ignored: tuple[str, ...] = (),
    deny_unknown: bool = True,
) -> Any:
    if not isinstance(data, Mapping):
        raise _invalid(where, "expected a mapping")
    for key in data:
        if key not in parsers and key not in ignored and deny_unknown:
            raise _invalid(where, f"unknown field {key!r}")
    for key in required:
        if key not in data:
            raise _invalid(where, f"missing field {key!r}")
    kwargs = {
        key: parser(data[key], _join(where, key))
        for key, parser in parsers.items()
        if key in data
    }
    return cls(**kwargs)


def _uint(maximum: int) -> Parser:
    def parse(value: Any, where: str) -> int:
        if not isinstance(value, int) or isinstance(value, bool):
            raise _invalid(where, f"expected an integer, got {value!r}")
        if not 0 <= value <= maximum:
            raise _invalid(where, f"{value} is out of range 0..={maximum}")
        return value

    return parse


def _boolean(value: Any, where: str) -> bool:
    if not isinstance(value, bool):
        raise _invalid(where, f"expected a boolean, got {value!r}")
    return value


def _string(value: Any, where: str) -> str:
    if not isinstance(value, str):
        raise _invalid(where, f"expected a string, got {value!r}")
    return value


def _optional(parser: Parser) -> Parser:
    def parse(value: Any, where: str) -> Any:
        return None if value is None else parser(value, where)

    return parse


def _list_of(parser: Parser) -> Parser:
    def parse(value: Any, where: str) -> list[Any]:
        if not isinstance(value, list):
            raise _invalid(where, "expected a list")
        return [parser(item, f"{where}[{index}]") for index, item in enumerate(value)]

    return parse


def _enum_of(cls: type[enum.Enum]) -> Parser:
    def parse(value: Any, where: str) -> Any:
        try:
            return cls(value)
        except ValueError:
            choices = ", ".join(member.value for member in cls)
            raise _invalid(where, f"unknown variant {value!r}, expected one of: {choices}") from None

    return parse


def _key_binding(value: Any, where: str) -> KeyBinding:
    text = _string(value, where)
    try:
        return KeyBinding.parse(text)
    except KeyBindingParseError as error:
        raise _invalid(where, f"invalid key binding {text!r}: {error}") from None


def _socket_address(value: Any, where: str) -> tuple[str, int]:
    text = _string(value, where)
    host, separator, port = text.rpartition(":")
    if not separator or not port.isascii() or not port.isdigit():
        raise _invalid(where, f"invalid socket address {text!r}")
    try:
        if host.startswith("[") and host.endswith("]"):
            address: ipaddress.IPv4Address | ipaddress.IPv6Address = ipaddress.IPv6Address(host[1:-1])
        else:
            address = ipaddress.IPv4Address(host)
    except ValueError:
        raise _invalid(where, f"invalid socket address {text!r}") from None
    port_number = int(port)
    if port_number > _U16_MAX:
        raise _invalid(where, f"invalid socket address {text!r}")
    return str(address), port_number


def default_speaker_notes_listen_address() -> tuple[str, int]:
    """The default address to listen on for speaker notes events."""
    host = "127.255.255.255" if sys.platform.startswith("linux") else "127.0.0.1"
    return host, _SPEAKER_NOTES_PORT


def default_speaker_notes_publish_address() -> tuple[str, int]:
    """The default address to publish speaker notes events to."""
    host = "127.0.0.1" if sys.platform == "darwin" else "127.255.255.255"
    return host, _SPEAKER_NOTES_PORT


class MaxColumnsAlignment(enum.Enum):
    """Horizontal alignment when the presentation is capped in columns."""

    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class MaxRowsAlignment(enum.Enum):
    """Vertical alignment when the presentation is capped in rows."""

    TOP = "top"
    CENTER = "center"
    BOTTOM = "bottom"


class ValidateOverflows(enum.Enum):
    """When to validate that slides don't overflow the screen."""

    NEVER = "never"
    ALWAYS = "always"
    WHEN_PRESENTING = "when_presenting"
    WHEN_DEVELOPING = "when_developing"


class ImageProtocol(enum.Enum):
    """The protocol used to draw images."""

    AUTO = "auto"
    ITERM2 = "iterm2"
    KITTY_LOCAL = "kitty-local"
    KITTY_REMOTE = "kitty-remote"
    SIXEL = "sixel"
    ASCII_BLOCKS = "ascii-blocks"


@dataclass
class IncrementalListsConfig:
    """Pauses around lists when incremental lists are enabled."""

    pause_before: bool | None = None
    pause_after: bool | None = None

    @classmethod
    def _from_dict(cls, data: Any, where: str) -> IncrementalListsConfig:
        return _build(cls, data, where, {
            "pause_before": _optional(_boolean),
            "pause_after": _optional(_boolean),
        })


@dataclass
class DefaultsConfig:
    """Defaults applied to every presentation."""

    theme: str | None = None
    terminal_font_size: int = 16
    image_protocol: ImageProtocol = ImageProtocol.AUTO
    validate_overflows: ValidateOverflows = ValidateOverflows.NEVER
    max_columns: int = _U16_MAX
    max_columns_alignment: MaxColumnsAlignment = MaxColumnsAlignment.CENTER
    max_rows: int = _U16_MAX
    max_rows_alignment: MaxRowsAlignment = MaxRowsAlignment.CENTER
    incremental_lists: IncrementalListsConfig = field(default_factory=IncrementalListsConfig)

    @classmethod
    def _from_dict(cls, data: Any, where: str) -> DefaultsConfig:
        return _build(cls, data, where, {
            "theme": _optional(_string),
            "terminal_font_size": _uint(_U8_MAX),
            "image_protocol": _enum_of(ImageProtocol),
            "validate_overflows": _enum_of(ValidateOverflows),
            "max_columns": _uint(_U16_MAX),
            "max_columns_alignment": _enum_of(MaxColumnsAlignment),
            "max_rows": _uint(_U16_MAX),
            "max_rows_alignment": _enum_of(MaxRowsAlignment),
            "incremental_lists": IncrementalListsConfig._from_dict,
        })


@dataclass
class OptionsConfig:
    """Presentation parsing options."""

    implicit_slide_ends: bool | None = None
    command_prefix: str | None = None
    image_attributes_prefix: str | None = None
    incremental_lists: bool | None = None
    end_slide_shorthand: bool | None = None
    strict_front_matter_parsing: bool | None = None
    auto_render_languages: list[str] = field(default_factory=list)

    @classmethod
    def _from_dict(cls, data: Any, where: str) -> OptionsConfig:
        return _build(cls, data, where, {
            "implicit_slide_ends": _optional(_boolean),
            "command_prefix": _optional(_string),
            "image_attributes_prefix": _optional(_string),
            "incremental_lists": _optional(_boolean),
            "end_slide_shorthand": _optional(_boolean),
            "strict_front_matter_parsing": _optional(_boolean),
            "auto_render_languages": _list_of(_string),
        })


def _environment(value: Any, where: str) -> dict[str, str]:
    if not isinstance(value, Mapping):
        raise _invalid(where, "expected a mapping")
    return {_string(key, where): _string(item, _join(where, str(key))) for key, item in value.items()}


@dataclass
class LanguageSnippetExecutionConfig:
    """How to execute snippets of one language."""

    filename: str
    commands: list[list[str]]
    environment: dict[str, str] = field(default_factory=dict)
    hidden_line_prefix: str | None = None

    @classmethod
    def _from_dict(cls, data: Any, where: str) -> LanguageSnippetExecutionConfig:
        return _build(
            cls,
            data,
            where,
            {
                "filename": _string,
                "environment": _environment,
                "commands": _list_of(_list_of(_string)),
                "hidden_line_prefix": _optional(_string),
            },
            required=("filename", "commands"),
            deny_unknown=False,
        )


def _custom_executors(value: Any, where: str) -> dict[str, LanguageSnippetExecutionConfig]:
    if not isinstance(value, Mapping):
        raise _invalid(where, "expected a mapping")
    executors = {
        _string(language, where): LanguageSnippetExecutionConfig._from_dict(config, _join(where, str(language)))
        for language, config in value.items()
    }
    return dict(sorted(executors.items()))


@dataclass
class SnippetExecConfig:
    """Snippet execution settings."""

    enable: bool = False
    custom: dict[str, LanguageSnippetExecutionConfig] = field(default_factory=dict)

    @classmethod
    def _from_dict(cls, data: Any, where: str) -> SnippetExecConfig:
        return _build(
            cls, data, where, {"enable": _boolean, "custom": _custom_executors}, required=("enable",)
        )


@dataclass
class SnippetExecReplaceConfig:
    """Settings for snippets that are run and replaced by their output."""

    enable: bool = False

    @classmethod
    def _from_dict(cls, data: Any, where: str) -> SnippetExecReplaceConfig:
        return _build(cls, data, where, {"enable": _boolean}, required=("enable",))


@dataclass
class SnippetRenderConfig:
    """Snippet auto rendering settings."""

    threads: int = 2

    @classmethod
    def _from_dict(cls, data: Any, where: str) -> SnippetRenderConfig:
        return _build(cls, data, where, {"threads": _uint(_USIZE_MAX)})


@dataclass
class SnippetConfig:
    """Code snippet settings."""

    exec: SnippetExecConfig = field(default_factory=SnippetExecConfig)
    exec_replace: SnippetExecReplaceConfig = field(default_factory=SnippetExecReplaceConfig)
    render: SnippetRenderConfig = field(default_factory=SnippetRenderConfig)

    @classmethod
    def _from_dict(cls, data: Any, where: str) -> SnippetConfig:
        return _build(cls, data, where, {
            "exec": SnippetExecConfig._from_dict,
            "exec_replace": SnippetExecReplaceConfig._from_dict,
            "render": SnippetRenderConfig._from_dict,
        })


@dataclass
class TypstConfig:
    """Formula rendering settings."""

    ppi: int = 300

    @classmethod
    def _from_dict(cls, data: Any, where: str) -> TypstConfig:
        return _build(cls, data, where, {"ppi": _uint(_U32_MAX)})


@dataclass
class MermaidConfig:
    """Diagram rendering settings."""

    scale: int = 2

    @classmethod
    def _from_dict(cls, data: Any, where: str) -> MermaidConfig:
        return _build(cls, data, where, {"scale": _uint(_U32_MAX)})


def _default_bindings(*patterns: str) -> Callable[[], list[KeyBinding]]:
    def factory() -> list[KeyBinding]:
        return [KeyBinding.parse(pattern) for pattern in patterns]

    return factory


@dataclass
class KeyBindingsConfig:
    """The key bindings for every command."""

    next: list[KeyBinding] = field(
        default_factory=_default_bindings("l", "j", "<right>", "<page_down>", "<down>", " ")
    )
    next_fast: list[KeyBinding] = field(default_factory=_default_bindings("n"))
    previous: list[KeyBinding] = field(
        default_factory=_default_bindings("h", "k", "<left>", "<page_up>", "<up>")
    )
    previous_fast: list[KeyBinding] = field(default_factory=_default_bindings("p"))
    first_slide: list[KeyBinding] = field(default_factory=_default_bindings("gg"))
    last_slide: list[KeyBinding] = field(default_factory=_default_bindings("G"))
    go_to_slide: list[KeyBinding] = field(default_factory=_default_bindings("<number>G"))
    execute_code: list[KeyBinding] = field(default_factory=_default_bindings("<c-e>"))
    reload: list[KeyBinding] = field(default_factory=_default_bindings("<c-r>"))
    toggle_slide_index: list[KeyBinding] = field(default_factory=_default_bindings("<c-p>"))
    toggle_bindings: list[KeyBinding] = field(default_factory=_default_bindings("?"))
    close_modal: list[KeyBinding] = field(default_factory=_default_bindings("<esc>"))
    exit: list[KeyBinding] = field(default_factory=_default_bindings("<c-c>", "q"))
    suspend: list[KeyBinding] = field(default_factory=_default_bindings("<c-z>"))

    @classmethod
    def _from_dict(cls, data: Any, where: str) -> KeyBindingsConfig:
        names = (
            "next", "next_fast", "previous", "previous_fast", "first_slide", "last_slide",
            "go_to_slide", "execute_code", "reload", "toggle_slide_index", "toggle_bindings",
            "close_modal", "exit", "suspend",
        )
        return _build(cls, data, where, {name: _list_of(_key_binding) for name in names})


@dataclass
class SpeakerNotesConfig:
    """Speaker notes networking settings."""

    listen_address: tuple[str, int] = field(default_factory=default_speaker_notes_listen_address)
    publish_address: tuple[str, int] = field(default_factory=default_speaker_notes_publish_address)
    always_publish: bool = False

    @classmethod
    def _from_dict(cls, data: Any, where: str) -> SpeakerNotesConfig:
        return _build(cls, data, where, {
            "listen_address": _socket_address,
            "publish_address": _socket_address,
            "always_publish": _boolean,
        })


@dataclass
class ExportDimensionsConfig:
    """The dimensions used when exporting."""

    rows: int
    columns: int

    @classmethod
    def _from_dict(cls, data: Any, where: str) -> ExportDimensionsConfig:
        return _build(
            cls,
            data,
            where,
            {"rows": _uint(_U16_MAX), "columns": _uint(_U16_MAX)},
            required=("rows", "columns"),
        )


@dataclass
class ExportConfig:
    """Export settings."""

    dimensions: ExportDimensionsConfig | None = None

    @classmethod
    def _from_dict(cls, data: Any, where: str) -> ExportConfig:
        return _build(cls, data, where, {"dimensions": _optional(ExportDimensionsConfig._from_dict)})


class SlideTransitionStyle(enum.Enum):
    """The animation used between slides."""

    SLIDE_HORIZONTAL = "slide_horizontal"
    FADE = "fade"


def _animation(value: Any, where: str) -> SlideTransitionStyle:
    if not isinstance(value, Mapping):
        raise _invalid(where, "expected a mapping")
    for key in value:
        if key != "style":
            raise _invalid(where, f"unknown field {key!r}")
    if "style" not in value:
        raise _invalid(where, "missing field 'style'")
    return _enum_of(SlideTransitionStyle)(value["style"], _join(where, "style"))


@dataclass
class SlideTransitionConfig:
    """Slide transition settings."""

    animation: SlideTransitionStyle
    duration_millis: int = 1000
    frames: int = 30

    @classmethod
    def _from_dict(cls, data: Any, where: str) -> SlideTransitionConfig:
        return _build(
            cls,
            data,
            where,
            {
                "duration_millis": _uint(_U16_MAX),
                "frames": _uint(_USIZE_MAX),
                "animation": _animation,
            },
            required=("animation",),
            ignored=("style",),
        )


@dataclass
class Config:
    """The whole configuration."""

    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)
    typst: TypstConfig = field(default_factory=TypstConfig)
    mermaid: MermaidConfig = field(default_factory=MermaidConfig)
    options: OptionsConfig = field(default_factory=OptionsConfig)
    bindings: KeyBindingsConfig = field(default_factory=KeyBindingsConfig)
    snippet: SnippetConfig = field(default_factory=SnippetConfig)
    speaker_notes: SpeakerNotesConfig = field(default_factory=SpeakerNotesConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    transition: SlideTransitionConfig | None = None

    @staticmethod
    def from_dict(data: Any) -> Config:
        """Build a configuration from parsed YAML; raises ConfigLoadError if invalid."""
        if data is None:
            data = {}
        return _build(Config, data, "", {
            "defaults": DefaultsConfig._from_dict,
            "typst": TypstConfig._from_dict,
            "mermaid": MermaidConfig._from_dict,
            "options": OptionsConfig._from_dict,
            "bindings": KeyBindingsConfig._from_dict,
            "snippet": SnippetConfig._from_dict,
            "speaker_notes": SpeakerNotesConfig._from_dict,
            "export": ExportConfig._from_dict,
            "transition": _optional(SlideTransitionConfig._from_dict),
        })

    @staticmethod
    def load(path: str | Path) -> Config:
        """Load the configuration from a YAML file."""
        try:
            contents = Path(path).read_text(encoding="utf-8")
        except FileNotFoundError:
            raise ConfigNotFoundError() from None
        except (OSError, UnicodeDecodeError) as error:
            raise ConfigLoadError(f"io: {error}") from error
        try:
            data = yaml.safe_load(contents)
        except yaml.YAMLError as error:
            raise ConfigLoadError(f"invalid configuration: {error}") from error
        return Config.from_dict(data)