import sys

import pytest

from termslides.commands import Command, CommandKind
from termslides.config import (
    Config,
    ConfigLoadError,
    ConfigNotFoundError,
    DefaultsConfig,
    ImageProtocol,
    KeyBindingsConfig,
    MaxColumnsAlignment,
    MaxRowsAlignment,
    SlideTransitionStyle,
    ValidateOverflows,
    default_speaker_notes_listen_address,
    default_speaker_notes_publish_address,
)
from termslides.keyboard import CommandKeyBindings, KeyBinding, KeyCode, KeyEvent


def test_default_bindings_build_command_bindings():
    bindings = CommandKeyBindings.from_config(KeyBindingsConfig())
    assert bindings.apply([KeyEvent(KeyCode.char("q"))]) == (Command(CommandKind.EXIT), False)


def test_default_go_to_slide_binding():
    bindings = CommandKeyBindings.from_config(KeyBindingsConfig())
    events = [KeyEvent(KeyCode.char(c)) for c in "12G"]
    assert bindings.apply(events) == (Command.go_to_slide(12), False)


def test_default_binding_patterns():
    config = KeyBindingsConfig()
    assert [str(b) for b in config.exit] == ["<c-c>", "q"]
    assert [str(b) for b in config.next] == ["l", "j", "<Right>", "<PageDown>", "<Down>", "' '"]
    assert [str(b) for b in config.go_to_slide] == ["<number>G"]


def test_default_options_serde():
    config = Config.from_dict({"options": {"implicit_slide_ends": True}})
    assert config.options.implicit_slide_ends is True
    assert config.options.command_prefix is None
    assert config.options.auto_render_languages == []


def test_defaults():
    config = Config.from_dict({})
    assert config.defaults.terminal_font_size == 16
    assert config.defaults.max_columns == 65535
    assert config.defaults.max_rows == 65535
    assert config.defaults.image_protocol is ImageProtocol.AUTO
    assert config.defaults.validate_overflows is ValidateOverflows.NEVER
    assert config.defaults.max_columns_alignment is MaxColumnsAlignment.CENTER
    assert config.defaults.max_rows_alignment is MaxRowsAlignment.CENTER
    assert config.typst.ppi == 300
    assert config.mermaid.scale == 2
    assert config.snippet.render.threads == 2
    assert config.snippet.exec.enable is False
    assert config.export.dimensions is None
    assert config.transition is None
    assert config.speaker_notes.always_publish is False


def test_none_is_default():
    assert Config.from_dict(None) == Config()


def test_enums_parse():
    config = Config.from_dict({
        "defaults": {
            "image_protocol": "kitty-local",
            "validate_overflows": "when_presenting",
            "max_columns_alignment": "left",
            "max_rows_alignment": "bottom",
            "theme": "light",
        }
    })
    assert config.defaults == DefaultsConfig(
        theme="light",
        image_protocol=ImageProtocol.KITTY_LOCAL,
        validate_overflows=ValidateOverflows.WHEN_PRESENTING,
        max_columns_alignment=MaxColumnsAlignment.LEFT,
        max_rows_alignment=MaxRowsAlignment.BOTTOM,
    )


def test_invalid_enum():
    with pytest.raises(ConfigLoadError, match="unknown variant"):
        Config.from_dict({"defaults": {"image_protocol": "kitty_local"}})


@pytest.mark.parametrize(
    "data",
    [
        {"potato": 1},
        {"defaults": {"potato": 1}},
        {"snippet": {"render": {"threads": 2, "other": 1}}},
    ],
)
def test_unknown_fields_rejected(data):
    with pytest.raises(ConfigLoadError, match="unknown field"):
        Config.from_dict(data)


@pytest.mark.parametrize(
    "data",
    [
        {"defaults": {"terminal_font_size": 256}},
        {"defaults": {"max_columns": -1}},
        {"defaults": {"max_rows": 70000}},
        {"typst": {"ppi": "300"}},
        {"mermaid": {"scale": True}},
    ],
)
def test_invalid_integers(data):
    with pytest.raises(ConfigLoadError):
        Config.from_dict(data)


def test_exec_enable_required():
    with pytest.raises(ConfigLoadError, match="missing field 'enable'"):
        Config.from_dict({"snippet": {"exec": {}}})


def test_custom_executors():
    config = Config.from_dict({
        "snippet": {
            "exec": {
                "enable": True,
                "custom": {
                    "rust": {"filename": "main.rs", "commands": [["cargo", "run"]]},
                    "c": {
                        "filename": "a.c",
                        "commands": [["cc", "a.c"], ["./a.out"]],
                        "environment": {"CC": "gcc"},
                        "hidden_line_prefix": "//",
                    },
                },
            }
        }
    })
    custom = config.snippet.exec.custom
    assert list(custom) == ["c", "rust"]
    assert custom["c"].commands == [["cc", "a.c"], ["./a.out"]]
    assert custom["c"].environment == {"CC": "gcc"}
    assert custom["c"].hidden_line_prefix == "//"
    assert custom["rust"].environment == {}
    assert custom["rust"].hidden_line_prefix is None


def test_custom_executor_missing_commands():
    with pytest.raises(ConfigLoadError, match="missing field 'commands'"):
        Config.from_dict({"snippet": {"exec": {"enable": True, "custom": {"c": {"filename": "a.c"}}}}})


def test_custom_bindings():
    config = Config.from_dict({"bindings": {"exit": ["<c-q>", "Q"]}})
    assert config.bindings.exit == [KeyBinding.parse("<c-q>"), KeyBinding.parse("Q")]
    assert [str(b) for b in config.bindings.suspend] == ["<c-z>"]


def test_invalid_binding():
    with pytest.raises(ConfigLoadError, match="invalid key binding"):
        Config.from_dict({"bindings": {"next": ["<hi>"]}})


def test_speaker_notes_addresses():
    config = Config.from_dict({
        "speaker_notes": {
            "listen_address": "127.0.0.1:1234",
            "publish_address": "[::1]:4321",
            "always_publish": True,
        }
    })
    assert config.speaker_notes.listen_address == ("127.0.0.1", 1234)
    assert config.speaker_notes.publish_address == ("::1", 4321)
    assert config.speaker_notes.always_publish is True


@pytest.mark.parametrize("address", ["127.0.0.1", "localhost:80", "::1:80", "127.0.0.1:70000"])
def test_invalid_speaker_notes_address(address):
    with pytest.raises(ConfigLoadError, match="invalid socket address"):
        Config.from_dict({"speaker_notes": {"listen_address": address}})


def test_default_addresses_on_linux(monkeypatch):
    monkeypatch.setattr(sys, "platform", "linux")
    assert default_speaker_notes_listen_address() == ("127.255.255.255", 59418)
    assert default_speaker_notes_publish_address() == ("127.255.255.255", 59418)


def test_default_addresses_on_macos(monkeypatch):
    monkeypatch.setattr(sys, "platform", "darwin")
    assert default_speaker_notes_listen_address() == ("127.0.0.1", 59418)
    assert default_speaker_notes_publish_address() == ("127.0.0.1", 59418)


def test_export_dimensions():
    config = Config.from_dict({"export": {"dimensions": {"rows": 35, "columns": 135}}})
    assert config.export.dimensions is not None
    assert (config.export.dimensions.rows, config.export.dimensions.columns) == (35, 135)


def test_export_dimensions_require_both():
    with pytest.raises(ConfigLoadError, match="missing field 'columns'"):
        Config.from_dict({"export": {"dimensions": {"rows": 35}}})


def test_transition():
    config = Config.from_dict({"transition": {"animation": {"style": "fade"}, "frames": 10}})
    assert config.transition is not None
    assert config.transition.animation is SlideTransitionStyle.FADE
    assert config.transition.frames == 10
    assert config.transition.duration_millis == 1000


def test_transition_requires_animation():
    with pytest.raises(ConfigLoadError, match="missing field 'animation'"):
        Config.from_dict({"transition": {"frames": 10}})


def test_load_missing_file(tmp_path):
    with pytest.raises(ConfigNotFoundError, match="config file not found"):
        Config.load(tmp_path / "config.yaml")


def test_load_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("defaults:\n  theme: light\n  max_columns: 100\ntypst:\n  ppi: 400\n")
    config = Config.load(path)
    assert config.defaults.theme == "light"
    assert config.defaults.max_columns == 100
    assert config.typst.ppi == 400


def test_load_invalid_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("defaults: [unclosed\n")
    with pytest.raises(ConfigLoadError, match="invalid configuration") as info:
        Config.load(path)
    assert not isinstance(info.value, ConfigNotFoundError)


def test_load_non_mapping(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- 1\n- 2\n")
    with pytest.raises(ConfigLoadError, match="expected a mapping"):
        Config.load(path)


def test_load_directory_is_io_error(tmp_path):
    with pytest.raises(ConfigLoadError) as info:
        Config.load(tmp_path)
    assert not isinstance(info.value, ConfigNotFoundError)
    assert str(info.value).startswith("io: ")