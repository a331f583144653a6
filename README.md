# termslides

Building blocks for running slideshows in a terminal.

The package holds the parts of a terminal presentation tool that do not draw
to the screen themselves:

- `termslides.keyboard` parses key binding patterns such as `gg`, `<c-r>`,
  `<PageDown>`, `<f5>` or `<number>G` (`KeyBinding.parse`), matches sequences
  of `KeyEvent`s against them (`KeyBinding.match_events`), maps them to
  commands (`CommandKeyBindings`) and rejects bindings where one is equal to,
  or a prefix of, another (`CommandKeyBindings.validate_conflicts`).
  `KeyboardListener.feed` buffers events one at a time until they complete a
  command.
- `termslides.commands` defines the commands a presentation reacts to
  (`CommandKind`, `Command`, `Command.go_to_slide`).
- `termslides.config` loads the YAML configuration file (`Config.load`, or
  `Config.from_dict` for already parsed data) with all of its defaults:
  theme, terminal font size, image protocol, overflow validation, maximum
  columns and rows, key bindings, snippet execution, speaker notes addresses,
  export dimensions and slide transitions. Unknown fields and wrongly typed
  values raise `ConfigLoadError`; a missing file raises `ConfigNotFoundError`.
- `termslides.execute` runs code snippets through per-language executors,
  either in the background (`SnippetExecutor.execute_async`, returning an
  `ExecutionHandle`) or to completion (`SnippetExecutor.execute_sync`).
- `termslides.speaker_notes` publishes and listens for `SpeakerNotesEvent`s
  over UDP so a second terminal can follow the presentation.
- `termslides.html` turns a `TextStyle` into an HTML span (`HtmlText`) and
  colors into CSS hex values (`color_to_html`).
- `termslides.padding` right-aligns line numbers (`NumberPadder`).

## Installation

```
pip install .
```

## Examples

Key bindings and commands:

```python
from termslides.config import KeyBindingsConfig
from termslides.keyboard import CommandKeyBindings, KeyboardListener, KeyBinding, KeyCode, KeyEvent

print(str(KeyBinding.parse("<number>G")))  # <number>G

listener = KeyboardListener(CommandKeyBindings.from_config(KeyBindingsConfig()))
for key in "42G":
    command = listener.feed(KeyEvent(KeyCode.char(key)))
print(command)  # Command(kind=<CommandKind.GO_TO_SLIDE: 'GoToSlide'>, slide=42)
```

Loading configuration:

```python
from termslides.config import Config

config = Config.load("config.yaml")
print(config.defaults.max_columns, config.snippet.render.threads)
```

Running a snippet. There are no built-in executors: every language is
configured with a `LanguageSnippetExecutionConfig`, where `$pwd` in a command
stands for the temporary directory holding the snippet file, and lines
starting with `hidden_line_prefix` run with the prefix removed.

```python
from termslides.config import LanguageSnippetExecutionConfig
from termslides.execute import SnippetExecutor

executor = SnippetExecutor(
    {
        "shell": LanguageSnippetExecutionConfig(
            filename="script.sh",
            commands=[["sh", "$pwd/script.sh"]],
            hidden_line_prefix="/// ",
        )
    },
    cwd=".",
)
handle = executor.execute_async("shell", "echo 'hello world'\n")
state = handle.wait(5)
print(state.status, state.output)  # ProcessStatus.SUCCESS b'hello world\n'
```

The executors configured under `snippet.exec.custom` in the configuration
file can be passed straight in: `SnippetExecutor(config.snippet.exec.custom)`.

Speaker notes:

```python
from termslides.config import default_speaker_notes_listen_address, default_speaker_notes_publish_address
from termslides.speaker_notes import (
    SpeakerNotesEvent,
    SpeakerNotesEventListener,
    SpeakerNotesEventPublisher,
)

with SpeakerNotesEventListener(default_speaker_notes_listen_address(), "/tmp/talk.md") as listener, \
        SpeakerNotesEventPublisher(default_speaker_notes_publish_address(), "/tmp/talk.md") as publisher:
    publisher.send(SpeakerNotesEvent("GoToSlide", 3))
    event = listener.try_recv()  # None until the datagram arrives
```

Styling text for HTML and padding numbers:

```python
from termslides.html import Color, FontSize, HtmlText, TextStyle
from termslides.padding import NumberPadder

print(str(HtmlText.new("hi", TextStyle().bold(), FontSize(1))))
# <span style="font-weight: bold">hi</span>
print(str(HtmlText.new("hi", TextStyle().fg_color(Color.rgb(1, 2, 3)), FontSize(1))))
# <span style="color: #010203">hi</span>
print(repr(NumberPadder(100).pad_right(7)))  # '  7'
```

## What this package does not do

- It has no command-line program and does not display presentations: there
  is no markdown parsing, theming, syntax highlighting, image drawing or
  terminal rendering.
- It does not read the keyboard; key events are handed to
  `KeyboardListener.feed` by the caller.
- It does not export to PDF; `termslides.html` only renders styled text.

## Tests

```
pip install .[test]
pytest
```