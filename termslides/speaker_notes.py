"""Speaker notes events shared between presentation instances over UDP."""

from __future__ import annotations

import json
import socket
import sys
from dataclasses import dataclass
from pathlib import PurePath
from typing import Any

_GO_TO_SLIDE = "GoToSlide"
_EXIT = "Exit"
_U32_MAX = 2**32 - 1
_BUFFER_SIZE = 1024


@dataclass(frozen=True)
class SpeakerNotesEvent:
    """An event: ``GoToSlide`` with a slide number, or ``Exit``."""

    command: str
    slide: int | None = None

    def __post_init__(self) -> None:
        if self.command == _GO_TO_SLIDE:
            if (
                not isinstance(self.slide, int)
                or isinstance(self.slide, bool)
                or not 0 <= self.slide <= _U32_MAX
            ):
                raise ValueError(f"invalid slide number: {self.slide!r}")
        elif self.command == _EXIT:
            if self.slide is not None:
                raise ValueError("exit event takes no slide number")
        else:
            raise ValueError(f"unknown speaker notes command: {self.command!r}")

    def to_dict(self) -> dict[str, Any]:
        """The event's wire representation."""
        if self.command == _GO_TO_SLIDE:
            return {"command": self.command, "slide": self.slide}
        return {"command": self.command}

    @staticmethod
    def from_dict(data: Any) -> SpeakerNotesEvent:
        """Parse an event from its wire representation."""
        if not isinstance(data, dict):
            raise ValueError("speaker notes event must be an object")
        command = data.get("command")
        if command == _GO_TO_SLIDE:
            if "slide" not in data:
                raise ValueError("missing slide number")
            return SpeakerNotesEvent(command, data["slide"])
        if command == _EXIT:
            return SpeakerNotesEvent(command)
        raise ValueError(f"unknown speaker notes command: {command!r}")


def _same_path(left: str, right: str) -> bool:
    return PurePath(left) == PurePath(right)


class SpeakerNotesEventPublisher:
    """Sends speaker notes events tagged with the presentation path."""

    def __init__(self, address: tuple[str, int], presentation_path: str) -> None:
        self.presentation_path = str(presentation_path)
        self._socket = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            self._socket.bind(("127.0.0.1", 0))
            self._socket.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
            self._socket.connect(address)
        except OSError:
            self._socket.close()
            raise

    def send(self, event: SpeakerNotesEvent) -> None:
        """Publish an event; nobody listening is not an error."""
        envelope = {"presentation_path": self.presentation_path, "event": event.to_dict()}
        data = json.dumps(envelope, separators=(",", ":")).encode()
        try:
            self._socket.send(data)
        except ConnectionRefusedError:
            pass

    def close(self) -> None:
        self._socket.close()

    def __enter__(self) -> SpeakerNotesEventPublisher:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class SpeakerNotesEventListener:
    """Receives, without blocking, events for one presentation."""

    def __init__(self, address: tuple[str, int], presentation_path: str) -> None:
        self.presentation_path = str(presentation_path)
        self._socket = socket.socket(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
        try:
            # Several listeners may share the same port.
            if sys.platform != "darwin":
                self._socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            self._socket.setblocking(False)
            self._socket.bind(address)
        except OSError:
            self._socket.close()
            raise

    def try_recv(self) -> SpeakerNotesEvent | None:
        """Return the next event for this presentation, or None if there is none."""
        try:
            data = self._socket.recv(_BUFFER_SIZE)
        except BlockingIOError:
            return None
        # Garbage most likely comes from someone else; ignore it.
        try:
            envelope = json.loads(data)
            path = envelope["presentation_path"]
            event = SpeakerNotesEvent.from_dict(envelope["event"])
        except (ValueError, KeyError, TypeError):
            return None
        if not isinstance(path, str) or not _same_path(path, self.presentation_path):
            return None
        return event

    def close(self) -> None:
        self._socket.close()

    def __enter__(self) -> SpeakerNotesEventListener:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()