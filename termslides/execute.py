"""Execution of code snippets through per-language commands."""

from __future__ import annotations

import enum
import os
import subprocess
import tempfile
import threading
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import IO, Mapping

from termslides.config import LanguageSnippetExecutionConfig

_PWD_PLACEHOLDER = "$pwd"
_TEMP_DIR_PREFIX = ".termslides"


class InvalidSnippetConfig(ValueError):
    """A snippet executor configuration is invalid."""

    def __init__(self, language: str, reason: str) -> None:
        super().__init__(f"invalid snippet execution for '{language}': {reason}")
        self.language = language
        self.reason = reason


class CodeExecuteError(Exception):
    """Code could not be executed."""


class ProcessStatus(enum.Enum):
    """The status of a running snippet."""

    RUNNING = "running"
    SUCCESS = "success"
    FAILURE = "failure"

    def is_finished(self) -> bool:
        """Whether the underlying process has finished."""
        return self in (ProcessStatus.SUCCESS, ProcessStatus.FAILURE)


@dataclass
class ExecutionState:
    """The output gathered so far and the status of an execution."""

    output: bytes = b""
    status: ProcessStatus = ProcessStatus.RUNNING


@dataclass
class ExecutionHandle:
    """A handle on a snippet being executed in the background."""

    _state: ExecutionState = field(default_factory=ExecutionState)
    _lock: threading.Lock = field(default_factory=threading.Lock)
    _thread: threading.Thread | None = None

    def snapshot(self) -> ExecutionState:
        """A copy of the current execution state."""
        with self._lock:
            return replace(self._state)

    def wait(self, timeout: float | None = None) -> ExecutionState:
        """Wait for the execution to finish and return its final state."""
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                raise TimeoutError("snippet execution did not finish in time")
        return self.snapshot()

    def _append(self, data: bytes) -> None:
        with self._lock:
            self._state.output += data

    def _set_status(self, status: ProcessStatus) -> None:
        with self._lock:
            self._state.status = status


def _executable_contents(code: str, hidden_line_prefix: str | None) -> str:
    if not hidden_line_prefix:
        return code
    return "".join(
        line[len(hidden_line_prefix):] if line.startswith(hidden_line_prefix) else line
        for line in code.splitlines(keepends=True)
    )


def _strip_newline(line: bytes) -> bytes:
    if line.endswith(b"\n"):
        line = line[:-1]
        if line.endswith(b"\r"):
            line = line[:-1]
    return line


class SnippetExecutor:
    """Runs snippets using the commands configured for their language."""

    def __init__(
        self,
        executors: Mapping[str, LanguageSnippetExecutionConfig] | None = None,
        cwd: str | Path = "./",
    ) -> None:
        self.executors = dict(sorted((executors or {}).items()))
        self.cwd = Path(cwd)
        for language, config in self.executors.items():
            if not config.filename:
                raise InvalidSnippetConfig(language, "filename is empty")
            if not config.commands:
                raise InvalidSnippetConfig(language, "no commands given")
            if any(not command for command in config.commands):
                raise InvalidSnippetConfig(language, "empty command given")

    def is_execution_supported(self, language: str) -> bool:
        return language in self.executors

    def hidden_line_prefix(self, language: str) -> str | None:
        config = self.executors.get(language)
        return config.hidden_line_prefix if config else None

    def execute_async(self, language: str, code: str, binary: bool = False) -> ExecutionHandle:
        """Start running a snippet in the background."""
        config = self._language_config(language)
        script_dir = self._write_snippet(code, config)
        handle = ExecutionHandle()
        thread = threading.Thread(
            target=self._run_commands,
            args=(handle, script_dir, config, binary),
            daemon=True,
        )
        handle._thread = thread
        thread.start()
        return handle

    def execute_sync(self, language: str, code: str) -> None:
        """Run a snippet to completion; raise if any command fails."""
        config = self._language_config(language)
        with self._write_snippet(code, config) as script_dir:
            for command in config.commands:
                args = [part.replace(_PWD_PLACEHOLDER, script_dir) for part in command]
                try:
                    result = subprocess.run(
                        args,
                        env=self._environment(config),
                        cwd=self.cwd,
                        stderr=subprocess.PIPE,
                    )
                except OSError as error:
                    raise CodeExecuteError(
                        f"error spawning process '{args[0]}': {error}"
                    ) from error
                if result.returncode != 0:
                    stderr = result.stderr.decode("utf-8", errors="replace")
                    raise CodeExecuteError(f"error running process: {stderr}")

    def _language_config(self, language: str) -> LanguageSnippetExecutionConfig:
        config = self.executors.get(language)
        if config is None:
            raise CodeExecuteError("code language doesn't support execution")
        return config

    @staticmethod
    def _write_snippet(
        code: str, config: LanguageSnippetExecutionConfig
    ) -> tempfile.TemporaryDirectory[str]:
        contents = _executable_contents(code, config.hidden_line_prefix)
        try:
            script_dir = tempfile.TemporaryDirectory(prefix=_TEMP_DIR_PREFIX)
            (Path(script_dir.name) / config.filename).write_text(contents, encoding="utf-8")
        except OSError as error:
            raise CodeExecuteError(f"error creating temporary directory: {error}") from error
        return script_dir

    @staticmethod
    def _environment(config: LanguageSnippetExecutionConfig) -> dict[str, str]:
        return {**os.environ, **config.environment}

    def _run_commands(
        self,
        handle: ExecutionHandle,
        script_dir: tempfile.TemporaryDirectory[str],
        config: LanguageSnippetExecutionConfig,
        binary: bool,
    ) -> None:
        succeeded = True
        try:
            for command in config.commands:
                args = [part.replace(_PWD_PLACEHOLDER, script_dir.name) for part in command]
                succeeded = self._run_command(handle, args, config, binary)
                if not succeeded:
                    break
        finally:
            script_dir.cleanup()
            handle._set_status(ProcessStatus.SUCCESS if succeeded else ProcessStatus.FAILURE)

    def _run_command(
        self,
        handle: ExecutionHandle,
        args: list[str],
        config: LanguageSnippetExecutionConfig,
        binary: bool,
    ) -> bool:
        try:
            process = subprocess.Popen(
                args,
                env=self._environment(config),
                cwd=self.cwd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
            )
        except OSError as error:
            handle._append(f"error spawning process '{args[0]}': {error}".encode())
            return False
        with process:
            stdout: IO[bytes] = process.stdout  # type: ignore[assignment]
            try:
                if binary:
                    handle._append(stdout.read())
                else:
                    for line in stdout:
                        handle._append(_strip_newline(line) + b"\n")
            except OSError:
                pass
            return process.wait() == 0