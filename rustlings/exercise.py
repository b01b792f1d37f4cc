"""Exercises: loading, compiling, running and checking their state."""

from __future__ import annotations

import enum
import os
import re
import subprocess
import threading
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

RUSTC_COLOR_ARGS = ["--color", "always"]
RUSTC_EDITION_ARGS = ["--edition", "2021"]
I_AM_DONE_REGEX = re.compile(r"^\s*///?\s*I\s+AM\s+NOT\s+DONE", re.MULTILINE)
CONTEXT = 2
CLIPPY_CARGO_TOML_PATH = "./exercises/clippy/Cargo.toml"
BUILD_SCRIPT_CARGO_TOML_PATH = "./exercises/tests/Cargo.toml"


def temp_file() -> str:
    """A temporary binary name unique to this process and thread."""
    return f"./temp_{os.getpid()}_ThreadId{threading.get_ident()}"


def clean() -> None:
    """Remove the temporary binary, ignoring any error."""
    try:
        os.remove(temp_file())
    except OSError:
        pass


class Mode(enum.Enum):
    """How an exercise is checked."""

    COMPILE = "compile"
    TEST = "test"
    CLIPPY = "clippy"
    BUILD_SCRIPT = "buildscript"


@dataclass(frozen=True)
class ContextLine:
    """A source line shown around the pending marker."""

    line: str
    number: int
    important: bool


@dataclass(frozen=True)
class ExerciseOutput:
    """Captured output of a compiler or binary run."""

    stdout: str
    stderr: str


class ExerciseFailed(Exception):
    """Compiling or running an exercise failed."""

    def __init__(self, output: ExerciseOutput) -> None:
        super().__init__(output.stderr or output.stdout)
        self.output = output


def _decode(data: bytes | None) -> str:
    return (data or b"").decode("utf-8", errors="replace")


def _output_of(result: subprocess.CompletedProcess) -> ExerciseOutput:
    return ExerciseOutput(stdout=_decode(result.stdout), stderr=_decode(result.stderr))


def _lines(text: str) -> list[str]:
    parts = text.split("\n")
    if parts and parts[-1] == "":
        parts.pop()
    return [part.removesuffix("\r") for part in parts]


def _cargo_toml(name: str) -> str:
    return (
        "[package]\n"
        f'name = "{name}"\n'
        'version = "0.0.1"\n'
        'edition = "2021"\n'
        "[[bin]]\n"
        f'name = "{name}"\n'
        f'path = "{name}.rs"'
    )


def _write_cargo_toml(path: str, name: str) -> None:
    if no_emoji_set():
        message = "Failed to write Clippy Cargo.toml file."
    else:
        message = "Failed to write 📎 Clippy 📎 Cargo.toml file."
    try:
        Path(path).write_text(_cargo_toml(name), encoding="utf-8")
    except OSError as err:
        raise RuntimeError(message) from err


def no_emoji_set() -> bool:
    return "NO_EMOJI" in os.environ


def _capture(args: list[str], error: str) -> subprocess.CompletedProcess:
    try:
        return subprocess.run(args, capture_output=True)
    except OSError as err:
        raise RuntimeError(error) from err


@dataclass
class Exercise:
    """One exercise as described in ``info.toml``."""

    name: str
    path: Path
    mode: Mode
    hint: str = ""

    def __post_init__(self) -> None:
        self.path = Path(self.path)
        self.mode = Mode(self.mode)

    def __str__(self) -> str:
        return str(self.path)

    def _compile_command(self) -> subprocess.CompletedProcess:
        source = str(self.path)
        failure = "Failed to run 'compile' command."
        if self.mode is Mode.COMPILE:
            args = ["rustc", source, "-o", temp_file(), *RUSTC_COLOR_ARGS, *RUSTC_EDITION_ARGS]
            return _capture(args, failure)
        if self.mode is Mode.TEST:
            args = [
                "rustc", "--test", source, "-o", temp_file(),
                *RUSTC_COLOR_ARGS, *RUSTC_EDITION_ARGS,
            ]
            return _capture(args, failure)
        if self.mode is Mode.CLIPPY:
            _write_cargo_toml(CLIPPY_CARGO_TOML_PATH, self.name)
            # Build a binary too so clippy exercises can be run afterwards.
            _capture(
                ["rustc", source, "-o", temp_file(), *RUSTC_COLOR_ARGS, *RUSTC_EDITION_ARGS],
                "Failed to compile!",
            )
            # A clean is needed for clippy to report every lint.
            _capture(
                ["cargo", "clean", "--manifest-path", CLIPPY_CARGO_TOML_PATH, *RUSTC_COLOR_ARGS],
                "Failed to run 'cargo clean'",
            )
            args = [
                "cargo", "clippy", "--manifest-path", CLIPPY_CARGO_TOML_PATH,
                *RUSTC_COLOR_ARGS, "--", "-D", "warnings", "-D", "clippy::float_cmp",
            ]
            return _capture(args, failure)
        _write_cargo_toml(BUILD_SCRIPT_CARGO_TOML_PATH, self.name)
        return _capture(
            ["cargo", "test", "--manifest-path", BUILD_SCRIPT_CARGO_TOML_PATH], failure
        )

    def compile(self) -> CompiledExercise:
        """Compile the exercise; raise ExerciseFailed with the compiler output on failure."""
        result = self._compile_command()
        if result.returncode == 0:
            return CompiledExercise(self)
        clean()
        raise ExerciseFailed(_output_of(result))

    def execute(self) -> ExerciseOutput:
        """Run the compiled binary; raise ExerciseFailed if it exits unsuccessfully."""
        if self.mode is Mode.BUILD_SCRIPT:
            return ExerciseOutput(stdout="", stderr="")
        arg = "--show-output" if self.mode is Mode.TEST else ""
        print(f"pa={temp_file()}")
        result = _capture([temp_file(), arg], "Failed to run 'run' command")
        output = _output_of(result)
        if result.returncode != 0:
            raise ExerciseFailed(output)
        return output

    def state(self) -> list[ContextLine] | None:
        """None if done, otherwise the lines around the pending marker."""
        source = self.path.read_text(encoding="utf-8")
        if not I_AM_DONE_REGEX.search(source):
            return None
        lines = _lines(source)
        matched = next(
            (index for index, line in enumerate(lines) if I_AM_DONE_REGEX.search(line)),
            None,
        )
        if matched is None:
            raise RuntimeError("This should not happen at all")
        first = max(matched - CONTEXT, 0)
        last = matched + CONTEXT
        return [
            ContextLine(line=line, number=index + 1, important=index == matched)
            for index, line in enumerate(lines)
            if first <= index <= last
        ]

    def looks_done(self) -> bool:
        """Whether the pending marker has been removed from the source."""
        return self.state() is None


@dataclass
class CompiledExercise:
    """A successfully compiled exercise; closing it removes the binary."""

    exercise: Exercise
    _closed: bool = field(default=False, repr=False, compare=False)

    def run(self) -> ExerciseOutput:
        return self.exercise.execute()

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            clean()

    def __enter__(self) -> CompiledExercise:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __del__(self) -> None:
        self.close()


def _exercise_from_table(table: dict) -> Exercise:
    missing = [key for key in ("name", "path", "mode", "hint") if key not in table]
    if missing:
        raise ValueError(f"missing field `{missing[0]}`")
    try:
        mode = Mode(table["mode"])
    except ValueError as err:
        raise ValueError(f"unknown variant `{table['mode']}`") from err
    return Exercise(
        name=str(table["name"]), path=Path(table["path"]), mode=mode, hint=str(table["hint"])
    )


def parse_exercises(text: str) -> list[Exercise]:
    """Parse the exercise list from ``info.toml`` content."""
    data = tomllib.loads(text)
    if "exercises" not in data:
        raise ValueError("missing field `exercises`")
    return [_exercise_from_table(table) for table in data["exercises"]]


def load_exercises(path: str | os.PathLike) -> list[Exercise]:
    """Read and parse an ``info.toml`` file."""
    return parse_exercises(Path(path).read_text(encoding="utf-8"))