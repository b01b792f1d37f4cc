"""Verification of exercises: compile, run or test them and report progress."""

from __future__ import annotations

import enum
import math
import sys
from collections.abc import Iterable

from .exercise import CompiledExercise, Exercise, ExerciseFailed, Mode, no_emoji_set
from .ui import blue, bold, success, warn

_BAR_WIDTH = 60


class _Spinner:
    """A one-line status message on standard error, drawn only on a terminal."""

    def __init__(self, message: str) -> None:
        self._stream = sys.stderr
        self._message = ""
        self.set_message(message)

    def _enabled(self) -> bool:
        isatty = getattr(self._stream, "isatty", None)
        return bool(isatty and isatty())

    def set_message(self, message: str) -> None:
        self._message = message
        self._draw()

    def _line(self) -> str:
        return self._message

    def _draw(self) -> None:
        if self._enabled():
            self._stream.write(f"\r\x1b[2K{self._line()}")
            self._stream.flush()

    def finish_and_clear(self) -> None:
        if self._enabled():
            self._stream.write("\r\x1b[2K")
            self._stream.flush()


class _ProgressBar(_Spinner):
    """A progress bar of fixed width with a position out of a total."""

    def __init__(self, total: int) -> None:
        self._total = total
        self._position = 0
        super().__init__("")

    def set_position(self, position: int) -> None:
        self._position = position
        self._draw()

    def inc(self, delta: int = 1) -> None:
        self.set_position(self._position + delta)

    def _line(self) -> str:
        filled = min(_BAR_WIDTH, _BAR_WIDTH * self._position // self._total) if self._total else 0
        if filled < _BAR_WIDTH:
            bar = "#" * filled + ">" + "-" * (_BAR_WIDTH - filled - 1)
        else:
            bar = "#" * _BAR_WIDTH
        return f"Progress: [{bar}] {self._position}/{self._total} {self._message}"


class RunMode(enum.Enum):
    """Whether a successful test run should prompt for completion."""

    INTERACTIVE = "interactive"
    NON_INTERACTIVE = "noninteractive"


class VerificationFailed(Exception):
    """An exercise did not compile, did not run cleanly, or is still pending."""

    def __init__(self, exercise: Exercise) -> None:
        super().__init__(f"verification of {exercise} failed")
        self.exercise = exercise


def verify(
    exercises: Iterable[Exercise],
    progress: tuple[int, int],
    verbose: bool = False,
    success_hints: bool = False,
) -> None:
    """Check each exercise in turn; raise VerificationFailed at the first that fails."""
    num_done, total = progress
    bar = _ProgressBar(total)
    percentage = num_done / total * 100.0 if total else math.nan
    bar.set_position(num_done)
    bar.set_message(f"({percentage:.1f} %)")

    for exercise in exercises:
        if exercise.mode in (Mode.TEST, Mode.BUILD_SCRIPT):
            passed = _compile_and_test(exercise, RunMode.INTERACTIVE, verbose, success_hints)
        elif exercise.mode is Mode.COMPILE:
            passed = _compile_and_run_interactively(exercise, success_hints)
        else:
            passed = _compile_only(exercise, success_hints)
        if not passed:
            raise VerificationFailed(exercise)
        percentage += 100.0 / total if total else math.nan
        bar.inc(1)
        bar.set_message(f"({percentage:.1f} %)")


def test(exercise: Exercise, verbose: bool = False) -> None:
    """Compile and run the exercise's test harness without prompting."""
    if not _compile_and_test(exercise, RunMode.NON_INTERACTIVE, verbose, False):
        raise VerificationFailed(exercise)


def _compile(exercise: Exercise, spinner: _Spinner) -> CompiledExercise | None:
    try:
        return exercise.compile()
    except ExerciseFailed as err:
        spinner.finish_and_clear()
        warn(f"Compiling of {exercise} failed! Please try again. Here's the output:")
        print(err.output.stderr)
        return None


def _compile_only(exercise: Exercise, success_hints: bool) -> bool:
    spinner = _Spinner(f"Compiling {exercise}...")
    compiled = _compile(exercise, spinner)
    if compiled is None:
        return False
    compiled.close()
    spinner.finish_and_clear()
    return prompt_for_completion(exercise, None, success_hints)


def _compile_and_run_interactively(exercise: Exercise, success_hints: bool) -> bool:
    spinner = _Spinner(f"Compiling {exercise}...")
    compiled = _compile(exercise, spinner)
    if compiled is None:
        return False
    with compiled:
        spinner.set_message(f"Running {exercise}...")
        try:
            output = compiled.run()
        except ExerciseFailed as err:
            spinner.finish_and_clear()
            warn(f"Ran {exercise} with errors")
            print(err.output.stdout)
            print(err.output.stderr)
            return False
        spinner.finish_and_clear()
        return prompt_for_completion(exercise, output.stdout, success_hints)


def _compile_and_test(
    exercise: Exercise, run_mode: RunMode, verbose: bool, success_hints: bool
) -> bool:
    spinner = _Spinner(f"Testing {exercise}...")
    compiled = _compile(exercise, spinner)
    if compiled is None:
        return False
    with compiled:
        try:
            output = compiled.run()
        except ExerciseFailed as err:
            spinner.finish_and_clear()
            warn(f"Testing of {exercise} failed! Please try again. Here's the output:")
            print(err.output.stdout)
            return False
        spinner.finish_and_clear()
        if verbose:
            print(output.stdout)
        if run_mode is RunMode.INTERACTIVE:
            return prompt_for_completion(exercise, None, success_hints)
        return True


def _separator() -> str:
    return bold("====================")


_SUCCESS_TITLES = {
    Mode.COMPILE: "Successfully ran {}!",
    Mode.TEST: "Successfully tested {}!",
    Mode.CLIPPY: "Successfully compiled {}!",
    Mode.BUILD_SCRIPT: "Successfully compiled {}!",
}


def prompt_for_completion(
    exercise: Exercise, prompt_output: str | None = None, success_hints: bool = False
) -> bool:
    """Return True if the exercise is done; otherwise show where the marker is and return False."""
    context = exercise.state()
    if context is None:
        return True

    success(_SUCCESS_TITLES[exercise.mode].format(exercise))

    without_emoji = no_emoji_set()
    if without_emoji:
        clippy_message = "The code is compiling, and Clippy is happy!"
    else:
        clippy_message = "The code is compiling, and 📎 Clippy 📎 is happy!"
    success_message = {
        Mode.COMPILE: "The code is compiling!",
        Mode.TEST: "The code is compiling, and the tests pass!",
        Mode.CLIPPY: clippy_message,
        Mode.BUILD_SCRIPT: "Build script works!",
    }[exercise.mode]

    print()
    if without_emoji:
        print(f"~*~ {success_message} ~*~")
    else:
        print(f"🎉 🎉  {success_message} 🎉 🎉")
    print()

    if prompt_output is not None:
        print("Output:")
        print(_separator())
        print(prompt_output)
        print(_separator())
        print()
    if success_hints:
        print("Hints:")
        print(_separator())
        print(exercise.hint)
        print(_separator())
        print()

    print("You can keep working on this exercise,")
    print(f"or jump into the next one by removing the {bold('`I AM NOT DONE`')} comment:")
    print()
    for context_line in context:
        text = bold(context_line.line) if context_line.important else context_line.line
        print(f"{blue(bold(f'{context_line.number:>2}'))} {blue('|')}  {text}")

    return False