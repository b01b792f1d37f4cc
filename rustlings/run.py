"""Running or resetting a single exercise."""

from __future__ import annotations

import subprocess

from .exercise import Exercise, ExerciseFailed, Mode
from .ui import success, warn
from .verify import VerificationFailed, _Spinner
from .verify import test as _test


class RunFailed(Exception):
    """Running or resetting an exercise failed."""

    def __init__(self, exercise: Exercise) -> None:
        super().__init__(f"running {exercise} failed")
        self.exercise = exercise


def run(exercise: Exercise, verbose: bool = False) -> None:
    """Compile the exercise and run it, or run its tests; raise RunFailed on failure."""
    if exercise.mode in (Mode.TEST, Mode.BUILD_SCRIPT):
        try:
            _test(exercise, verbose)
        except VerificationFailed as err:
            raise RunFailed(exercise) from err
    else:
        _compile_and_run(exercise)


def reset(exercise: Exercise) -> subprocess.Popen:
    """Stash the changes made to the exercise's file with git."""
    try:
        return subprocess.Popen(["git", "stash", "--", str(exercise.path)])
    except OSError as err:
        raise RunFailed(exercise) from err


def _compile_and_run(exercise: Exercise) -> None:
    spinner = _Spinner(f"Compiling {exercise}...")
    try:
        compiled = exercise.compile()
    except ExerciseFailed as err:
        spinner.finish_and_clear()
        warn(f"Compilation of {exercise} failed!, Compiler error message:\n")
        print(err.output.stderr)
        raise RunFailed(exercise) from err

    with compiled:
        spinner.set_message(f"Running {exercise}...")
        try:
            output = compiled.run()
        except ExerciseFailed as err:
            spinner.finish_and_clear()
            print(err.output.stdout)
            print(err.output.stderr)
            warn(f"Ran {exercise} with errors")
            raise RunFailed(exercise) from err
        spinner.finish_and_clear()
        print(output.stdout)
        success(f"Successfully ran {exercise}")