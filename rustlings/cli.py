"""Command-line entry point: argument parsing, watch mode and subcommand dispatch."""

from __future__ import annotations

import argparse
import enum
import itertools
import os
import queue
import subprocess
import sys
import threading
from dataclasses import dataclass, field
from pathlib import Path

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .commands import ExerciseNotFound, cicv_verify, find_exercise, list_exercises
from .exercise import Exercise, load_exercises
from .project import RustAnalyzerProject
from .run import RunFailed, reset, run
from .ui import emoji
from .verify import VerificationFailed, verify

VERSION = "5.5.1"

DEFAULT_OUT = """Thanks for installing Rustlings!

Is this your first time? Don't worry, Rustlings was made for beginners! We are
going to teach you a lot of things about Rust, but before we can get
started, here's a couple of notes about how Rustlings operates:

1. The central concept behind Rustlings is that you solve exercises. These
   exercises usually have some sort of syntax error in them, which will cause
   them to fail compilation or testing. Sometimes there's a logic error instead
   of a syntax error. No matter what error, it's your job to find it and fix it!
   You'll know when you fixed it because then, the exercise will compile and
   Rustlings will be able to move on to the next exercise.
2. If you run Rustlings in watch mode (which we recommend), it'll automatically
   start with the first exercise. Don't get confused by an error message popping
   up as soon as you run Rustlings! This is part of the exercise that you're
   supposed to solve, so open the exercise file in an editor and start your
   detective work!
3. If you're stuck on an exercise, there is a helpful hint you can view by typing
   'hint' (in watch mode), or running `rustlings hint exercise_name`.
4. If an exercise doesn't make sense to you, feel free to open an issue!
   We look at every issue, and sometimes, other learners do too so you can
   help each other out!
5. If you want to use `rust-analyzer` with exercises, which provides features like
   autocompletion, run the command `rustlings lsp`.

Got all that? Great! To get started, run `rustlings watch` in order to get the first
exercise. Make sure to have your editor open!"""

FENISH_LINE = r"""+----------------------------------------------------+
|          You made it to the Fe-nish line!          |
+--------------------------  ------------------------+
                          \\/
     ▒▒          ▒▒▒▒▒▒▒▒      ▒▒▒▒▒▒▒▒          ▒▒
   ▒▒▒▒  ▒▒    ▒▒        ▒▒  ▒▒        ▒▒    ▒▒  ▒▒▒▒
   ▒▒▒▒  ▒▒  ▒▒            ▒▒            ▒▒  ▒▒  ▒▒▒▒
 ░░▒▒▒▒░░▒▒  ▒▒            ▒▒            ▒▒  ▒▒░░▒▒▒▒
   ▓▓▓▓▓▓▓▓  ▓▓      ▓▓██  ▓▓  ▓▓██      ▓▓  ▓▓▓▓▓▓▓▓
     ▒▒▒▒    ▒▒      ████  ▒▒  ████      ▒▒░░  ▒▒▒▒
       ▒▒  ▒▒▒▒▒▒        ▒▒▒▒▒▒        ▒▒▒▒▒▒  ▒▒
         ▒▒▒▒▒▒▒▒▒▒▓▓▓▓▓▓▒▒▒▒▒▒▒▒▓▓▒▒▓▓▒▒▒▒▒▒▒▒
           ▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒
             ▒▒▒▒▒▒▒▒▒▒██▒▒▒▒▒▒██▒▒▒▒▒▒▒▒▒▒
           ▒▒  ▒▒▒▒▒▒▒▒▒▒██████▒▒▒▒▒▒▒▒▒▒  ▒▒
         ▒▒    ▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒    ▒▒
       ▒▒    ▒▒    ▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒    ▒▒    ▒▒
       ▒▒  ▒▒    ▒▒                  ▒▒    ▒▒  ▒▒
           ▒▒  ▒▒                      ▒▒  ▒▒

We hope you enjoyed learning about the various aspects of Rust!
If you noticed any issues, please don't hesitate to report them.
You can also contribute your own exercises to help the greater community!

Before reporting an issue or contributing, please read the contributing guidelines."""

WELCOME = r"""       welcome to...
                 _   _ _
  _ __ _   _ ___| |_| (_)_ __   __ _ ___
 | '__| | | / __| __| | | '_ \ / _` / __|
 | |  | |_| \__ \ |_| | | | | | (_| \__ \
 |_|   \__,_|___/\__|_|_|_| |_|\__, |___/
                               |___/"""


class WatchStatus(enum.Enum):
    """How watch mode ended."""

    FINISHED = "finished"
    UNFINISHED = "unfinished"


class _Parser(argparse.ArgumentParser):
    """Argument parser that exits with status 1 on usage errors."""

    def error(self, message: str) -> None:
        self.print_usage(sys.stderr)
        prefix = "the following arguments are required:"
        if message.startswith(prefix):
            names = message[len(prefix):].strip()
            message = f"Required positional arguments not provided:\n    {names}"
        sys.stderr.write(f"{message}\n")
        raise SystemExit(1)


def build_parser() -> argparse.ArgumentParser:
    """The parser for the command line."""
    parser = _Parser(
        prog="rustlings",
        description="Rustlings is a collection of small exercises to get you used "
        "to writing and reading Rust code",
    )
    parser.add_argument(
        "--nocapture", action="store_true", help="show outputs from the test exercises"
    )
    parser.add_argument(
        "-v", "--version", action="store_true", help="show the executable version"
    )
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("verify", help="Verifies all exercises according to the recommended order")

    watch_parser = sub.add_parser("watch", help="Reruns `verify` when files were edited")
    watch_parser.add_argument(
        "--success-hints", action="store_true", help="show hints on success"
    )

    for name, text in (
        ("run", "Runs/Tests a single exercise"),
        ("reset", 'Resets a single exercise using "git stash -- <filename>"'),
        ("hint", "Returns a hint for the given exercise"),
    ):
        command = sub.add_parser(name, help=text)
        command.add_argument("name", help="the name of the exercise")

    list_parser = sub.add_parser("list", help="Lists the exercises available in Rustlings")
    list_parser.add_argument(
        "-p", "--paths", action="store_true", help="show only the paths of the exercises"
    )
    list_parser.add_argument(
        "-n", "--names", action="store_true", help="show only the names of the exercises"
    )
    list_parser.add_argument(
        "-f",
        "--filter",
        default=None,
        help="provide a string to match exercise names; comma separated patterns are acceptable",
    )
    list_parser.add_argument(
        "-u", "--unsolved", action="store_true", help="display only exercises not yet solved"
    )
    list_parser.add_argument(
        "-s", "--solved", action="store_true", help="display only exercises that have been solved"
    )

    sub.add_parser("lsp", help="Enable rust-analyzer for exercises")
    sub.add_parser("cicvverify", help="cicvverify")
    return parser


def rustc_exists() -> bool:
    """Whether ``rustc --version`` can be run successfully."""
    try:
        result = subprocess.run(["rustc", "--version"], stdout=subprocess.DEVNULL)
    except OSError:
        return False
    return result.returncode == 0


@dataclass
class _ShellState:
    hint: str | None = None
    quit: threading.Event = field(default_factory=threading.Event)


_HELP_TEXT = """Commands available to you in watch mode:
  hint   - prints the current exercise's hint
  clear  - clears the screen
  quit   - quits watch mode
  !<cmd> - executes a command, like `!rustc --explain E0381`
  help   - displays this help message

Watch mode automatically re-evaluates the current exercise
when you edit a file's contents."""


def handle_shell_command(line: str, state) -> None:
    """Act on one line typed in watch mode; ``state`` holds ``hint`` and a ``quit`` event."""
    command = line.strip()
    if command == "hint":
        if state.hint is not None:
            print(state.hint)
    elif command == "clear":
        print("\x1b[2J\x1b[1;1H")
    elif command == "quit":
        state.quit.set()
        print("Bye!")
    elif command == "help":
        print(_HELP_TEXT)
    elif command.startswith("!"):
        cmd = command[1:]
        parts = cmd.split()
        if not parts:
            print("no command provided")
            return
        try:
            subprocess.run(parts)
        except OSError as err:
            print(f"failed to execute command `{cmd}`: {err}")
    else:
        print(f"unknown command: {command}")


def _spawn_watch_shell(state: _ShellState) -> None:
    print(
        "Welcome to watch mode! You can type 'help' to get an overview "
        "of the commands you can use here."
    )

    def loop() -> None:
        while True:
            try:
                line = sys.stdin.readline()
            except (OSError, ValueError) as err:
                print(f"error reading command: {err}")
                return
            if not line:
                return
            handle_shell_command(line, state)

    threading.Thread(target=loop, daemon=True).start()


class _ChangeHandler(FileSystemEventHandler):
    def __init__(self, events: queue.Queue) -> None:
        super().__init__()
        self._events = events

    def _push(self, event) -> None:
        if not event.is_directory:
            self._events.put(os.fsdecode(event.src_path))

    def on_created(self, event) -> None:
        self._push(event)

    def on_modified(self, event) -> None:
        self._push(event)


def _clear_screen() -> None:
    print("\x1bc")


def _path_ends_with(full: Path, tail: Path) -> bool:
    tail_parts = Path(tail).parts
    if not tail_parts or len(tail_parts) > len(full.parts):
        return False
    return full.parts[-len(tail_parts):] == tail_parts


def watch(
    exercises: list[Exercise], verbose: bool = False, success_hints: bool = False
) -> WatchStatus:
    """Verify exercises, then re-verify whenever an exercise file changes."""
    events: queue.Queue = queue.Queue()
    observer = Observer()
    observer.schedule(_ChangeHandler(events), "./exercises", recursive=True)
    observer.start()
    try:
        _clear_screen()
        state = _ShellState()
        try:
            verify(exercises, (0, len(exercises)), verbose, success_hints)
            return WatchStatus.FINISHED
        except VerificationFailed as err:
            state.hint = err.exercise.hint
        _spawn_watch_shell(state)

        while True:
            try:
                changed = events.get(timeout=1)
            except queue.Empty:
                changed = None
            if changed is not None:
                # Collapse bursts of events for the same file.
                while True:
                    try:
                        following = events.get_nowait()
                    except queue.Empty:
                        break
                    if following != changed:
                        events.put(following)
                        break
                path = Path(changed)
                if path.suffix == ".rs" and path.exists():
                    filepath = path.resolve()
                    current = next(
                        (e for e in exercises if _path_ends_with(filepath, e.path)), None
                    )
                    pending = itertools.chain(
                        [current] if current is not None else [],
                        (
                            e
                            for e in exercises
                            if not e.looks_done() and not _path_ends_with(filepath, e.path)
                        ),
                    )
                    num_done = sum(1 for e in exercises if e.looks_done())
                    _clear_screen()
                    try:
                        verify(pending, (num_done, len(exercises)), verbose, success_hints)
                        return WatchStatus.FINISHED
                    except VerificationFailed as err:
                        state.hint = err.exercise.hint
            if state.quit.is_set():
                return WatchStatus.UNFINISHED
    finally:
        observer.stop()
        observer.join()


def _lsp() -> None:
    project = RustAnalyzerProject()
    try:
        project.get_sysroot_src()
    except OSError as err:
        raise RuntimeError(
            "Couldn't find toolchain path, do you have `rustc` installed?"
        ) from err
    project.exercises_to_json()
    if not project.crates:
        print("Failed find any exercises, make sure you're in the `rustlings` folder")
        return
    try:
        project.write_to_disk()
    except OSError:
        print("Failed to write rust-project.json to disk for rust-analyzer")
        return
    print("Successfully generated rust-project.json")
    print("rust-analyzer will now parse exercises, restart your language server or editor")


def _dispatch(args: argparse.Namespace, exercises: list[Exercise]) -> int:
    verbose = args.nocapture
    command = args.command

    if command == "list":
        try:
            list_exercises(
                exercises,
                paths=args.paths,
                names=args.names,
                filter=args.filter,
                unsolved=args.unsolved,
                solved=args.solved,
            )
        except BrokenPipeError:
            return 0
        return 0

    if command in ("run", "reset", "hint"):
        try:
            exercise = find_exercise(args.name, exercises)
        except ExerciseNotFound as err:
            print(err)
            return 1
        if command == "hint":
            print(exercise.hint)
            return 0
        try:
            if command == "run":
                run(exercise, verbose)
            else:
                reset(exercise)
        except RunFailed:
            return 1
        return 0

    if command == "verify":
        try:
            verify(exercises, (0, len(exercises)), verbose, False)
        except VerificationFailed:
            return 1
        return 0

    if command == "cicvverify":
        cicv_verify(exercises)
        return 0

    if command == "lsp":
        _lsp()
        return 0

    try:
        status = watch(exercises, verbose, args.success_hints)
    except OSError as err:
        print(f"Error: Could not watch your progress. Error message was {err!r}.")
        print(
            "Most likely you've run out of disk space or your 'inotify limit' has been reached."
        )
        return 1
    if status is WatchStatus.FINISHED:
        mark = emoji("🎉", "★")
        print(f"{mark} All exercises completed! {mark}")
        print(f"\n{FENISH_LINE}\n")
    else:
        print("We hope you're enjoying learning about Rust!")
        print(
            "If you want to continue working on the exercises at a later point, "
            "you can simply run `rustlings watch` again"
        )
    return 0


def main(argv: list[str] | None = None) -> int:
    """Run the command line; return the exit status."""
    try:
        args = build_parser().parse_args(argv)
    except SystemExit as err:
        return err.code if isinstance(err.code, int) else (0 if err.code is None else 1)

    if args.version:
        print(f"v{VERSION}")
        return 0

    if args.command is None:
        print(f"\n{WELCOME}\n")

    if not Path("info.toml").exists():
        print(f"{os.path.abspath(sys.argv[0])} must be run from the rustlings directory")
        print("Try `cd rustlings/`!")
        return 1

    if not rustc_exists():
        print("We cannot find `rustc`.")
        print("Try running `rustc --version` to diagnose your problem.")
        print("For instructions on how to install Rust, check the README.")
        return 1

    exercises = load_exercises("info.toml")

    if args.command is None:
        print(f"{DEFAULT_OUT}\n")
        return 0

    return _dispatch(args, exercises)


if __name__ == "__main__":
    sys.exit(main())