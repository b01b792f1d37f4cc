# rustlings

A command-line companion for working through small Rust exercises. Each
exercise is a Rust source file with a problem in it: a compile error, a failing
test or a lint. Fix it, delete the `// I AM NOT DONE` marker, and move on to the
next one. The tool compiles, runs and tests the exercises with `rustc` and
`cargo`, tracks which ones are done, and re-checks them as you edit.

## Requirements

- Python 3.11 or later
- A Rust toolchain with `rustc` on your `PATH` (and `cargo` for the Clippy and
  build-script exercises)
- `git`, if you want to reset an exercise

## Installing

```
pip install .
```

This installs the `rustlings` command.

## What is not included

The package holds the tool only. It does not ship the exercise files or the
`info.toml` that lists them; you need an exercises directory of your own that
has both.

## Usage

Run every command from the exercises directory, the one that holds
`info.toml`. Otherwise the tool prints a message and exits with status 1. It
also exits with status 1 if `rustc --version` cannot be run.

Running `rustlings` with no subcommand prints a welcome banner and an
introduction.

```
rustlings watch
```

Watch mode verifies the exercises in the order `info.toml` gives. When one
fails or is still marked as not done, it waits. When a `.rs` file under
`exercises/` is created or saved, it checks that exercise first and then the
other pending ones. While it runs you can type:

- `hint`: show the hint for the exercise that last failed
- `clear`: clear the screen
- `quit`: leave watch mode
- `!<cmd>`: run a command, such as `!rustc --explain E0381`
- `help`: list these commands

Pass `--success-hints` (`rustlings watch --success-hints`) to see each
exercise's hint once it compiles.

Other commands:

```
rustlings verify              # check all exercises in order; stops at the first failure
rustlings run <name>          # compile and run (or test) one exercise
rustlings run next            # run the first exercise that is not done yet
rustlings hint <name>         # print an exercise's hint
rustlings reset <name>        # restore an exercise with "git stash -- <file>"
rustlings list                # show each exercise's name, path and status
rustlings list --paths        # show paths only (-p)
rustlings list --names        # show names only (-n)
rustlings list --filter a,b   # show exercises whose name or path contains a pattern (-f)
rustlings list --solved       # show solved exercises only (-s)
rustlings list --unsolved     # show unsolved exercises only (-u)
rustlings lsp                 # write rust-project.json for rust-analyzer
rustlings cicvverify          # grade every exercise and write .github/result/check_result.json
rustlings --version           # print the version (-v)
```

`next` works with `hint` and `reset` as well as `run`. `list` ends with a
progress line giving how many exercises are done.

`cicvverify` runs all exercises concurrently, prints a line for each result,
and writes a JSON report with each exercise's result and totals for successes,
failures and time taken. The `.github/result/` directory must already exist.

`lsp` takes the standard library sources from `RUST_SRC_PATH` if it is set,
otherwise from `rustc --print sysroot`, and adds a crate for every `.rs` file
under `exercises/`.

The global `--nocapture` switch, given before the subcommand
(`rustlings --nocapture run <name>`), shows the output of test exercises.

Exit status is 1 when an exercise is not found, fails to compile, run or pass
its tests, or when `verify` stops at a failure.

## Environment

- `NO_EMOJI`: when set, plain-text symbols are printed in place of emoji.
- `CLICOLOR_FORCE`: when set to anything but `0`, colours are always used.
- `CLICOLOR=0`: turns colours off. Otherwise colours are used when standard
  output is a terminal.
- `RUST_SRC_PATH`: used by `lsp` as the standard library source path.

## Exercise list

`info.toml` lists the exercises in the recommended order as `[[exercises]]`
tables, each with a `name`, a `path`, a `mode` (`compile`, `test`, `clippy` or
`buildscript`) and a `hint`. An exercise counts as done once its file no longer
has a line like `// I AM NOT DONE`.

## Using it from Python

The modules can also be used directly:

- `rustlings.exercise`: `load_exercises` and `parse_exercises` read the
  exercise list; `Exercise.compile`, `Exercise.state` and
  `Exercise.looks_done` check a single exercise.
- `rustlings.verify`: `verify` checks exercises in turn and raises
  `VerificationFailed` at the first that fails.
- `rustlings.run`: `run` and `reset` act on one exercise and raise
  `RunFailed` on failure.
- `rustlings.commands`: `find_exercise`, `list_exercises` and
  `cicv_verify`.
- `rustlings.project`: `RustAnalyzerProject` builds and writes
  `rust-project.json`.
- `rustlings.cli`: `main` is the command-line entry point.