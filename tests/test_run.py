import subprocess
from pathlib import Path

import pytest

from rustlings.exercise import Exercise, Mode
from rustlings.run import RunFailed, reset, run

FINISHED = "// fake_exercise\n\nfn main() {\n\n}\n"
PENDING = "// fake_exercise\n\n// I AM NOT DONE\n\nfn main() {\n\n}\n"


class FakeTools:
    def __init__(self):
        self.run_returncode = 0
        self.calls = []

    def __call__(self, args, capture_output=False, **kwargs):
        self.calls.append(list(args))
        if args[0] == "rustc":
            source = next(arg for arg in args if arg.endswith(".rs"))
            if "failure" in Path(source).name.lower():
                return subprocess.CompletedProcess(args, 1, b"", b"error: expected pattern")
            return subprocess.CompletedProcess(args, 0, b"", b"")
        return subprocess.CompletedProcess(
            args, self.run_returncode, b"THIS TEST TOO SHALL PASS\n", b"panicked"
        )


@pytest.fixture(autouse=True)
def plain_env(monkeypatch):
    monkeypatch.delenv("CLICOLOR_FORCE", raising=False)
    monkeypatch.delenv("NO_EMOJI", raising=False)


@pytest.fixture
def tools(monkeypatch):
    fake = FakeTools()
    monkeypatch.setattr(subprocess, "run", fake)
    return fake


def make(tmp_path, name, content, mode=Mode.COMPILE):
    path = tmp_path / f"{name}.rs"
    path.write_text(content, encoding="utf-8")
    return Exercise(name=name, path=path, mode=mode, hint="")


def test_run_single_compile_success(tmp_path, tools, capsys):
    exercise = make(tmp_path, "compSuccess", FINISHED)
    run(exercise)
    assert f"Successfully ran {exercise}" in capsys.readouterr().out


def test_run_single_compile_failure(tmp_path, tools, capsys):
    exercise = make(tmp_path, "compFailure", FINISHED)
    with pytest.raises(RunFailed) as info:
        run(exercise)
    assert info.value.exercise is exercise
    assert "Compilation of" in capsys.readouterr().out


def test_run_binary_with_errors(tmp_path, tools, capsys):
    tools.run_returncode = 101
    exercise = make(tmp_path, "compSuccess", FINISHED)
    with pytest.raises(RunFailed):
        run(exercise)
    assert f"Ran {exercise} with errors" in capsys.readouterr().out


def test_run_single_test_failure(tmp_path, tools):
    tools.run_returncode = 101
    exercise = make(tmp_path, "testNotPassed", FINISHED, Mode.TEST)
    with pytest.raises(RunFailed):
        run(exercise)


def test_run_compile_exercise_does_not_prompt(tmp_path, tools, capsys):
    exercise = make(tmp_path, "pending_exercise", PENDING)
    run(exercise)
    assert "I AM NOT DONE" not in capsys.readouterr().out


def test_run_test_with_and_without_output(tmp_path, tools, capsys):
    exercise = make(tmp_path, "testSuccess", FINISHED, Mode.TEST)
    run(exercise, verbose=True)
    assert "THIS TEST TOO SHALL PASS" in capsys.readouterr().out
    run(exercise, verbose=False)
    assert "THIS TEST TOO SHALL PASS" not in capsys.readouterr().out


def test_reset_stashes_file(tmp_path, monkeypatch):
    recorded = []

    def fake_popen(args, **kwargs):
        recorded.append(list(args))
        return "process"

    monkeypatch.setattr(subprocess, "Popen", fake_popen)
    exercise = make(tmp_path, "intro1", FINISHED)
    assert reset(exercise) == "process"
    assert recorded == [["git", "stash", "--", str(exercise.path)]]


def test_reset_without_git(tmp_path, monkeypatch):
    def missing(args, **kwargs):
        raise FileNotFoundError(args[0])

    monkeypatch.setattr(subprocess, "Popen", missing)
    exercise = make(tmp_path, "intro1", FINISHED)
    with pytest.raises(RunFailed):
        reset(exercise)