import os
import subprocess
from pathlib import Path
from unittest import mock

import pytest

from rustlings.exercise import (
    CompiledExercise,
    ContextLine,
    Exercise,
    ExerciseFailed,
    ExerciseOutput,
    Mode,
    clean,
    load_exercises,
    parse_exercises,
    temp_file,
)

PENDING = "// fake_exercise\n\n// I AM NOT DONE\n\nfn main() {\n\n}\n"
FINISHED = "// fake_exercise\n\nfn main() {\n\n}\n"


def _completed(returncode=0, stdout=b"", stderr=b""):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "pending_exercise.rs").write_text(PENDING)
    (tmp_path / "finished_exercise.rs").write_text(FINISHED)
    return tmp_path


def test_clean(workdir):
    Path(temp_file()).touch()
    exercise = Exercise("example", Path("pending_exercise.rs"), Mode.COMPILE, "")
    with mock.patch("subprocess.run", return_value=_completed()):
        compiled = exercise.compile()
    compiled.close()
    assert not Path(temp_file()).exists()


def test_compiled_context_manager_cleans(workdir):
    exercise = Exercise("example", Path("pending_exercise.rs"), Mode.COMPILE, "")
    with mock.patch("subprocess.run", return_value=_completed()):
        with exercise.compile() as compiled:
            Path(temp_file()).touch()
            assert isinstance(compiled, CompiledExercise)
    assert not Path(temp_file()).exists()


def test_pending_state(workdir):
    exercise = Exercise("pending_exercise", Path("pending_exercise.rs"), Mode.COMPILE, "")
    expected = [
        ContextLine("// fake_exercise", 1, False),
        ContextLine("", 2, False),
        ContextLine("// I AM NOT DONE", 3, True),
        ContextLine("", 4, False),
        ContextLine("fn main() {", 5, False),
    ]
    assert exercise.state() == expected
    assert exercise.looks_done() is False


def test_finished_exercise(workdir):
    exercise = Exercise("finished_exercise", Path("finished_exercise.rs"), Mode.COMPILE, "")
    assert exercise.state() is None
    assert exercise.looks_done() is True


def test_marker_on_first_line_context(tmp_path):
    source = tmp_path / "pending_test_exercise.rs"
    source.write_text("// I AM NOT DONE\n\n#[test]\nfn it_works() {}\n")
    state = Exercise("p", source, Mode.TEST).state()
    assert [line.number for line in state] == [1, 2, 3]
    assert [line.important for line in state] == [True, False, False]


def test_exercise_with_output(workdir):
    exercise = Exercise("exercise_with_output", Path("testSuccess.rs"), Mode.TEST, "")
    run_result = _completed(stdout=b"running 1 test\nTHIS TEST TOO SHALL PASS\n")
    with mock.patch("subprocess.run", side_effect=[_completed(), run_result]) as run:
        out = exercise.compile().run()
    assert "THIS TEST TOO SHALL PASS" in out.stdout
    compile_args = run.call_args_list[0].args[0]
    assert compile_args[:3] == ["rustc", "--test", "testSuccess.rs"]
    assert run.call_args_list[1].args[0] == [temp_file(), "--show-output"]


def test_compile_failure_raises_with_stderr(workdir):
    Path(temp_file()).touch()
    exercise = Exercise("compFailure", Path("compFailure.rs"), Mode.COMPILE, "")
    failing = _completed(returncode=1, stdout=b"", stderr=b"error: expected pattern")
    with mock.patch("subprocess.run", return_value=failing):
        with pytest.raises(ExerciseFailed) as info:
            exercise.compile()
    assert info.value.output == ExerciseOutput(stdout="", stderr="error: expected pattern")
    assert not Path(temp_file()).exists()


def test_run_failure_raises(workdir):
    exercise = Exercise("testNotPassed", Path("testNotPassed.rs"), Mode.TEST, "")
    with mock.patch("subprocess.run", return_value=_completed(returncode=101, stdout=b"FAILED")):
        with pytest.raises(ExerciseFailed) as info:
            exercise.execute()
    assert info.value.output.stdout == "FAILED"


def test_build_script_execute_does_not_run(workdir):
    exercise = Exercise("build", Path("build.rs"), Mode.BUILD_SCRIPT, "")
    with mock.patch("subprocess.run") as run:
        assert exercise.execute() == ExerciseOutput("", "")
    run.assert_not_called()


def test_clippy_writes_cargo_toml(workdir):
    (workdir / "exercises" / "clippy").mkdir(parents=True)
    exercise = Exercise("clippy1", Path("exercises/clippy/clippy1.rs"), Mode.CLIPPY, "")
    outcomes = [_completed(), _completed(), _completed(), _completed(stdout=b"clippy ran")]
    with mock.patch("subprocess.run", side_effect=outcomes) as run:
        with exercise.compile() as compiled:
            out = compiled.run()
    assert out.stdout == "clippy ran"
    toml = (workdir / "exercises" / "clippy" / "Cargo.toml").read_text()
    assert 'name = "clippy1"' in toml
    assert 'path = "clippy1.rs"' in toml
    assert run.call_count == 4
    assert run.call_args_list[2].args[0][:2] == ["cargo", "clippy"]


def test_clean_without_file_is_silent(workdir):
    clean()
    assert not Path(temp_file()).exists()


def test_temp_file_is_unique_per_process():
    assert temp_file().startswith(f"./temp_{os.getpid()}_")


def test_str_is_path():
    exercise = Exercise("x", Path("exercises/x.rs"), Mode.COMPILE)
    assert str(exercise) == str(Path("exercises/x.rs"))


def test_parse_exercises():
    text = """
[[exercises]]
name = "intro1"
path = "exercises/intro/intro1.rs"
mode = "compile"
hint = "No hints this time ;)"

[[exercises]]
name = "build"
path = "exercises/tests/build.rs"
mode = "buildscript"
hint = ""
"""
    exercises = parse_exercises(text)
    assert [e.name for e in exercises] == ["intro1", "build"]
    assert exercises[0].mode is Mode.COMPILE
    assert exercises[1].mode is Mode.BUILD_SCRIPT
    assert exercises[0].path == Path("exercises/intro/intro1.rs")
    assert exercises[0].hint == "No hints this time ;)"


def test_parse_exercises_bad_mode():
    text = '[[exercises]]\nname = "a"\npath = "a.rs"\nmode = "fly"\nhint = ""\n'
    with pytest.raises(ValueError):
        parse_exercises(text)


def test_parse_exercises_missing_field():
    with pytest.raises(ValueError):
        parse_exercises('[[exercises]]\nname = "a"\n')


def test_load_exercises(tmp_path):
    info = tmp_path / "info.toml"
    info.write_text('[[exercises]]\nname = "a"\npath = "a.rs"\nmode = "test"\nhint = "Hello!"\n')
    exercises = load_exercises(info)
    assert len(exercises) == 1
    assert exercises[0].hint == "Hello!"
    assert exercises[0].mode is Mode.TEST