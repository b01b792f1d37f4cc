"""Exercise lookup, listing and the batch grading report."""

from __future__ import annotations

import json
import math
import os
import sys
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import TextIO

from .exercise import Exercise
from .run import RunFailed, run


class ExerciseNotFound(Exception):
    """No exercise matches the requested name."""


def find_exercise(name: str, exercises: list[Exercise]) -> Exercise:
    """The exercise called ``name``, or the first pending one for ``next``."""
    if name == "next":
        for exercise in exercises:
            if not exercise.looks_done():
                return exercise
        raise ExerciseNotFound(
            "🎉 Congratulations! You have done all the exercises!\n"
            "🔚 There are no more exercises to do next!"
        )
    for exercise in exercises:
        if exercise.name == name:
            return exercise
    raise ExerciseNotFound(f"No exercise found for '{name}'!")


def list_exercises(
    exercises: list[Exercise],
    paths: bool = False,
    names: bool = False,
    filter: str | None = None,
    unsolved: bool = False,
    solved: bool = False,
    out: TextIO | None = None,
) -> int:
    """Write the exercise table and a progress line; return the number done."""
    out = sys.stdout if out is None else out
    if not paths and not names:
        out.write(f"{'Name':<17}\t{'Path':<46}\t{'Status':<7}\n")
    patterns = [p for p in (filter or "").lower().split(",") if p.strip()]
    done_count = 0
    for exercise in exercises:
        fname = str(exercise.path)
        matches = any(p in exercise.name or p in fname for p in patterns)
        done = exercise.looks_done()
        if done:
            done_count += 1
        status = "Done" if done else "Pending"
        wanted = (done and solved) or (not done and unsolved) or (not solved and not unsolved)
        if wanted and (matches or filter is None):
            if paths:
                out.write(f"{fname}\n")
            elif names:
                out.write(f"{exercise.name}\n")
            else:
                out.write(f"{exercise.name:<17}\t{fname:<46}\t{status:<7}\n")
    total = len(exercises)
    percentage = done_count / total * 100.0 if total else math.nan
    out.write(
        f"Progress: You completed {done_count} / {total} exercises ({percentage:.1f} %).\n"
    )
    return done_count


@dataclass
class ExerciseResult:
    name: str
    result: bool


@dataclass
class ExerciseStatistics:
    total_exercations: int = 0
    total_succeeds: int = 0
    total_failures: int = 0
    total_time: int = 0


@dataclass
class ExerciseCheckList:
    """The grading report written after checking every exercise."""

    exercises: list[ExerciseResult] = field(default_factory=list)
    user_name: str | None = None
    statistics: ExerciseStatistics = field(default_factory=ExerciseStatistics)

    def to_dict(self) -> dict:
        return {
            "exercises": [{"name": r.name, "result": r.result} for r in self.exercises],
            "user_name": self.user_name,
            "statistics": {
                "total_exercations": self.statistics.total_exercations,
                "total_succeeds": self.statistics.total_succeeds,
                "total_failures": self.statistics.total_failures,
                "total_time": self.statistics.total_time,
            },
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)


def cicv_verify(
    exercises: list[Exercise],
    output_path: str | os.PathLike = ".github/result/check_result.json",
) -> ExerciseCheckList:
    """Run every exercise concurrently, print progress and write the JSON report."""
    started = int(time.time())
    total = len(exercises)
    check_list = ExerciseCheckList(statistics=ExerciseStatistics(total_exercations=total))
    lock = threading.Lock()
    rights = 0

    def check(exercise: Exercise, task_started: int) -> None:
        nonlocal rights
        try:
            run(exercise, True)
            passed = True
        except RunFailed:
            passed = False
        with lock:
            if passed:
                rights += 1
                print(f"{exercise.name}执行成功")
            else:
                print(f"{exercise.name}执行失败")
            print(f"总的题目数: {total}")
            print(f"当前做正确的题目数: {rights}")
            print(f"当前修改试卷耗时: {int(time.time()) - task_started} s")
            check_list.exercises.append(ExerciseResult(name=exercise.name, result=passed))
            if passed:
                check_list.statistics.total_succeeds += 1
            else:
                check_list.statistics.total_failures += 1

    with ThreadPoolExecutor() as pool:
        futures = [pool.submit(check, exercise, int(time.time())) for exercise in exercises]
        for future in futures:
            future.result()

    total_time = int(time.time()) - started
    print(
        "===============================试卷批改完成,总耗时: "
        f"{total_time} s; =================================="
    )
    check_list.statistics.total_time = total_time
    Path(output_path).write_text(check_list.to_json(), encoding="utf-8")
    return check_list