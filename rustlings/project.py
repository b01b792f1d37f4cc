"""Generation of ``rust-project.json`` for rust-analyzer."""

from __future__ import annotations

import glob
import json
import os
import subprocess
from dataclasses import dataclass, field


@dataclass
class Crate:
    """One exercise file seen by rust-analyzer as a crate."""

    root_module: str
    edition: str = "2021"
    deps: list[str] = field(default_factory=list)
    # Lets rust-analyzer work inside #[test] blocks.
    cfg: list[str] = field(default_factory=lambda: ["test"])

    def to_dict(self) -> dict:
        return {
            "root_module": self.root_module,
            "edition": self.edition,
            "deps": list(self.deps),
            "cfg": list(self.cfg),
        }


@dataclass
class RustAnalyzerProject:
    """The contents of ``rust-project.json``."""

    sysroot_src: str = ""
    crates: list[Crate] = field(default_factory=list)

    def add_path(self, path: str | os.PathLike) -> None:
        """Add a crate for ``path`` if it is a ``.rs`` file."""
        path = os.fspath(path)
        if os.path.splitext(path)[1] == ".rs":
            self.crates.append(Crate(root_module=path))

    def exercises_to_json(self, root: str = "./exercises") -> None:
        """Add a crate for every ``.rs`` file below ``root``."""
        pattern = os.path.join(root, "**", "*")
        for path in sorted(glob.glob(pattern, recursive=True, include_hidden=True)):
            self.add_path(path)

    def get_sysroot_src(self) -> None:
        """Find the standard library sources, from RUST_SRC_PATH or ``rustc``."""
        env_path = os.environ.get("RUST_SRC_PATH")
        if env_path is not None:
            self.sysroot_src = env_path
            return
        result = subprocess.run(["rustc", "--print", "sysroot"], capture_output=True)
        output = result.stdout.decode("utf-8", errors="replace")
        words = output.split()
        toolchain = words[0] if words else output
        print(f"Determined toolchain: {toolchain}\n")
        self.sysroot_src = os.path.join(toolchain, "lib", "rustlib", "src", "rust", "library")

    def to_dict(self) -> dict:
        return {
            "sysroot_src": self.sysroot_src,
            "crates": [crate.to_dict() for crate in self.crates],
        }

    def write_to_disk(self, path: str | os.PathLike = "./rust-project.json") -> None:
        """Write the project as compact JSON."""
        data = json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False)
        with open(path, "wb") as handle:
            handle.write(data.encode("utf-8"))