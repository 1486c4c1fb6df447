import os
from pathlib import Path

import pytest


class RecordingRunner:
    """Stand-in for run_one that records each call instead of running it.

    verilator and make calls leave behind the files the real tools would, so
    that cleanup has something to remove.
    """

    def __init__(self, retcodes=None, raises=None):
        self.calls = []
        self.retcodes = retcodes or {}
        self.raises = raises or {}

    def __call__(self, verbose, cmd, redirect_stdstreams=None):
        cwd = Path(os.getcwd())
        self.calls.append({
            "cmd": list(cmd),
            "cwd": os.path.realpath(cwd),
            "redirect": redirect_stdstreams,
            "verbose": verbose,
        })

        if cmd[0] in self.raises:
            raise self.raises[cmd[0]]

        if cmd[0] == "verilator":
            obj_dir = cwd / "obj_dir"
            obj_dir.mkdir(exist_ok=True)
            (obj_dir / "VTestModule.mk").write_text("all:\n")
        elif cmd[0] == "make":
            (cwd / "test").write_text("#!/bin/sh\n")

        return self.retcodes.get(cmd[0], 0)

    @property
    def cmds(self):
        return [call["cmd"] for call in self.calls]

    @property
    def programs(self):
        return [call["cmd"][0] for call in self.calls]


@pytest.fixture
def project(tmp_path, monkeypatch):
    """A project root with a vtest/ work directory, cwd set to the latter."""
    root = tmp_path / "project"
    work = root / "vtest"
    work.mkdir(parents=True)
    (root / "build.sh").write_text("#!/bin/sh\n")
    (work / "test.v").write_text("module TestModule; endmodule\n")
    (work / "verilator_main.cc").write_text("int main() { return 0; }\n")

    monkeypatch.delenv("VTEST_CONFIG_FILE", raising=False)
    monkeypatch.chdir(work)
    return work


@pytest.fixture
def runner():
    return RecordingRunner()
