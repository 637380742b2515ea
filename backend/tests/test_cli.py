"""
Tests for the renderbatch CLI.

The render executable is a small Python script that exits with the
integer written in the project file it is given.
"""

import json
import os
import stat
import sys

import pytest

from renderbatch.cli import main
from renderbatch.worker import ENV_AERENDER_PATH

pytestmark = [
    pytest.mark.subprocess,
    pytest.mark.skipif(sys.platform == "win32", reason="uses a shebang script as the executable"),
]


@pytest.fixture
def fake_aerender(tmp_path):
    script = tmp_path / "aerender"
    script.write_text(
        f"#!{sys.executable}\n"
        "import sys\n"
        "project = sys.argv[sys.argv.index('-project') + 1]\n"
        "sys.exit(int(open(project).read().strip() or 0))\n"
    )
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return str(script)


def write_project(tmp_path, name, exit_code):
    path = tmp_path / name
    path.write_text(str(exit_code))
    return str(path)


def run_cli(argv):
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    return exc_info.value.code


class TestLocate:

    def test_explicit_executable(self, capsys):
        assert run_cli(["locate", "--executable", "/opt/aerender"]) == 0
        assert capsys.readouterr().out.strip() == "/opt/aerender"

    def test_env_override(self, capsys, monkeypatch, fake_aerender):
        monkeypatch.setenv(ENV_AERENDER_PATH, fake_aerender)

        assert run_cli(["locate"]) == 0
        assert capsys.readouterr().out.strip() == fake_aerender

    def test_not_found_exits_4(self, capsys, monkeypatch, tmp_path):
        monkeypatch.delenv(ENV_AERENDER_PATH, raising=False)
        monkeypatch.setenv("PATH", str(tmp_path))
        monkeypatch.setattr("renderbatch.worker.discovery._default_locations", lambda: [])

        assert run_cli(["locate"]) == 4
        assert "ERROR" in capsys.readouterr().err


class TestAerender:

    def test_success_prints_one_result_per_project(self, capsys, tmp_path, fake_aerender):
        projects = [write_project(tmp_path, f"shot_{i}.aep", 0) for i in range(2)]

        code = run_cli(["aerender", *projects, "--executable", fake_aerender, "--no-default-flags"])

        assert code == 0
        lines = [json.loads(line) for line in capsys.readouterr().out.splitlines()]
        assert [r["status"] for r in lines] == ["success", "success"]
        assert [r["args"][1] for r in lines] == [os.path.realpath(p) for p in projects]

    def test_failure_exits_2_and_skips_rest(self, capsys, tmp_path, fake_aerender):
        projects = [
            write_project(tmp_path, "a.aep", 0),
            write_project(tmp_path, "b.aep", 5),
            write_project(tmp_path, "c.aep", 0),
        ]

        code = run_cli(["aerender", *projects, "--executable", fake_aerender, "--no-default-flags"])

        assert code == 2
        captured = capsys.readouterr()
        statuses = [json.loads(line)["status"] for line in captured.out.splitlines()]
        assert statuses == ["success", "failed", "skipped"]
        assert "1 of 3" in captured.err

    def test_continue_on_failure(self, capsys, tmp_path, fake_aerender):
        projects = [write_project(tmp_path, "a.aep", 1), write_project(tmp_path, "b.aep", 0)]

        code = run_cli([
            "aerender", *projects,
            "--executable", fake_aerender,
            "--no-default-flags",
            "--continue-on-failure",
        ])

        assert code == 2
        statuses = [json.loads(line)["status"] for line in capsys.readouterr().out.splitlines()]
        assert statuses == ["failed", "success"]

    def test_default_flags_are_passed(self, capsys, tmp_path, fake_aerender):
        project = write_project(tmp_path, "a.aep", 0)

        assert run_cli(["aerender", project, "--executable", fake_aerender]) == 0

        result = json.loads(capsys.readouterr().out.splitlines()[0])
        assert "-continueOnMissingFootage" in result["command"]

    def test_missing_project_exits_4(self, capsys, tmp_path, fake_aerender):
        code = run_cli(["aerender", str(tmp_path / "missing.aep"), "--executable", fake_aerender])

        assert code == 4
        assert "not found" in capsys.readouterr().err
