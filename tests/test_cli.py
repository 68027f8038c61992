"""Tests for the contractkit command line."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from conftest import FakeRunner
from typer.testing import CliRunner

from contractkit import cli
from contractkit.shell import ToolResult
from contractkit.targets import BuildTarget

runner = CliRunner()


def _echo_contract(argv: list[str], stdin: bytes | None) -> ToolResult | None:
    if stdin is None:
        return None
    payload = json.loads(stdin)
    if payload.get("throw"):
        return ToolResult(argv=argv, returncode=1, stderr="Error: contract threw")
    return ToolResult(argv=argv, returncode=0, stdout=json.dumps({"echo": payload}))


@pytest.fixture
def tools(monkeypatch) -> FakeRunner:
    fake = FakeRunner(_echo_contract)
    monkeypatch.setattr(cli, "run_tool", fake)
    return fake


def _invoke(project: Path, *args: str):
    return runner.invoke(cli.app, ["--project-dir", str(project), *args])


def _artifact(project: Path) -> None:
    path = project / BuildTarget.NODE.artifact
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("artifact")


def _inputs(project: Path, **bodies: dict) -> None:
    d = project / "inputs"
    d.mkdir()
    for name, body in bodies.items():
        (d / f"{name}.json").write_text(json.dumps(body))


class TestInit:
    def test_unknown_example(self, project, tools):
        result = _invoke(project, "init", "snake")
        assert result.exit_code == 1
        assert "Unknown example 'snake'" in result.output

    def test_default_example(self, project, tools):
        example = project / "dist" / "examples" / "fungible-token"
        example.mkdir(parents=True)
        (example / "example-contract.js").write_text("export default (i) => i;\n")

        result = _invoke(project, "init")
        assert result.exit_code == 0
        assert "contractkit build example-contract.js" in result.output
        assert (project / "example-contract.js").is_file()


class TestBuild:
    def test_requires_file(self, project, tools):
        result = _invoke(project, "build")
        assert result.exit_code == 1
        assert "You must specify a contract file to build." in result.output
        assert tools.calls == []

    def test_node_build(self, project, tools):
        (project / "c.js").write_text("export default (i) => i;\n")
        result = _invoke(project, "build", "c.js")
        assert result.exit_code == 0, result.output
        assert "Built" in result.output
        assert (project / BuildTarget.NODE.artifact).is_file()
        assert tools.ran("webpack")

    def test_invalid_target(self, project, tools):
        (project / "c.js").write_text("")
        result = _invoke(project, "build", "c.js", "--target", "jvm")
        assert result.exit_code != 0
        assert tools.calls == []

    def test_syscheck_failure(self, project, monkeypatch):
        def handler(argv, stdin):
            return ToolResult(argv=argv, returncode=1, stdout="node: not found")

        monkeypatch.setattr(cli, "run_tool", FakeRunner(handler))
        (project / "c.js").write_text("")
        result = _invoke(project, "build", "c.js")
        assert result.exit_code == 1
        assert "System check failed" in result.output
        assert not (project / "build").exists()

    def test_dry_run(self, project, tools):
        (project / "c.js").write_text("")
        result = _invoke(project, "build", "c.js", "--target", "wasm", "--dry-run")
        assert result.exit_code == 0
        assert tools.calls == []
        assert not (project / "build").exists()


class TestTest:
    def test_no_artifact(self, project, tools):
        _inputs(project, a={})
        result = _invoke(project, "test", "--inputJson", "inputs")
        assert result.exit_code == 1
        assert tools.calls == []

    def test_batch_summary(self, project, tools):
        _artifact(project)
        _inputs(project, a={"n": 1}, b={"throw": True}, c={"n": 3})
        result = _invoke(project, "test", "--inputJson", "inputs")

        assert result.exit_code == 0
        assert "All tests completed. Summary of results:" in result.output
        assert "Test 1 (a.json): Passed" in result.output
        assert "Test 2 (b.json): Failed" in result.output
        assert "Test 3 (c.json): Passed" in result.output

    def test_single_input_failure_exits_nonzero(self, project, tools):
        _artifact(project)
        _inputs(project, b={"throw": True})
        result = _invoke(project, "test", "--input-json", "inputs/b.json")
        assert result.exit_code == 1
        assert "contract threw" in result.output

    def test_show_output(self, project, tools):
        _artifact(project)
        _inputs(project, a={"n": 1})
        result = _invoke(project, "test", "--inputJson", "inputs/a.json", "--show-output")
        assert result.exit_code == 0
        assert '{"echo": {"n": 1}}' in result.output

    def test_missing_input(self, project, tools):
        _artifact(project)
        result = _invoke(project, "test", "--inputJson", "nowhere")
        assert result.exit_code == 1
        assert "nowhere" in result.output
