"""Tests for the command-line entry point with a scripted client and terminal."""

import io
import re

import pytest
from rich.console import Console

from specgen import cli
from specgen.common.console import ConsoleUI
from specgen.common.errors import TransportFailure


class ScriptedUI(ConsoleUI):
    def __init__(self, answers):
        super().__init__(Console(file=io.StringIO(), force_terminal=False, width=120))
        self.answers = list(answers)

    def ask(self, prompt):
        if not self.answers:
            raise EOFError
        return self.answers.pop(0)

    @property
    def output(self):
        return self.console.file.getvalue()


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("OPENAI_API_KEY", "sk-cli-test")
    monkeypatch.delenv("SPECGEN_MODEL", raising=False)
    monkeypatch.delenv("SPECGEN_ENDPOINT", raising=False)
    return tmp_path


@pytest.fixture
def wire(monkeypatch, make_client):
    """Patch the CLI's client and UI factories; returns a setter for the scripts."""
    state = {}

    def setup(replies, answers):
        state["client"] = make_client(replies)
        state["ui"] = ScriptedUI(answers)
        state["kwargs"] = None

        def fake_client(api_key, **kwargs):
            state["kwargs"] = kwargs
            return state["client"]

        monkeypatch.setattr(cli, "ChatCompletionClient", fake_client)
        monkeypatch.setattr(cli, "ConsoleUI", lambda: state["ui"])
        return state

    return setup


def test_success_writes_spec_and_exits_zero(workspace, wire):
    state = wire(["What platform?", "Who uses it?", "# Todo App Spec"], ["web", "/finish"])

    assert cli.main(["a todo app", "-o", "specs"]) == 0

    written = list((workspace / "specs").iterdir())
    assert len(written) == 1
    assert re.fullmatch(r"spec-\d{8}-\d{6}\.md", written[0].name)
    assert written[0].read_text(encoding="utf-8") == "# Todo App Spec"
    assert "Specification written to" in state["ui"].output
    assert state["client"].closed


def test_idea_from_file(workspace, wire):
    (workspace / "idea.txt").write_text("  a recipe planner \n", encoding="utf-8")
    state = wire(["Q1", "# Spec"], ["/finish"])

    assert cli.main(["--file", "idea.txt"]) == 0
    assert state["client"].requests[0][0].content.endswith("Here's the idea: a recipe planner")


def test_idea_prompted_interactively(workspace, wire):
    state = wire(["Q1", "# Spec"], ["a chess clock", "/finish"])
    assert cli.main([]) == 0
    assert "a chess clock" in state["client"].requests[0][0].content


def test_empty_idea_exits_nonzero(workspace, wire):
    state = wire([], ["   "])
    assert cli.main([]) == 1
    assert "Invalid input" in state["ui"].output
    assert state["client"].requests == []


def test_missing_idea_file(workspace, wire):
    state = wire([], [])
    assert cli.main(["--file", "missing.txt"]) == 1
    assert "Could not read idea file" in state["ui"].output


def test_missing_api_key(workspace, wire, monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY")
    state = wire([], [])
    assert cli.main(["idea"]) == 1
    assert "OpenAI API key not found" in state["ui"].output


def test_completion_failure_exits_nonzero_without_file(workspace, wire):
    state = wire([TransportFailure("Could not reach the endpoint")], [])
    assert cli.main(["idea"]) == 1
    assert "Network error" in state["ui"].output
    assert "sk-cli-test" not in state["ui"].output
    assert not list(workspace.glob("spec-*.md"))
    assert state["client"].closed


def test_end_of_input_mid_interview(workspace, wire):
    state = wire(["Q1"], [])
    assert cli.main(["idea"]) == 1
    assert "No input received" in state["ui"].output


def test_flags_reach_the_client(workspace, wire):
    state = wire(["Q1", "# Spec"], ["/finish"])
    assert cli.main(["idea", "--model", "gpt-4o-mini", "--extended"]) == 0
    assert state["kwargs"]["model"] == "gpt-4o-mini"
    assert state["client"].requests[-1][-1].content.endswith("immediately begin implementation.")


def test_bad_config_value_exits_nonzero(workspace, wire):
    (workspace / "specgen.yaml").write_text("output_dir:\n")
    state = wire(["Q1", "# Spec"], ["/finish"])
    assert cli.main(["idea"]) == 1
    assert "Configuration error" in state["ui"].output
    assert state["client"].requests == []
