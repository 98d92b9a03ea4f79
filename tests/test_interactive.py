"""Tests for the editor round trip and parent selection."""

from __future__ import annotations

import io

import click
import httpx
import pytest
from rich.console import Console

from conftest import PROJECT, SERVER, make_issue
from redmine_cli.client import RedmineClient
from redmine_cli.config import Settings
from redmine_cli.errors import RedmineCliError
from redmine_cli.interactive import (
    build_editor_text,
    open_in_editor,
    select_parent_issue,
    strip_comments,
)


def test_build_editor_text():
    text = build_editor_text("Enter the issue description\nTask #3", "body")
    assert text == (
        "; Enter the issue description\n"
        "; Task #3\n"
        "; Lines starting with ; are comments and are ignored\n"
        ";\n"
        "body"
    )


def test_strip_comments():
    assert strip_comments("; one\nkeep\n;two\r\nalso keep\n; last") == "keep\nalso keep\n"
    assert strip_comments("a ; not a comment\n") == "a ; not a comment\n"


def test_round_trip_removes_header():
    assert strip_comments(build_editor_text("Header", "Line 1\nLine 2")) == "Line 1\nLine 2"


def test_open_in_editor(monkeypatch: pytest.MonkeyPatch):
    calls = {}

    def fake_edit(text, editor=None, extension=".txt", require_save=True):
        calls.update(text=text, editor=editor, require_save=require_save)
        return text.replace("old", "new")

    monkeypatch.setattr(click, "edit", fake_edit)
    result = open_in_editor(Settings(editor="nano -w"), "Header", "old text")

    assert result == "new text"
    assert calls["editor"] == "nano -w"
    assert calls["require_save"] is False
    assert calls["text"].startswith("; Header\n")


def test_open_in_editor_without_result(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(click, "edit", lambda *args, **kwargs: None)
    assert open_in_editor(Settings(), "Header") == ""


def _client_with(issues) -> RedmineClient:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"issues": issues, "total_count": len(issues)}, request=request)

    return RedmineClient(SERVER, project=PROJECT, transport=httpx.MockTransport(handler))


def test_select_parent_issue(monkeypatch: pytest.MonkeyPatch):
    issues = [make_issue(1, "Epic"), make_issue(2, "Child", parent=1), make_issue(3, "Other epic")]
    monkeypatch.setattr("sys.stdin", io.StringIO("2\n3\n"))
    console = Console(file=io.StringIO(), width=120)

    with _client_with(issues) as client:
        # 2 has a parent, so it is not a valid choice and the prompt repeats
        assert select_parent_issue(client, console) == 3

    output = console.file.getvalue()
    assert "#1 Epic" in output
    assert "#3 Other epic" in output
    assert "#2 Child" not in output


def test_select_parent_issue_without_candidates():
    with _client_with([make_issue(2, "Child", parent=1)]) as client:
        with pytest.raises(RedmineCliError):
            select_parent_issue(client, Console(file=io.StringIO()))
