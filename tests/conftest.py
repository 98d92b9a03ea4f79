"""Pytest configuration and fixtures for redmine-cli tests."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any, Generator

import pytest

from redmine_cli.config import Settings

SERVER = "https://redmine.example.com"
PROJECT = "acme"


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep tests away from the real home directory and REDMINE_* variables."""
    for name in list(os.environ):
        if name.startswith("REDMINE_"):
            monkeypatch.delenv(name)
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
    workdir = tmp_path / "work"
    workdir.mkdir()
    monkeypatch.chdir(workdir)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings pointing at the fake server."""
    return Settings(
        api_key="secret",
        server=SERVER,
        project=PROJECT,
        me="Alice Smith",
        logging={"level": "DEBUG"},
    )


@pytest.fixture
def sample_config_yaml(temp_dir: Path) -> Path:
    """Create a sample config file for testing."""
    config_content = """
apiKey: "${TEST_API_KEY}"
server: "https://redmine.example.com/"
project: acme
me: Alice Smith
requireParent: true

logging:
  level: "DEBUG"
  format: "console"
"""
    config_path = temp_dir / "config.yaml"
    config_path.write_text(config_content)
    return config_path


def make_issue(
    issue_id: int,
    subject: str,
    status: tuple[int, str] = (1, "New"),
    priority: tuple[int, str] = (4, "Normal"),
    assigned_to: tuple[int, str] | None = None,
    fixed_version: tuple[int, str] | None = None,
    parent: int | None = None,
    **extra: Any,
) -> dict[str, Any]:
    """Build an issue document as returned by the Redmine API."""
    issue: dict[str, Any] = {
        "id": issue_id,
        "project": {"id": 1, "name": "Acme"},
        "tracker": {"id": 2, "name": "Task"},
        "status": {"id": status[0], "name": status[1]},
        "priority": {"id": priority[0], "name": priority[1]},
        "author": {"id": 5, "name": "Alice Smith"},
        "subject": subject,
        "description": f"Description of {subject}",
        "done_ratio": 0,
        "custom_fields": [],
        **extra,
    }
    if assigned_to is not None:
        issue["assigned_to"] = {"id": assigned_to[0], "name": assigned_to[1]}
    if fixed_version is not None:
        issue["fixed_version"] = {"id": fixed_version[0], "name": fixed_version[1]}
    if parent is not None:
        issue["parent"] = {"id": parent}
    return issue


@pytest.fixture
def sample_issues() -> list[dict[str, Any]]:
    """A small project: two epics and their tasks."""
    return [
        make_issue(10, "Epic one", status=(1, "New")),
        make_issue(20, "Epic two", status=(1, "New")),
        make_issue(
            11,
            "Write parser",
            status=(2, "In Progress"),
            priority=(5, "High"),
            assigned_to=(5, "Alice Smith"),
            fixed_version=(7, "1.0"),
            parent=10,
        ),
        make_issue(
            12,
            "Write evaluator",
            status=(3, "Resolved"),
            priority=(3, "Low"),
            assigned_to=(6, "Bob Jones"),
            fixed_version=(7, "1.0"),
            parent=10,
        ),
        make_issue(
            21,
            "Ship it",
            status=(1, "New"),
            priority=(6, "Urgent"),
            fixed_version=(8, "2.0"),
            parent=20,
        ),
    ]


@pytest.fixture
def trackers() -> dict[str, Any]:
    return {"trackers": [{"id": 1, "name": "Bug"}, {"id": 2, "name": "Task"}]}


@pytest.fixture
def statuses() -> dict[str, Any]:
    return {
        "issue_statuses": [
            {"id": 1, "name": "New"},
            {"id": 2, "name": "In Progress"},
            {"id": 3, "name": "Resolved"},
        ]
    }


@pytest.fixture
def versions() -> dict[str, Any]:
    return {"versions": [{"id": 7, "name": "1.0"}, {"id": 8, "name": "2.0"}]}


@pytest.fixture
def memberships() -> dict[str, Any]:
    return {
        "memberships": [
            {"id": 1, "user": {"id": 5, "name": "Alice Smith"}},
            {"id": 2, "user": {"id": 6, "name": "Bob Jones"}},
            {"id": 3, "group": {"id": 9, "name": "Developers"}},
        ]
    }
