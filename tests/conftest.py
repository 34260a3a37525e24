"""
Root conftest.py: shared Pytest fixtures.

Provides fixtures for:
- Configuration files (framework defaults and project overrides) on disk.
- Connector settings and connectors wired to a mocked HTTP session.
- Fake HTTP responses.
- Capturing loguru output.

No test talks to a real Jira or Zephyr instance.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Generator, List, Optional
from unittest.mock import MagicMock

import pytest
import yaml
from loguru import logger

from automation_core.connectors.jira_connector import JiraConnector
from automation_core.connectors.settings import EvidenceSettings, JiraSettings, ZephyrSettings
from automation_core.connectors.zephyr_connector import ZephyrConnector


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


@pytest.fixture
def log_messages() -> Generator[List[str], None, None]:
    """Capture loguru records as ``"LEVEL:message"`` strings."""
    messages: List[str] = []
    handler_id = logger.add(
        lambda m: messages.append(f"{m.record['level'].name}:{m.record['message']}"),
        level="DEBUG",
    )
    yield messages
    logger.remove(handler_id)


# ---------------------------------------------------------------------------
# Configuration Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def working_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run every test from an empty directory, so no stray config/ is picked up."""
    directory = tmp_path / "workdir"
    directory.mkdir()
    monkeypatch.chdir(directory)
    return directory


@pytest.fixture
def framework_defaults() -> dict:
    """Framework-default values, as shipped with a framework build."""
    return {
        "jira.connector.isActive": False,
        "jira.connector.baseUrl": "",
        "jira.connector.username": "",
        "jira.connector.jiraKey": "",
        "zephyr.connector.isActive": False,
        "zephyr.connector.zephyrKey": "",
        "zephyr.connector.projectId": "",
        "evidence.path.windows": "C:/Reports",
        "evidence.path.unix": "/tmp/reports",
        "evidence.path.jenkins": "reports",
        "framework.only": "from-defaults",
    }


@pytest.fixture
def resource_dir(tmp_path: Path, framework_defaults: dict) -> Path:
    """Directory holding a framework-default ``configuration_core.yaml``."""
    directory = tmp_path / "resources"
    directory.mkdir()
    (directory / "configuration_core.yaml").write_text(
        yaml.dump(framework_defaults), encoding="utf-8"
    )
    return directory


@pytest.fixture
def write_project_file(tmp_path: Path) -> Callable[[dict], Path]:
    """Write a project override file and return its path."""

    def _write(values: dict, name: str = "configuration.yaml") -> Path:
        project_dir = tmp_path / "config"
        project_dir.mkdir(exist_ok=True)
        path = project_dir / name
        path.write_text(yaml.dump(values), encoding="utf-8")
        return path

    return _write


# ---------------------------------------------------------------------------
# HTTP Fixtures
# ---------------------------------------------------------------------------


def make_response(status_code: int, json_data: Optional[Any] = None) -> MagicMock:
    """Build a fake ``requests.Response`` usable as a context manager."""
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = json_data if json_data is not None else {}
    response.__enter__.return_value = response
    response.__exit__.return_value = False
    return response


@pytest.fixture
def http_response() -> Callable[..., MagicMock]:
    """Factory for fake responses: ``http_response(201, {"key": "QA-1"})``."""
    return make_response


@pytest.fixture
def mock_session() -> MagicMock:
    """A session whose requests answer HTTP 200 unless told otherwise."""
    session = MagicMock()
    session.request.return_value = make_response(200)
    return session


# ---------------------------------------------------------------------------
# Connector Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def evidence_root(tmp_path: Path) -> Path:
    """Evidence base directory (reports land in ``<root>/PDF``)."""
    root = tmp_path / "reports"
    (root / "PDF").mkdir(parents=True)
    return root


@pytest.fixture
def jira_settings(evidence_root: Path, tmp_path: Path) -> JiraSettings:
    """Active Jira settings pointing at a fake instance."""
    return JiraSettings(
        is_active=True,
        base_url="https://jira.example.com",
        username="qa.bot",
        jira_key="secret-token",
        timeout_sec=30.0,
        evidence=EvidenceSettings(
            windows_path=str(evidence_root),
            unix_path=str(evidence_root),
            jenkins_path=str(tmp_path / "jenkins"),
        ),
    )


@pytest.fixture
def jira(jira_settings: JiraSettings, mock_session: MagicMock, monkeypatch: pytest.MonkeyPatch) -> JiraConnector:
    """Active Jira connector on the mocked session, outside of CI."""
    monkeypatch.delenv("JENKINS_HOME", raising=False)
    return JiraConnector(jira_settings, session=mock_session)


@pytest.fixture
def zephyr_settings() -> ZephyrSettings:
    """Active Zephyr settings."""
    return ZephyrSettings(
        is_active=True,
        base_url="https://api.zephyrscale.smartbear.com",
        zephyr_key="zephyr-token",
        project_id="QA",
    )


@pytest.fixture
def zephyr(zephyr_settings: ZephyrSettings, mock_session: MagicMock) -> ZephyrConnector:
    """Active Zephyr connector on the mocked session."""
    return ZephyrConnector(zephyr_settings, session=mock_session)
