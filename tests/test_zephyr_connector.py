"""
Unit Tests for the Zephyr Scale Connector.

Covers:
- Tag parsing (@Key_, @Zephyr_, @Jira_).
- Test execution creation and cycle status updates.
- Test cycle existence checks.
- Session headers.

The HTTP session is mocked; no real Zephyr instance is contacted.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests

from automation_core.connectors.results import ConnectorStatus
from automation_core.connectors.settings import ZephyrSettings
from automation_core.connectors.tags import (
    find_tag_value,
    get_jira_task_tags,
    get_test_case_key,
    get_test_cycle_key,
    strip_tag_prefix,
)
from automation_core.connectors.zephyr_connector import ZephyrConnector

SCENARIO_TAGS = ["@smoke", "@Key_QA-T12", "@Zephyr_QA-R3", "@Jira_QA-45"]
EXECUTIONS_URL = "https://api.zephyrscale.smartbear.com/v2/testexecutions"


# ---------------------------------------------------------------------------
# Tag Parsing Tests
# ---------------------------------------------------------------------------


class TestTags:
    """Tests for scenario tag parsing."""

    def test_test_case_key(self) -> None:
        assert get_test_case_key(SCENARIO_TAGS) == "QA-T12"

    def test_test_cycle_key(self) -> None:
        assert get_test_cycle_key(SCENARIO_TAGS) == "QA-R3"

    def test_first_match_wins(self) -> None:
        assert get_test_case_key(["@Key_A-1", "@Key_B-2"]) == "A-1"

    def test_missing_tag(self) -> None:
        assert get_test_case_key(["@smoke"]) is None
        assert get_test_cycle_key([]) is None

    def test_value_is_stripped(self) -> None:
        assert find_tag_value(["@Zephyr_ QA-R3 "], "@Zephyr_") == "QA-R3"

    def test_prefix_is_case_sensitive(self) -> None:
        assert get_test_case_key(["@key_QA-T12"]) is None

    def test_jira_task_tags_keep_prefix(self) -> None:
        assert get_jira_task_tags(SCENARIO_TAGS + ["@Jira_QA-46"]) == ["@Jira_QA-45", "@Jira_QA-46"]

    @pytest.mark.parametrize(
        "key, expected",
        [
            ("@Jira_QA-45", "QA-45"),
            ("QA-45", "QA-45"),
            ("@Jira_MY_PROJ-1", "MY_PROJ-1"),
        ],
    )
    def test_strip_tag_prefix(self, key: str, expected: str) -> None:
        assert strip_tag_prefix(key) == expected


# ---------------------------------------------------------------------------
# Test Execution Tests
# ---------------------------------------------------------------------------


class TestCreateExecution:
    """Tests for recording scenario executions."""

    def test_passed_execution(
        self, zephyr: ZephyrConnector, mock_session: MagicMock, http_response
    ) -> None:
        mock_session.request.return_value = http_response(201)
        result = zephyr.create_execution_test(SCENARIO_TAGS, True, 1530)

        assert result
        kwargs = mock_session.request.call_args.kwargs
        assert kwargs["method"] == "POST"
        assert kwargs["url"] == EXECUTIONS_URL
        assert kwargs["json"] == {
            "projectKey": "QA",
            "testCaseKey": "QA-T12",
            "testCycleKey": "QA-R3",
            "statusName": "Pass",
            "executionTime": 1530,
        }
        assert result.data == kwargs["json"]

    def test_failed_execution(
        self, zephyr: ZephyrConnector, mock_session: MagicMock, http_response
    ) -> None:
        mock_session.request.return_value = http_response(201)
        zephyr.create_execution_test(SCENARIO_TAGS, False, 20)

        assert mock_session.request.call_args.kwargs["json"]["statusName"] == "Fail"

    def test_unexpected_status(self, zephyr: ZephyrConnector, mock_session: MagicMock) -> None:
        result = zephyr.create_execution_test(SCENARIO_TAGS, True, 10)

        assert result.status == ConnectorStatus.FAILURE
        assert result.status_code == 200

    def test_transport_error(
        self, zephyr: ZephyrConnector, mock_session: MagicMock, log_messages
    ) -> None:
        mock_session.request.side_effect = requests.exceptions.ConnectionError("unreachable")
        result = zephyr.create_execution_test(SCENARIO_TAGS, True, 10)

        assert result.status == ConnectorStatus.ERROR
        assert any(m.startswith("ERROR:Zephyr create_execution_test") for m in log_messages)

    @pytest.mark.parametrize(
        "tags",
        [
            ["@Zephyr_QA-R3"],
            ["@Key_QA-T12"],
            ["@smoke"],
        ],
    )
    def test_missing_tags_skip_call(
        self, zephyr: ZephyrConnector, mock_session: MagicMock, tags: list
    ) -> None:
        result = zephyr.create_execution_test(tags, True, 10)

        assert result.status == ConnectorStatus.SKIPPED
        mock_session.request.assert_not_called()

    def test_inactive(self, mock_session: MagicMock) -> None:
        zephyr = ZephyrConnector(ZephyrSettings(is_active=False), session=mock_session)

        assert zephyr.create_execution_test(SCENARIO_TAGS, True, 10).status == ConnectorStatus.DISABLED
        assert zephyr.update_cycle_status(SCENARIO_TAGS, "Done").status == ConnectorStatus.DISABLED
        assert zephyr.test_cycle_exists("QA-R3").status == ConnectorStatus.DISABLED
        mock_session.request.assert_not_called()


class TestUpdateCycleStatus:
    """Tests for cycle status updates."""

    def test_posts_status_with_zero_time(
        self, zephyr: ZephyrConnector, mock_session: MagicMock, http_response
    ) -> None:
        mock_session.request.return_value = http_response(201)
        result = zephyr.update_cycle_status(SCENARIO_TAGS, "In Progress")

        assert result
        payload = mock_session.request.call_args.kwargs["json"]
        assert payload["statusName"] == "In Progress"
        assert payload["executionTime"] == 0
        assert payload["testCycleKey"] == "QA-R3"

    def test_missing_tags(self, zephyr: ZephyrConnector, mock_session: MagicMock) -> None:
        result = zephyr.update_cycle_status(["@Key_QA-T12"], "Done")

        assert result.status == ConnectorStatus.SKIPPED
        mock_session.request.assert_not_called()


# ---------------------------------------------------------------------------
# Test Cycle Tests
# ---------------------------------------------------------------------------


class TestCycleExistence:
    """Tests for cycle lookups."""

    def test_cycle_exists(self, zephyr: ZephyrConnector, mock_session: MagicMock) -> None:
        assert zephyr.test_cycle_exists("QA-R3")

        kwargs = mock_session.request.call_args.kwargs
        assert kwargs["method"] == "GET"
        assert kwargs["url"] == "https://api.zephyrscale.smartbear.com/v2/testcycles/QA-R3"

    def test_cycle_missing(
        self, zephyr: ZephyrConnector, mock_session: MagicMock, http_response
    ) -> None:
        mock_session.request.return_value = http_response(404)
        result = zephyr.test_cycle_exists("QA-R9")

        assert not result
        assert result.status_code == 404

    def test_cycle_lookup_error(self, zephyr: ZephyrConnector, mock_session: MagicMock) -> None:
        mock_session.request.side_effect = requests.exceptions.Timeout("slow")
        assert zephyr.test_cycle_exists("QA-R3").status == ConnectorStatus.ERROR

    def test_all_cycles_exist(self, zephyr: ZephyrConnector, mock_session: MagicMock) -> None:
        assert zephyr.test_cycles_exist(["QA-R1", "QA-R2", "QA-R3"])
        assert mock_session.request.call_count == 3

    def test_stops_at_first_missing_cycle(
        self, zephyr: ZephyrConnector, mock_session: MagicMock, http_response, log_messages
    ) -> None:
        mock_session.request.side_effect = [
            http_response(200),
            http_response(404),
            http_response(200),
        ]

        assert zephyr.test_cycles_exist(["QA-R1", "QA-R2", "QA-R3"]) is False
        assert mock_session.request.call_count == 2
        assert "WARNING:Test cycle QA-R2 not found" in log_messages

    def test_no_cycles(self, zephyr: ZephyrConnector, mock_session: MagicMock) -> None:
        assert zephyr.test_cycles_exist([]) is True
        mock_session.request.assert_not_called()


# ---------------------------------------------------------------------------
# Session Tests
# ---------------------------------------------------------------------------


class TestZephyrSession:
    """Tests for the real session configuration."""

    def test_bearer_headers(self, zephyr_settings: ZephyrSettings) -> None:
        with ZephyrConnector(zephyr_settings) as zephyr:
            session = zephyr._get_session()
            assert session.headers["Authorization"] == "Bearer zephyr-token"
            assert session.headers["Content-Type"] == "application/json"
        assert zephyr._session is None

    def test_timeout_passed_to_request(
        self, zephyr_settings: ZephyrSettings, mock_session: MagicMock
    ) -> None:
        settings = ZephyrSettings(
            is_active=True,
            base_url=zephyr_settings.base_url,
            zephyr_key="k",
            project_id="QA",
            timeout_sec=4.5,
        )
        ZephyrConnector(settings, session=mock_session).test_cycle_exists("QA-R3")

        assert mock_session.request.call_args.kwargs["timeout"] == 4.5
