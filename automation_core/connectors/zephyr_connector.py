"""
Zephyr Scale Connector.

Records scenario executions in Zephyr Scale (bearer-token auth). The test
case and test cycle are taken from the scenario tags (``@Key_`` and
``@Zephyr_``).
"""

from __future__ import annotations

from typing import Iterable, Optional

import requests
from loguru import logger

from automation_core.config.loader import ConfigResolver
from automation_core.connectors.base import RestConnector
from automation_core.connectors.results import ConnectorResult
from automation_core.connectors.settings import ZephyrSettings
from automation_core.connectors.tags import get_test_case_key, get_test_cycle_key

STATUS_PASS = "Pass"
STATUS_FAIL = "Fail"


class ZephyrConnector(RestConnector):
    """Client for the Zephyr Scale Cloud REST API (v2)."""

    service_name = "Zephyr"

    ENDPOINTS = {
        "test_executions": "/v2/testexecutions",
        "test_cycle": "/v2/testcycles/{cycle_key}",
    }

    def __init__(
        self,
        settings: ZephyrSettings,
        session: Optional[requests.Session] = None,
    ) -> None:
        super().__init__(session=session)
        self.settings = settings
        logger.info(
            f"ZephyrConnector initialized: active={settings.is_active}, "
            f"project={settings.project_id}"
        )

    @classmethod
    def from_properties(cls, resolver: ConfigResolver) -> "ZephyrConnector":
        """Build a connector from configuration."""
        return cls(ZephyrSettings.from_properties(resolver))

    @property
    def is_active(self) -> bool:
        return self.settings.is_active

    @property
    def base_url(self) -> str:
        return self.settings.base_url

    @property
    def timeout_sec(self) -> float:
        return self.settings.timeout_sec

    def _configure_session(self, session: requests.Session) -> None:
        session.headers.update({
            "Authorization": f"Bearer {self.settings.zephyr_key}",
            "Content-Type": "application/json",
        })

    def _post_execution(
        self,
        operation: str,
        tags: Iterable[str],
        status_name: str,
        execution_time: int,
    ) -> ConnectorResult:
        tags = list(tags)
        test_case_key = get_test_case_key(tags)
        test_cycle_key = get_test_cycle_key(tags)

        if test_case_key is None or test_cycle_key is None:
            logger.warning(
                f"Zephyr {operation} skipped: scenario needs both @Key_ and @Zephyr_ tags "
                f"(got {tags})"
            )
            return ConnectorResult.skipped(operation, "missing test case or test cycle tag")

        payload = {
            "projectKey": self.settings.project_id,
            "testCaseKey": test_case_key,
            "testCycleKey": test_cycle_key,
            "statusName": status_name,
            "executionTime": execution_time,
        }
        result = self._send(
            operation, "POST", self.ENDPOINTS["test_executions"], 201, json=payload
        )
        if result:
            result.data = payload
        return result

    def create_execution_test(
        self,
        tags: Iterable[str],
        passed: bool,
        duration_ms: int,
    ) -> ConnectorResult:
        """
        Record one scenario execution.

        Args:
            tags: Scenario tags carrying ``@Key_`` and ``@Zephyr_``.
            passed: Scenario outcome.
            duration_ms: Execution time in milliseconds.
        """
        if not self.is_active:
            return ConnectorResult.disabled("create_execution_test")

        status_name = STATUS_PASS if passed else STATUS_FAIL
        result = self._post_execution(
            "create_execution_test", tags, status_name, int(duration_ms)
        )
        if result:
            logger.info(
                f"Test execution created: {result.data['testCaseKey']} -> {status_name}"
            )
        return result

    def update_cycle_status(self, tags: Iterable[str], new_status: str) -> ConnectorResult:
        """Record an execution with ``new_status`` and no execution time."""
        if not self.is_active:
            return ConnectorResult.disabled("update_cycle_status")

        result = self._post_execution("update_cycle_status", tags, new_status, 0)
        if result:
            logger.info(
                f"Test cycle {result.data['testCycleKey']} updated to '{new_status}'"
            )
        return result

    def test_cycle_exists(self, cycle_key: str) -> ConnectorResult:
        """Check whether a test cycle exists."""
        if not self.is_active:
            return ConnectorResult.disabled("test_cycle_exists")

        endpoint = self.ENDPOINTS["test_cycle"].format(cycle_key=cycle_key)
        return self._send("test_cycle_exists", "GET", endpoint, 200)

    def test_cycles_exist(self, cycle_keys: Iterable[str]) -> bool:
        """True only if every cycle exists. Stops at the first missing one."""
        for cycle_key in cycle_keys:
            if not self.test_cycle_exists(cycle_key):
                logger.warning(f"Test cycle {cycle_key} not found")
                return False
        return True
