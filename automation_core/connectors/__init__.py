"""
Service Connectors Module.

REST integrations used by test runs:
- Jira: task validation, field updates, transitions, comments, evidence.
- Zephyr Scale: test execution records and test cycle checks.
- Tag parsing for the scenario-to-issue links.
"""

from automation_core.connectors.jira_connector import (
    JiraConnector,
    TaskDetails,
    TaskDetailsUpdater,
)
from automation_core.connectors.results import ConnectorResult, ConnectorStatus
from automation_core.connectors.settings import EvidenceSettings, JiraSettings, ZephyrSettings
from automation_core.connectors.zephyr_connector import ZephyrConnector

__all__ = [
    "ConnectorResult",
    "ConnectorStatus",
    "EvidenceSettings",
    "JiraConnector",
    "JiraSettings",
    "TaskDetails",
    "TaskDetailsUpdater",
    "ZephyrConnector",
    "ZephyrSettings",
]
