"""
Scenario Reporter Module.

Links a finished scenario to Zephyr and Jira through its tags:
- ``@Key_`` / ``@Zephyr_`` tags produce a Zephyr test execution.
- Each ``@Jira_`` tag gets the latest evidence file attached.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from loguru import logger

from automation_core.connectors.jira_connector import JiraConnector
from automation_core.connectors.results import ConnectorResult
from automation_core.connectors.tags import get_jira_task_tags
from automation_core.connectors.zephyr_connector import ZephyrConnector


@dataclass
class ScenarioReport:
    """
    What happened when one scenario was reported.

    Attributes:
        scenario: Scenario name or pytest node id.
        tags: Tags the scenario carried.
        passed: Scenario outcome.
        duration_ms: Execution time in milliseconds.
        execution: Zephyr execution result, if Zephyr was asked.
        evidence: Jira evidence results, one per ``@Jira_`` tag.
    """

    scenario: str
    tags: List[str]
    passed: bool
    duration_ms: int
    execution: Optional[ConnectorResult] = None
    evidence: List[ConnectorResult] = field(default_factory=list)

    @property
    def results(self) -> List[ConnectorResult]:
        return ([self.execution] if self.execution is not None else []) + list(self.evidence)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for logging or report attachments."""
        return {
            "scenario": self.scenario,
            "tags": self.tags,
            "passed": self.passed,
            "duration_ms": self.duration_ms,
            "execution": self.execution.to_dict() if self.execution is not None else None,
            "evidence": [r.to_dict() for r in self.evidence],
        }


class ScenarioReporter:
    """
    Reports scenario outcomes to Zephyr and Jira.

    Either connector may be omitted; an inactive connector simply yields
    DISABLED results.
    """

    def __init__(
        self,
        jira: Optional[JiraConnector] = None,
        zephyr: Optional[ZephyrConnector] = None,
    ) -> None:
        self.jira = jira
        self.zephyr = zephyr
        self._reports: List[ScenarioReport] = []

    def report(
        self,
        tags: Iterable[str],
        passed: bool,
        duration_ms: int,
        scenario: str = "",
    ) -> ScenarioReport:
        """
        Report one finished scenario.

        Args:
            tags: Scenario tags.
            passed: Whether the scenario passed.
            duration_ms: Execution time in milliseconds.
            scenario: Name used in logs.
        """
        tags = list(tags)
        report = ScenarioReport(
            scenario=scenario,
            tags=tags,
            passed=passed,
            duration_ms=int(duration_ms),
        )

        if self.zephyr is not None:
            report.execution = self.zephyr.create_execution_test(tags, passed, int(duration_ms))

        if self.jira is not None and get_jira_task_tags(tags):
            report.evidence = self.jira.add_evidence(tags)

        self._reports.append(report)
        logger.info(
            f"Scenario reported: {scenario or tags} "
            f"({'PASS' if passed else 'FAIL'}, {int(duration_ms)}ms)"
        )
        return report

    @property
    def reports(self) -> List[ScenarioReport]:
        return list(self._reports)

    def get_summary(self) -> Dict[str, Any]:
        """Counts of reported scenarios and of failed service calls."""
        failed_calls = sum(
            1 for report in self._reports for result in report.results if result.is_failure
        )
        return {
            "scenarios": len(self._reports),
            "passed": sum(1 for r in self._reports if r.passed),
            "failed": sum(1 for r in self._reports if not r.passed),
            "failed_calls": failed_calls,
        }

    def close(self) -> None:
        """Close the connector sessions."""
        for connector in (self.jira, self.zephyr):
            if connector is not None:
                connector.close()
