"""
Reporting Module.

Pushes scenario outcomes to the external services:
- Zephyr Scale test executions.
- Jira evidence attachments for linked tasks.
"""

from automation_core.reporting.scenario_reporter import ScenarioReport, ScenarioReporter

__all__ = ["ScenarioReport", "ScenarioReporter"]
