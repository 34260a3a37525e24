"""
Pytest plugin: report test outcomes to Zephyr Scale and Jira.

Opt in from a conftest.py::

    pytest_plugins = ["automation_core.pytest_plugin"]

and tag tests with their links::

    @pytest.mark.tags("@Key_QA-T12", "@Zephyr_QA-R3", "@Jira_QA-45")
    def test_login():
        ...

Connectors are built once per session from ``config/configuration.yaml``
(over the framework defaults). Inactive connectors make no calls.
"""

from __future__ import annotations

from typing import Generator, List, Optional

import pytest
from loguru import logger

from automation_core.config.loader import ConfigResolver
from automation_core.connectors.jira_connector import JiraConnector
from automation_core.connectors.zephyr_connector import ZephyrConnector
from automation_core.reporting.scenario_reporter import ScenarioReporter

_reporter_key = pytest.StashKey[ScenarioReporter]()


def pytest_addoption(parser: pytest.Parser) -> None:
    """Add CLI options for connector reporting."""
    group = parser.getgroup("automation-connectors")
    group.addoption(
        "--connectors-config",
        default=None,
        help="Project configuration file. Default: config/configuration.yaml",
    )
    group.addoption(
        "--no-connectors",
        action="store_true",
        default=False,
        help="Do not report test outcomes to Jira/Zephyr.",
    )


def pytest_configure(config: pytest.Config) -> None:
    """Register the tags marker and build the reporter."""
    config.addinivalue_line(
        "markers",
        "tags(*tags): scenario tags linking the test to Zephyr/Jira "
        "(@Key_<case>, @Zephyr_<cycle>, @Jira_<issue>)",
    )

    if config.getoption("--no-connectors"):
        logger.info("Connector reporting disabled from the command line")
        return

    resolver = ConfigResolver(project_file=config.getoption("--connectors-config"))
    config.stash[_reporter_key] = ScenarioReporter(
        jira=JiraConnector.from_properties(resolver),
        zephyr=ZephyrConnector.from_properties(resolver),
    )


def scenario_tags(item: pytest.Item) -> List[str]:
    """Collect the arguments of every ``tags`` marker on ``item``, in order."""
    tags: List[str] = []
    for marker in item.iter_markers(name="tags"):
        tags.extend(str(tag) for tag in marker.args)
    return tags


def _get_reporter(config: pytest.Config) -> Optional[ScenarioReporter]:
    return config.stash.get(_reporter_key, None)


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(
    item: pytest.Item, call: pytest.CallInfo
) -> Generator[None, None, None]:
    """Report the pass/fail outcome of every tagged test that ran."""
    outcome = yield
    report = outcome.get_result()

    # skipped and xfailed tests never produced a verdict
    if report.when != "call" or report.skipped:
        return

    reporter = _get_reporter(item.config)
    tags = scenario_tags(item)
    if reporter is None or not tags:
        return

    reporter.report(
        tags,
        passed=report.passed,
        duration_ms=int(report.duration * 1000),
        scenario=item.nodeid,
    )


def pytest_unconfigure(config: pytest.Config) -> None:
    """Log the reporting summary and close the connector sessions."""
    reporter = _get_reporter(config)
    if reporter is None:
        return

    logger.info(f"Connector reporting summary: {reporter.get_summary()}")
    reporter.close()
