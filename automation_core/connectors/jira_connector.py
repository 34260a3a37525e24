"""
Jira Connector.

Thin client over the Jira REST API used by test runs to keep their linked
issues up to date:
- Validating projects and tasks.
- Updating task fields, transitioning status and commenting.
- Attaching the latest evidence report.
- Creating new tasks.

Several updates can be batched on one issue with TaskDetailsUpdater::

    jira = JiraConnector.from_properties(ConfigResolver())
    (
        jira.task("QA-45")
        .update_summary("Login works with SSO")
        .update_labels(["regression", "sso"])
        .update_status("31")
        .add_comment("Validated on build 1.4.2")
        .add_evidence()
        .apply()
    )

Every operation is a no-op returning a DISABLED result when the connector
is not active. Failures are logged and returned, never raised.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

import requests
from loguru import logger

from automation_core.config.loader import ConfigResolver
from automation_core.connectors.base import RestConnector
from automation_core.connectors.evidence import latest_file, resolve_evidence_dir
from automation_core.connectors.results import ConnectorResult, ConnectorStatus
from automation_core.connectors.settings import JiraSettings
from automation_core.connectors.tags import get_jira_task_tags, strip_tag_prefix

DEFAULT_ISSUE_TYPE = "Tarefa"


@dataclass
class TaskDetails:
    """
    Field updates for a Jira task.

    Only fields that are not None end up in the request. ``status_id`` is
    carried along for the transition and is never sent as a field.
    """

    summary: Optional[str] = None
    description: Optional[str] = None
    labels: Optional[List[str]] = None
    status_id: Optional[str] = None
    project_key: Optional[str] = None

    def to_update_map(self) -> Dict[str, List[Dict[str, Any]]]:
        """Build the ``update`` section: ``{field: [{"set": value}]}``."""
        fields: Dict[str, Any] = {
            "summary": self.summary,
            "description": self.description,
            "labels": list(self.labels) if self.labels is not None else None,
            "key": self.project_key,
        }
        return {name: [{"set": value}] for name, value in fields.items() if value is not None}

    def has_updates(self) -> bool:
        return bool(self.to_update_map())


class JiraConnector(RestConnector):
    """
    Client for the Jira REST API (basic auth with username and API key).

    Attributes:
        settings: Immutable connector settings.
    """

    service_name = "Jira"

    ENDPOINTS = {
        "projects": "/rest/api/2/project",
        "search_latest": "/rest/api/latest/search",
        "search": "/rest/api/2/search",
        "issue": "/rest/api/2/issue",
        "issue_detail": "/rest/api/2/issue/{task_key}",
        "transitions": "/rest/api/2/issue/{task_key}/transitions",
        "comment": "/rest/api/2/issue/{task_key}/comment",
        "attachments": "/rest/api/3/issue/{task_key}/attachments",
    }

    def __init__(
        self,
        settings: JiraSettings,
        session: Optional[requests.Session] = None,
    ) -> None:
        super().__init__(session=session)
        self.settings = settings
        logger.info(
            f"JiraConnector initialized: active={settings.is_active}, url={settings.base_url}"
        )

    @classmethod
    def from_properties(cls, resolver: ConfigResolver) -> "JiraConnector":
        """Build a connector from configuration."""
        return cls(JiraSettings.from_properties(resolver))

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
        # bytes, so requests does not fall back to latin-1 for the Basic header
        session.auth = (
            self.settings.username.encode("utf-8"),
            self.settings.jira_key.encode("utf-8"),
        )
        session.headers["Accept"] = "application/json"

    # ------------------------------------------------------------------
    # Projects and tasks
    # ------------------------------------------------------------------

    def validate_project(self, project_key: str) -> ConnectorResult:
        """Check that the project listing is reachable with these credentials."""
        if not self.is_active:
            return ConnectorResult.disabled("validate_project")

        result = self._send("validate_project", "GET", self.ENDPOINTS["projects"], 200)
        if result:
            logger.info(f"Jira project validated: {project_key}")
        return result

    def search_tasks(self, project_key: str) -> ConnectorResult:
        """Run a JQL search over the project's tasks. Only the outcome is logged."""
        if not self.is_active:
            return ConnectorResult.disabled("search_tasks")

        result = self._send(
            "search_tasks",
            "GET",
            self.ENDPOINTS["search_latest"],
            200,
            params={"jql": f"project={project_key}"},
        )
        if result:
            logger.info(f"Task search for project {project_key} succeeded")
        return result

    def validate_task(self, task_key: str) -> ConnectorResult:
        """
        Check that the search endpoint answers.

        The query is not filtered by ``task_key``; any reachable search
        validates the task.
        """
        if not self.is_active:
            return ConnectorResult.disabled("validate_task")

        result = self._send("validate_task", "GET", self.ENDPOINTS["search"], 200)
        if result:
            logger.info(f"Task {task_key} validated")
        return result

    def update_task_details(self, task_key: str, details: TaskDetails) -> ConnectorResult:
        """PUT the non-empty fields of ``details`` onto the task."""
        if not self.is_active:
            return ConnectorResult.disabled("update_task_details")

        endpoint = self.ENDPOINTS["issue_detail"].format(task_key=task_key)
        result = self._send(
            "update_task_details",
            "PUT",
            endpoint,
            204,
            json={"update": details.to_update_map()},
        )
        if result:
            logger.info(f"Task {task_key} details updated")
        return result

    def transition_issue(self, task_key: str, status_id: str) -> ConnectorResult:
        """Move the task through the transition ``status_id``."""
        if not self.is_active:
            return ConnectorResult.disabled("transition_issue")

        endpoint = self.ENDPOINTS["transitions"].format(task_key=task_key)
        result = self._send(
            "transition_issue",
            "POST",
            endpoint,
            204,
            json={"transition": {"id": status_id}},
        )
        if result:
            logger.info(f"Task {task_key} transitioned ({status_id})")
        return result

    def add_comment(self, task_key: str, comment: str) -> ConnectorResult:
        """Add a comment to the task."""
        if not self.is_active:
            return ConnectorResult.disabled("add_comment")

        endpoint = self.ENDPOINTS["comment"].format(task_key=task_key)
        result = self._send("add_comment", "POST", endpoint, 201, json={"body": comment})
        if result:
            logger.info(f"Comment added to task {task_key}")
        return result

    def add_evidence_to_task(self, task_key: str) -> ConnectorResult:
        """
        Attach the newest evidence file to a task.

        Args:
            task_key: Task key, optionally still carrying its tag prefix
                      (``@Jira_QA-45`` attaches to ``QA-45``).

        Returns:
            SKIPPED when the evidence directory holds no file.
        """
        if not self.is_active:
            return ConnectorResult.disabled("add_evidence_to_task")

        issue_key = strip_tag_prefix(task_key)
        evidence_dir = resolve_evidence_dir(self.settings.evidence)

        try:
            evidence_file = latest_file(evidence_dir)
        except OSError as e:
            logger.error(f"Cannot read evidence directory {evidence_dir}: {e}")
            return ConnectorResult("add_evidence_to_task", ConnectorStatus.ERROR, message=str(e))

        if evidence_file is None:
            logger.error(f"No evidence file found in {evidence_dir}")
            return ConnectorResult.skipped(
                "add_evidence_to_task", f"no evidence file in {evidence_dir}"
            )

        endpoint = self.ENDPOINTS["attachments"].format(task_key=issue_key)
        try:
            with evidence_file.open("rb") as handle:
                result = self._send(
                    "add_evidence_to_task",
                    "POST",
                    endpoint,
                    200,
                    files={"file": (evidence_file.name, handle, "application/octet-stream")},
                    headers={"X-Atlassian-Token": "no-check"},
                )
        except OSError as e:
            logger.error(f"Cannot read evidence file {evidence_file}: {e}")
            return ConnectorResult("add_evidence_to_task", ConnectorStatus.ERROR, message=str(e))

        if result:
            logger.info(f"Evidence {evidence_file.name} attached to task {issue_key}")
            result.data = str(evidence_file)
        return result

    def create_new_task(
        self,
        project_key: str,
        summary: str,
        description: str,
    ) -> ConnectorResult:
        """
        Create a task in ``project_key``.

        Returns:
            On success, ``result.data`` holds the new issue key.
        """
        if not self.is_active:
            return ConnectorResult.disabled("create_new_task")

        payload = {
            "fields": {
                "project": {"key": project_key},
                "summary": summary,
                "description": description,
                "issuetype": {"name": DEFAULT_ISSUE_TYPE},
            }
        }
        result = self._send(
            "create_new_task",
            "POST",
            self.ENDPOINTS["issue"],
            201,
            parse_json=True,
            json=payload,
        )
        if result:
            body = result.data if isinstance(result.data, dict) else {}
            result.data = body.get("key")
            logger.info(f"New task created in project {project_key}: {result.data}")
        return result

    # ------------------------------------------------------------------
    # Single-step helpers
    # ------------------------------------------------------------------

    def update_summary(self, task_key: str, summary: str) -> ConnectorResult:
        return self.update_task_details(task_key, TaskDetails(summary=summary))

    def update_description(self, task_key: str, description: str) -> ConnectorResult:
        return self.update_task_details(task_key, TaskDetails(description=description))

    def update_labels(self, task_key: str, labels: List[str]) -> ConnectorResult:
        return self.update_task_details(task_key, TaskDetails(labels=labels))

    def update_status(self, task_key: str, status_id: str) -> ConnectorResult:
        return self.transition_issue(task_key, status_id)

    def add_new_comment(self, task_key: str, comment: str) -> ConnectorResult:
        return self.add_comment(task_key, comment)

    def add_evidence(self, tags: Iterable[str]) -> List[ConnectorResult]:
        """Attach evidence to every ``@Jira_`` task among ``tags``."""
        return [self.add_evidence_to_task(tag) for tag in get_jira_task_tags(tags)]

    def create_task(self, project_key: str, summary: str, description: str) -> ConnectorResult:
        return self.create_new_task(project_key, summary, description)

    # ------------------------------------------------------------------
    # Batched updates
    # ------------------------------------------------------------------

    def task(self, task_key: str) -> "TaskDetailsUpdater":
        """Start a batch of updates on ``task_key`` without validating it."""
        return TaskDetailsUpdater(self, task_key)

    def consult_task(self, project_key: str, task_key: str) -> Optional["TaskDetailsUpdater"]:
        """
        Validate the project and task, then start a batch on the task.

        Returns:
            A TaskDetailsUpdater, or None if validation failed.
        """
        if not self.validate_project(project_key):
            logger.error(f"Project {project_key} is not valid")
            return None

        self.search_tasks(project_key)

        if not self.validate_task(task_key):
            logger.error(f"Task {task_key} was not found")
            return None

        return TaskDetailsUpdater(self, task_key)


class TaskDetailsUpdater:
    """
    Fluent batch of updates on one Jira task.

    ``apply()`` runs, in order: comment, field update, status transition,
    evidence upload, new-task creation. A step runs only if something was
    set for it.
    """

    def __init__(self, connector: JiraConnector, task_key: str) -> None:
        self._connector = connector
        self.task_key = task_key
        self.details = TaskDetails()
        self.comment: Optional[str] = None
        self.attach_evidence = False
        self.new_task: Optional[TaskDetails] = None

    def update_summary(self, summary: str) -> "TaskDetailsUpdater":
        self.details.summary = summary
        return self

    def update_description(self, description: str) -> "TaskDetailsUpdater":
        self.details.description = description
        return self

    def update_labels(self, labels: List[str]) -> "TaskDetailsUpdater":
        self.details.labels = list(labels)
        return self

    def update_status(self, status_id: str) -> "TaskDetailsUpdater":
        self.details.status_id = status_id
        return self

    def add_comment(self, comment: str) -> "TaskDetailsUpdater":
        self.comment = comment
        return self

    def add_evidence(self, task_key: Optional[str] = None) -> "TaskDetailsUpdater":
        """Attach the latest evidence file, optionally retargeting the batch."""
        if task_key is not None:
            self.task_key = task_key
        self.attach_evidence = True
        return self

    def create_task(self, project_key: str, summary: str, description: str) -> "TaskDetailsUpdater":
        """Also create a new task in ``project_key`` when applied."""
        self.new_task = TaskDetails(
            summary=summary, description=description, project_key=project_key
        )
        return self

    def apply(self) -> List[ConnectorResult]:
        """
        Send the batch.

        Returns:
            One result per step that ran, in execution order.
        """
        results: List[ConnectorResult] = []
        jira = self._connector

        if self.comment is not None:
            results.append(jira.add_comment(self.task_key, self.comment))

        if self.details.has_updates():
            results.append(jira.update_task_details(self.task_key, self.details))

        if self.details.status_id is not None:
            results.append(jira.transition_issue(self.task_key, self.details.status_id))

        if self.attach_evidence:
            results.append(jira.add_evidence_to_task(self.task_key))

        if self.new_task is not None:
            results.append(
                jira.create_new_task(
                    self.new_task.project_key or "",
                    self.new_task.summary or "",
                    self.new_task.description or "",
                )
            )

        failed = [r.operation for r in results if r.is_failure]
        if failed:
            logger.warning(f"Batch on {self.task_key} finished with failures: {failed}")
        else:
            logger.debug(f"Batch on {self.task_key} applied ({len(results)} step(s))")
        return results
