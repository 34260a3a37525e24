"""
Connector Settings Module.

Immutable settings for the Jira and Zephyr connectors, read once from a
ConfigResolver at start-up and handed to the connectors explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from loguru import logger

from automation_core.config.loader import ConfigResolver

DEFAULT_TIMEOUT_SEC = 30.0
DEFAULT_ZEPHYR_URL = "https://api.zephyrscale.smartbear.com"


def parse_flag(value: str | None) -> bool:
    """Only a case-insensitive ``"true"`` turns a flag on."""
    return (value or "").strip().lower() == "true"


def _parse_timeout(value: str | None) -> float:
    try:
        return float(value) if value else DEFAULT_TIMEOUT_SEC
    except ValueError:
        logger.warning(f"Invalid timeout '{value}', using {DEFAULT_TIMEOUT_SEC}s")
        return DEFAULT_TIMEOUT_SEC


@dataclass(frozen=True)
class EvidenceSettings:
    """Evidence directories per platform and for CI builds."""

    windows_path: str = ""
    unix_path: str = ""
    jenkins_path: str = ""

    @classmethod
    def from_properties(cls, resolver: ConfigResolver) -> "EvidenceSettings":
        return cls(
            windows_path=resolver.resolve("evidence.path.windows"),
            unix_path=resolver.resolve("evidence.path.unix"),
            jenkins_path=resolver.resolve("evidence.path.jenkins"),
        )


@dataclass(frozen=True)
class JiraSettings:
    """
    Jira connector settings.

    Attributes:
        is_active: Whether the connector may talk to Jira at all.
        base_url: Jira instance URL, without trailing slash.
        username: Account used for basic auth.
        jira_key: API token paired with ``username``.
        timeout_sec: Connect/read timeout per request.
        evidence: Where evidence files are picked up from.
    """

    is_active: bool = False
    base_url: str = ""
    username: str = ""
    jira_key: str = ""
    timeout_sec: float = DEFAULT_TIMEOUT_SEC
    evidence: EvidenceSettings = field(default_factory=EvidenceSettings)

    @classmethod
    def from_properties(cls, resolver: ConfigResolver) -> "JiraSettings":
        """
        Build settings from configuration.

        A connector flagged active but missing its URL, username or key is
        downgraded to inactive with a warning.

        Raises:
            ConfigurationError: If a required key is absent from configuration.
        """
        evidence = EvidenceSettings.from_properties(resolver)
        timeout = _parse_timeout(resolver.get("jira.connector.timeoutSec"))

        if not parse_flag(resolver.resolve("jira.connector.isActive")):
            logger.warning("Jira connection is not active")
            return cls(is_active=False, timeout_sec=timeout, evidence=evidence)

        base_url = resolver.resolve("jira.connector.baseUrl").strip().rstrip("/")
        username = resolver.resolve("jira.connector.username").strip()
        jira_key = resolver.resolve("jira.connector.jiraKey").strip()

        is_active = True
        if not jira_key:
            is_active = False
            logger.warning("Jira API key is not configured")
        if not (base_url and username and jira_key):
            is_active = False
            logger.warning(
                "Incomplete Jira configuration: baseUrl, username and jiraKey are required"
            )
        else:
            logger.info(f"Jira connection activated: {base_url}")

        return cls(
            is_active=is_active,
            base_url=base_url,
            username=username,
            jira_key=jira_key,
            timeout_sec=timeout,
            evidence=evidence,
        )


@dataclass(frozen=True)
class ZephyrSettings:
    """Zephyr Scale connector settings."""

    is_active: bool = False
    base_url: str = DEFAULT_ZEPHYR_URL
    zephyr_key: str = ""
    project_id: str = ""
    timeout_sec: float = DEFAULT_TIMEOUT_SEC

    @classmethod
    def from_properties(cls, resolver: ConfigResolver) -> "ZephyrSettings":
        """
        Build settings from configuration.

        Raises:
            ConfigurationError: If a required key is absent from configuration.
        """
        base_url = (resolver.get("zephyr.connector.baseUrl") or DEFAULT_ZEPHYR_URL).rstrip("/")
        timeout = _parse_timeout(resolver.get("zephyr.connector.timeoutSec"))

        if not parse_flag(resolver.resolve("zephyr.connector.isActive")):
            logger.warning("Zephyr connection is not active")
            return cls(is_active=False, base_url=base_url, timeout_sec=timeout)

        zephyr_key = resolver.resolve("zephyr.connector.zephyrKey").strip()
        project_id = resolver.resolve("zephyr.connector.projectId").strip()

        is_active = bool(zephyr_key and project_id)
        if is_active:
            logger.info(f"Zephyr connection activated for project {project_id}")
        else:
            logger.warning("Missing Zephyr settings: zephyrKey and projectId are required")

        return cls(
            is_active=is_active,
            base_url=base_url,
            zephyr_key=zephyr_key,
            project_id=project_id,
            timeout_sec=timeout,
        )
