"""
Connector Result Module.

Outcome of a single connector operation. Runtime failures against Jira or
Zephyr are never raised to the test run; they come back as a result whose
status tells the caller what happened.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class ConnectorStatus(Enum):
    """Status of a connector operation."""

    SUCCESS = "success"
    FAILURE = "failure"  # service answered with an unexpected status code
    ERROR = "error"  # transport or I/O failure
    DISABLED = "disabled"
    SKIPPED = "skipped"  # nothing to send


@dataclass
class ConnectorResult:
    """
    Result of a connector operation.

    Truthy only on success, so ``if jira.validate_project("QA"):`` reads
    the same way the old boolean API did.

    Attributes:
        operation: Name of the operation (used in logs).
        status: What happened.
        status_code: HTTP status code, when a response was received.
        message: Human-readable description.
        data: Operation-specific payload (e.g. a created issue key).
    """

    operation: str
    status: ConnectorStatus = ConnectorStatus.SUCCESS
    status_code: Optional[int] = None
    message: str = ""
    data: Any = None

    @classmethod
    def disabled(cls, operation: str) -> "ConnectorResult":
        return cls(operation, ConnectorStatus.DISABLED, message="connector is not active")

    @classmethod
    def skipped(cls, operation: str, message: str) -> "ConnectorResult":
        return cls(operation, ConnectorStatus.SKIPPED, message=message)

    @property
    def is_success(self) -> bool:
        return self.status == ConnectorStatus.SUCCESS

    @property
    def is_failure(self) -> bool:
        """Check if the operation was attempted and did not succeed."""
        return self.status in (ConnectorStatus.FAILURE, ConnectorStatus.ERROR)

    def __bool__(self) -> bool:
        return self.is_success

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the result for reporting."""
        return {
            "operation": self.operation,
            "status": self.status.value,
            "status_code": self.status_code,
            "message": self.message,
        }
