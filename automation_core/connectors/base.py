"""
REST Connector Base.

Shared plumbing for the Jira and Zephyr connectors: a lazily created
``requests.Session``, one request per operation, and translation of the
response (or the failure) into a ConnectorResult. Nothing here raises on
a bad response; the test run must keep going when a service is down.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional

import requests
from loguru import logger

from automation_core.connectors.results import ConnectorResult, ConnectorStatus


class RestConnector(ABC):
    """
    Base class for the REST connectors.

    Subclasses provide ``is_active``, ``base_url`` and ``timeout_sec`` and
    configure authentication in ``_configure_session``.
    """

    service_name = "REST"

    def __init__(self, session: Optional[requests.Session] = None) -> None:
        self._session = session

    @property
    @abstractmethod
    def is_active(self) -> bool:
        ...

    @property
    @abstractmethod
    def base_url(self) -> str:
        ...

    @property
    @abstractmethod
    def timeout_sec(self) -> float:
        ...

    def _configure_session(self, session: requests.Session) -> None:
        """Hook for auth and default headers."""
        pass

    def _get_session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
            self._configure_session(self._session)
        return self._session

    def _send(
        self,
        operation: str,
        method: str,
        endpoint: str,
        expected_status: int,
        *,
        parse_json: bool = False,
        **kwargs: Any,
    ) -> ConnectorResult:
        """
        Send one request and map the outcome.

        Args:
            operation: Name used in logs and in the result.
            method: HTTP method.
            endpoint: Path appended to ``base_url``.
            expected_status: The only status code that counts as success.
            parse_json: Decode the body into ``result.data`` on success.
            **kwargs: Passed through to ``Session.request`` (json, params, files...).
        """
        url = f"{self.base_url}{endpoint}"
        logger.debug(f"{self.service_name} API {method} {url}")

        status_code: Optional[int] = None
        try:
            with self._get_session().request(
                method=method,
                url=url,
                timeout=self.timeout_sec,
                **kwargs,
            ) as response:
                status_code = response.status_code
                if status_code != expected_status:
                    logger.error(
                        f"{self.service_name} {operation} failed: "
                        f"expected HTTP {expected_status}, got {status_code}"
                    )
                    return ConnectorResult(
                        operation,
                        ConnectorStatus.FAILURE,
                        status_code=status_code,
                        message=f"unexpected status {status_code}",
                    )

                data = response.json() if parse_json else None
        except requests.exceptions.JSONDecodeError as e:
            logger.error(f"{self.service_name} {operation} returned an unreadable body: {e}")
            return ConnectorResult(
                operation,
                ConnectorStatus.ERROR,
                status_code=status_code,
                message=f"invalid response body: {e}",
            )
        except requests.exceptions.Timeout as e:
            logger.error(f"{self.service_name} {operation} timed out after {self.timeout_sec}s: {e}")
            return ConnectorResult(operation, ConnectorStatus.ERROR, message=f"timeout: {e}")
        except requests.exceptions.RequestException as e:
            logger.error(f"{self.service_name} {operation} request error: {e}")
            return ConnectorResult(operation, ConnectorStatus.ERROR, message=str(e))

        return ConnectorResult(
            operation,
            ConnectorStatus.SUCCESS,
            status_code=status_code,
            message=f"{operation} succeeded",
            data=data,
        )

    def close(self) -> None:
        """Close the HTTP session."""
        if self._session is not None:
            self._session.close()
            self._session = None
            logger.debug(f"{self.service_name} connector session closed")

    def __enter__(self) -> "RestConnector":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
