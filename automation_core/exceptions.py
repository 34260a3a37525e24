"""
Automation Exception Module.

Fatal error signal for the automation framework. Raising an
AutomationException aborts the operation in progress; the message is
logged at CRITICAL level as soon as the exception is built, so the failure
shows up in the run log even when a caller swallows the traceback.
"""

from __future__ import annotations

from typing import Any

from loguru import logger


class AutomationException(Exception):
    """
    Terminal error for the current operation.

    Accepts either a printf-style message with arguments or a lower-level
    exception to wrap::

        raise AutomationException("Key '%s' not found in '%s'", key, file_name)

        try:
            ...
        except OSError as e:
            raise AutomationException(e) from e

    Pass ``log=False`` when the failure being wrapped was already logged.
    """

    def __init__(self, message: str | BaseException, *args: Any, log: bool = True) -> None:
        if isinstance(message, BaseException):
            self.wrapped: BaseException | None = message
            text = str(message) or type(message).__name__
        else:
            self.wrapped = None
            text = message % args if args else message

        super().__init__(text)
        self.message = text
        if self.wrapped is not None:
            self.__cause__ = self.wrapped
        if log:
            logger.critical(text)
