"""LOGSMITH FILE PURPOSE
Purpose: exception taxonomy for configuration and logger construction faults.
Hot path: no.
Feature flags: none.
Failure mode: raised to the caller uncaught; never swallowed internally.
"""

from __future__ import annotations


class LogsmithError(Exception):
    pass


class ConfigurationMissing(LogsmithError):
    """No settings row, or more than one, matched the well-known name."""

    def __init__(self, name: str, found: int) -> None:
        super().__init__(f"expected exactly one log settings row named {name!r}, found {found}")
        self.name = name
        self.found = found


class MissingLoggingLevel(LogsmithError):
    def __init__(self) -> None:
        super().__init__("logging level is required")


class MissingError(LogsmithError):
    def __init__(self) -> None:
        super().__init__("error is required")


class InvalidCronSchedule(LogsmithError):
    pass
