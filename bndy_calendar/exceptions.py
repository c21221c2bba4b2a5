"""Calendar-specific exceptions for error handling."""

from typing import Optional


class CalendarError(Exception):
    """Base exception for bndy calendar errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidRuleError(CalendarError):
    """Recurrence rule configuration is malformed.

    Raised when:
    - interval is below 1
    - count is below 1
    - a weekday set is given for a non-weekly frequency
    - a weekday number falls outside 0 (Monday) .. 6 (Sunday)
    """


class IcalExportError(CalendarError):
    """Exception raised when events cannot be serialized to iCal."""


class IcalParseError(CalendarError):
    """Exception raised when iCal content cannot be parsed."""


class CalendarApiError(CalendarError):
    """Exception raised when the bndy REST API request fails."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
