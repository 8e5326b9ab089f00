"""Errors raised by schedule administration and the capacity ledger."""

from __future__ import annotations


class ScheduleError(Exception):
    """Base class for schedule errors surfaced to callers."""

    code = "schedule_error"
    status_code = 400
    default_message = "The schedule request could not be completed."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class InvalidTemplate(ScheduleError):
    code = "invalid_template"
    default_message = "The class details are invalid."


class TemplateNotFound(ScheduleError):
    code = "template_not_found"
    status_code = 404
    default_message = "Class template not found."


class SessionNotFound(ScheduleError):
    code = "session_not_found"
    status_code = 404
    default_message = "Class not found."
