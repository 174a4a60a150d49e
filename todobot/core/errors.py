"""Error kinds shared by the services, the scheduler and the bot front-end."""

from __future__ import annotations


class TodoBotError(Exception):
    """Base class for all domain errors."""


class ValidationError(TodoBotError):
    """Bad or missing user input (empty title, unknown priority, ...)."""


class InvalidFormatError(ValidationError):
    """A duration token like '2h' could not be parsed."""


class NotFoundError(TodoBotError):
    """Unknown task, reminder or user, or a task number out of range."""


class DependencyError(TodoBotError):
    """The database or the messaging channel failed or timed out."""
