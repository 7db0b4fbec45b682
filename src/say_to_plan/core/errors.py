# src/say_to_plan/core/errors.py

"""Exceptions raised by the task core. None of them is fatal to the process."""

from __future__ import annotations


class SayToPlanError(Exception):
    """Base class for all say_to_plan errors."""


class TaskValidationError(SayToPlanError, ValueError):
    """Rejected input (e.g. empty description); nothing was mutated."""


class TaskOwnershipError(SayToPlanError, PermissionError):
    """A mutation was attempted on behalf of a different owner."""


class StorageError(SayToPlanError):
    """Persistence backend failed to read, write or decode a collection."""
