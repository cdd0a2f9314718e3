"""
Error taxonomy for the survivor pool.
Every error here is a user-input or configuration problem: surfaced to the
caller as a structured response, never retried.
"""
from __future__ import annotations


class PoolError(Exception):
    """Base class. status_code is what the HTTP layer returns."""
    status_code = 400


class ValidationError(PoolError):
    """Malformed or missing request field. Message names the field."""
    status_code = 400


class QuotaExceeded(PoolError):
    """Per-email entry cap reached."""
    status_code = 409


class SubmissionsClosed(PoolError):
    """Entries are locked by the admin."""
    status_code = 403


class ConfigIncomplete(PoolError):
    """Playoff teams or player pool not configured (or catalog not generated)."""
    status_code = 400


class PlayerNotFound(PoolError):
    """Import pick could not be resolved against the catalog."""
    status_code = 400


class EntryNotFound(PoolError):
    status_code = 404


class AuthError(PoolError):
    """Admin token missing or invalid."""
    status_code = 403
