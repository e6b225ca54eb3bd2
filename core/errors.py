# core/errors.py
# -*- coding: utf-8 -*-
"""
Error taxonomy shared by the services, the storage adapters and the HTTP layer.

- ValidationError : caller sent malformed / missing input (400)
- NotFound        : target id or name does not exist (404)
- ConflictError   : unique name already taken (soft-fail on category/location add)
- StorageError    : the storage engine itself failed (500, logged)
"""


class PortalError(Exception):
    """Base class, `message` is what the HTTP layer shows."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PortalError):
    status_code = 400


class NotFound(PortalError):
    status_code = 404


class ConflictError(PortalError):
    status_code = 409


class StorageError(PortalError):
    status_code = 500


class AuthenticationError(PortalError):
    status_code = 401
