from __future__ import annotations


class AppError(Exception):
    # Base class for domain errors (intended, meaningful failures).
    pass


class ConfigError(AppError):
    # Raised when required settings are missing or unusable.
    pass


class BackendError(AppError):
    # Raised when a remote store call fails (network, store or query failure).
    pass


class RecordShapeError(BackendError):
    # Raised when a row returned by the store does not match the expected record shape.
    pass


class AuthenticationFailed(AppError):
    # Raised when sign-in is rejected by the session provider.
    pass
