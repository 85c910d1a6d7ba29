"""Custom exception types for the PR cost analyzer."""


class PRCostError(Exception):
    """Base exception for all recoverable PR cost analyzer errors."""


class ConfigurationError(PRCostError):
    """Raised when runtime configuration values are missing or invalid."""


class ApiError(PRCostError):
    """Raised when a GitHub or Prow request fails or returns an unexpected response."""


class DataValidationError(PRCostError):
    """Raised when API payloads do not meet expected constraints."""


class ReportWriteError(PRCostError):
    """Raised when the cost report cannot be serialized or written to disk."""
