"""Domain-specific exceptions for retail-targets.

This module defines custom exceptions that are part of the public API.
All exceptions inherit from RetailTargetsError for easy catching.

The target engine itself (retail_targets.targets) raises none of these for
valid inputs; they belong to the configuration, storage and source layers.
"""


class RetailTargetsError(Exception):
    """Base exception for all retail-targets errors.

    Users can catch this exception to handle any retail-targets error.
    """

    pass


class ConfigError(RetailTargetsError):
    """Raised when there is a configuration error.

    This exception is raised when:
    - Invalid configuration values are provided (bad timezone, non-numeric env var)
    - Required configuration is missing
    """

    pass


class ValidationError(RetailTargetsError, ValueError):
    """Raised when caller input is invalid.

    This exception is raised when:
    - A month key is not in YYYY-MM format
    - A date is not in YYYY-MM-DD format
    - A goal or amount is not a positive number
    - A manual entry source is unknown or lacks a required description
    """

    pass


class EntryNotFoundError(RetailTargetsError, KeyError):
    """Raised when a manual entry id does not exist in the store."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message
        return str(self.args[0]) if self.args else "Manual entry not found."


class ExtractionError(RetailTargetsError):
    """Raised when loading sales from an upstream source fails.

    This exception is raised when:
    - The platform API returns a non-success HTTP status
    - The GraphQL response carries errors
    - No access token is configured
    """

    pass
