"""
Custom exceptions for triplog.

This module provides a hierarchy of exceptions for better error handling
and more informative error messages throughout the application.
"""


class TripLogError(Exception):
    """Base exception for all triplog errors."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class DatabaseError(TripLogError):
    """Database operation failed."""

    pass


class CSVImportError(TripLogError):
    """The uploaded file could not be read as a trip export at all."""

    def __init__(self, message: str, reason: str = None, filename: str = None):
        details = {}
        if reason:
            details['reason'] = reason
        if filename:
            details['filename'] = filename
        super().__init__(message, details)
        self.reason = reason
        self.filename = filename


class TripNotFoundError(TripLogError):
    """No trip exists for the given start key."""

    def __init__(self, start_key: str):
        super().__init__(f"Trip not found: {start_key}", {'start_key': start_key})
        self.start_key = start_key


class TripValidationError(TripLogError):
    """A trip edit was rejected."""

    def __init__(self, message: str, field: str = None, value=None):
        details = {}
        if field:
            details['field'] = field
        if value is not None:
            details['value'] = value
        super().__init__(message, details)
        self.field = field
        self.value = value


class WeatherAPIError(TripLogError):
    """Weather API request failed."""

    def __init__(
        self,
        message: str,
        latitude: float = None,
        longitude: float = None,
        status_code: int = None
    ):
        details = {}
        if latitude is not None:
            details['latitude'] = latitude
        if longitude is not None:
            details['longitude'] = longitude
        if status_code:
            details['status_code'] = status_code
        super().__init__(message, details)
        self.latitude = latitude
        self.longitude = longitude
        self.status_code = status_code


class ConfigurationError(TripLogError):
    """Invalid or missing configuration."""

    def __init__(self, message: str, config_key: str = None):
        details = {}
        if config_key:
            details['config_key'] = config_key
        super().__init__(message, details)
        self.config_key = config_key
