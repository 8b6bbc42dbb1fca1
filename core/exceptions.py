"""
Custom Exception Classes

Provides specific exception types for better error handling and user feedback.
"""


class DashboardException(Exception):
    """Base exception for all dashboard errors"""
    pass


class RecordNotFoundError(DashboardException):
    """Raised when a habit, priority, task or insight does not exist for the user"""
    def __init__(self, record_type: str, record_id: str):
        self.record_type = record_type
        self.record_id = record_id
        super().__init__(f"{record_type.capitalize()} '{record_id}' not found")


class InvalidWeekdayError(DashboardException):
    """Raised when a weekday name is not one of monday..sunday"""
    def __init__(self, day: str, valid_days):
        self.day = day
        self.valid_days = list(valid_days)
        super().__init__(
            f"Invalid day '{day}'. Valid options: {', '.join(self.valid_days)}"
        )


class ValidationError(DashboardException):
    """Raised when data validation fails"""
    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"Validation error for '{field}': {message}")


class DuplicateError(DashboardException):
    """Raised when trying to create a duplicate record"""
    def __init__(self, resource_type: str, identifier: str):
        self.resource_type = resource_type
        self.identifier = identifier
        super().__init__(f"Duplicate {resource_type}: '{identifier}' already exists")


class IntegrationDisabledError(DashboardException):
    """Raised when an optional integration is switched off by feature flag"""
    def __init__(self, integration: str):
        self.integration = integration
        super().__init__(f"Integration '{integration}' is disabled")


class SheetsSyncError(DashboardException):
    """Raised when the Google Sheets gateway fails"""
    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"Google Sheets {operation} failed: {reason}")
