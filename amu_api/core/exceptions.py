"""
Custom exceptions for the Livestock AMU API.
Provides specific error types for different failure scenarios.

Withdrawal calculations never raise for business conditions (unknown drug,
invalid date, milk prohibited); those are result variants. These exceptions
cover start-up and infrastructure failures plus the HTTP-facing lookups.
"""


class AmuApiException(Exception):
    """Base exception for all application errors."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class ValidationException(AmuApiException):
    """Raised when request data validation fails."""
    pass


class ReferenceDataException(AmuApiException):
    """Raised when the withdrawal reference table is malformed at load time."""
    pass


class DrugNotFoundException(AmuApiException):
    """Raised when a reference lookup over HTTP finds no drug or substance."""
    pass


class TreatmentNotFoundException(AmuApiException):
    """Raised when a treatment entry is not found in the database."""
    pass


class DynamoDBException(AmuApiException):
    """Raised when DynamoDB operation fails."""
    pass


class SheetsExportException(AmuApiException):
    """Raised when appending a row to Google Sheets fails."""
    pass
