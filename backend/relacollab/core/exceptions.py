from typing import Optional


class BaseAppException(Exception):
    """Base exception for the application."""

    def __init__(self, message: str, details: Optional[str] = None):
        self.message = message
        self.details = details
        super().__init__(self.message)


class NotFoundError(BaseAppException):
    """Exception raised when a campaign, creator or match document does not exist."""

    def __init__(self, resource: str, resource_id: str):
        super().__init__(f"{resource.capitalize()} {resource_id} not found")
        self.resource = resource
        self.resource_id = resource_id


class DocumentStoreError(BaseAppException):
    """Exception raised when reading or writing documents fails."""
    pass


class MatchAnalysisError(BaseAppException):
    """Exception raised when the LLM returns an unusable match analysis."""

    def __init__(self, message: str, raw_response: Optional[str] = None):
        super().__init__(message, raw_response)
        self.raw_response = raw_response
