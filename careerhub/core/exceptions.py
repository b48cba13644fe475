"""
Domain errors raised by the service layer.

Routes never catch these; main.py turns them into JSON responses
with the status code carried by each class.
"""


class CareerHubError(Exception):
    status_code = 500

    def __init__(self, message: str = "Server error"):
        super().__init__(message)
        self.message = message


class NotFoundError(CareerHubError):
    """Resume, rubric, opportunity or user does not exist."""
    status_code = 404


class ForbiddenError(CareerHubError):
    """Caller's role or ownership does not allow the operation."""
    status_code = 403

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class InvalidInputError(CareerHubError):
    """Malformed identifier or request value."""
    status_code = 400


class StoredDocumentError(CareerHubError):
    """A stored document no longer fits its model. Rendered as a plain server error."""
    status_code = 500

    def __init__(self, message: str = "Server error"):
        super().__init__(message)
