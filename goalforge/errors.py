"""
errors.py — Error taxonomy shared by services and routes.
Routes translate these into HTTP status codes; cascades swallow NotFoundError.
"""


class GoalForgeError(Exception):
    """Base class for every error raised on purpose by the services."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(GoalForgeError):
    status_code = 404


class AuthorizationError(GoalForgeError):
    status_code = 403


class AuthenticationError(GoalForgeError):
    status_code = 401


class ValidationError(GoalForgeError):
    status_code = 422


class AIServiceError(GoalForgeError):
    """The text-generation collaborator failed or returned unusable output."""

    status_code = 502
