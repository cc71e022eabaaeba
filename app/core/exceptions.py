from fastapi import status


class QuizAppError(Exception):
    """Base error carrying the HTTP status the routes report it with"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UnauthorizedError(QuizAppError):
    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenError(QuizAppError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(QuizAppError):
    status_code = status.HTTP_404_NOT_FOUND


class BadRequestError(QuizAppError):
    status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(BadRequestError):
    """Uniqueness collision; reported as a bad request"""


class DeadlineExceeded(QuizAppError):
    status_code = status.HTTP_504_GATEWAY_TIMEOUT
