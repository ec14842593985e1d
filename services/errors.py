class PostError(Exception):
    """Base class for failures raised by the post service"""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PostError):
    status_code = 400


class Unauthorized(PostError):
    status_code = 401

    def __init__(self, message: str = "User is not authorized"):
        super().__init__(message)


class NotFound(PostError):
    status_code = 404


class Conflict(PostError):
    status_code = 400


class StorageFailure(PostError):
    """Unexpected error from the document store, surfaced verbatim"""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(f"Server Error {message}")
