class TaskboardError(Exception):
    status_code = 500

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    default_message = "Unexpected error"


class PermissionDenied(TaskboardError):
    status_code = 403
    default_message = "Permission denied."


class NotFoundError(TaskboardError):
    status_code = 404
    default_message = "Not found."


class ValidationError(TaskboardError):
    status_code = 400
    default_message = "Invalid input."


class AuthenticationError(TaskboardError):
    status_code = 401
    default_message = "Invalid email or password"


class UpstreamError(TaskboardError):
    status_code = 502
    default_message = "Upstream service failed."


class FileTooLargeError(TaskboardError):
    status_code = 413

    def __init__(self, filename, limit_bytes):
        self.filename = filename
        self.limit_bytes = limit_bytes
        super().__init__(f"File '{filename}' exceeds the {limit_bytes} byte limit.")
