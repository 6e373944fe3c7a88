"""
Error Taxonomy

Exceptions raised by the scenario store and the upload service. Each error
carries the HTTP status the API layer answers with and a short public
message that is safe to return to clients.
"""


class TrafficSimError(Exception):
    """Base class for all service errors"""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self):
        return {'error': self.message}


class ValidationError(TrafficSimError):
    """A required field is missing or a payload is malformed"""

    status_code = 400
    default_message = "Invalid request payload"


class NotFoundError(TrafficSimError):
    """A scenario id or uploaded filename does not exist"""

    status_code = 404
    default_message = "Not found"


class InvalidInputError(TrafficSimError):
    """Disallowed filename or file type"""

    status_code = 400
    default_message = "Invalid input"


class UploadTooLargeError(InvalidInputError):
    status_code = 413
    default_message = "File too large"


class StoreIOError(TrafficSimError):
    """
    Read/write failure against the scenario file or the upload directory.

    The message passed in is for the server log only; clients always see
    the generic default message.
    """

    status_code = 500
    default_message = "Storage operation failed"

    def __init__(self, message: str = None, public_message: str = None):
        super().__init__(message)
        self.public_message = public_message or self.default_message

    def to_dict(self):
        return {'error': self.public_message}
