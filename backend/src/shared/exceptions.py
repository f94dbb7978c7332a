class AppError(Exception):
    """Base exception for application errors."""

    def __init__(self, message: str = "An error occurred"):
        self.message = message
        super().__init__(self.message)


class NotFoundError(AppError):
    """Raised when a requested resource does not exist."""

    def __init__(self, resource: str = "Resource", id: str = ""):
        super().__init__(f"{resource} not found: {id}" if id else f"{resource} not found")


class ValidationError(AppError):
    """Raised when input fails a domain rule."""

    def __init__(self, message: str = "Invalid input"):
        super().__init__(message)


class MalformedVersionLabelError(ValidationError):
    def __init__(self, label: str):
        super().__init__(f"Malformed version label: {label!r}")


class InvalidStatusError(ValidationError):
    def __init__(self, status: object):
        super().__init__(f"Invalid status value: {status!r}")


class ConflictError(AppError):
    """Raised when a write collides with the current state of a resource."""

    def __init__(self, message: str = "Resource was modified by another user"):
        super().__init__(message)


class VersionLabelConflictError(ConflictError):
    def __init__(self, document_id: object):
        super().__init__(f"Could not assign a unique version label for document {document_id}")


class CurrentVersionProtectedError(ConflictError):
    def __init__(self, version_id: object):
        super().__init__(
            f"Version {version_id} is the current version; set another current version first"
        )


class AuthenticationError(AppError):
    """Raised when credentials are invalid."""

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message)


class AuthorizationError(AppError):
    """Raised when a user lacks permission for an action."""

    def __init__(self, message: str = "Permission denied"):
        super().__init__(message)


class StorageUnavailableError(AppError):
    """Raised when the blob store or the database cannot complete a request."""

    def __init__(self, message: str = "Storage unavailable"):
        super().__init__(message)
