"""Custom exception classes for the club platform.

Every failure a service can report is one of these classes. The ``kind`` tag is what
callers branch on; ``message`` is for humans only.
"""


class ClubhouseError(Exception):
    """Base exception for the club platform."""

    kind = "internal"
    status_code = 500

    def __init__(self, message: str = "An error occurred"):
        self.message = message
        super().__init__(self.message)


class InternalError(ClubhouseError):
    """Raised when the store or another lower layer fails unexpectedly."""
    pass


class AuthenticationError(ClubhouseError):
    """Raised when credentials are missing or invalid."""

    kind = "unauthenticated"
    status_code = 401


class AuthorizationError(ClubhouseError):
    """Raised when the requester lacks permission."""

    kind = "forbidden"
    status_code = 403

    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(message)


class CannotRemoveLeaderError(AuthorizationError):
    """Raised when removing a member whose club role is LEADER."""

    def __init__(self, message: str = "A club leader cannot be removed"):
        super().__init__(message)


class CannotModifyLeaderError(AuthorizationError):
    """Raised when changing the role or tier of a club LEADER."""

    def __init__(self, message: str = "A club leader's role and tier cannot be changed"):
        super().__init__(message)


class ResourceNotFoundError(ClubhouseError):
    """Raised when a requested resource is not found."""

    kind = "not_found"
    status_code = 404


class ResourceConflictError(ClubhouseError):
    """Raised when a request clashes with existing state."""

    kind = "conflict"
    status_code = 409


class AlreadyRequestedError(ResourceConflictError):
    def __init__(self, message: str = "A join request is already pending"):
        super().__init__(message)


class AlreadyMemberError(ResourceConflictError):
    def __init__(self, message: str = "Already a member of this club"):
        super().__init__(message)


class AlreadyApprovedError(ResourceConflictError):
    def __init__(self, message: str = "Membership is already approved"):
        super().__init__(message)


class ClubNameTakenError(ResourceConflictError):
    def __init__(self, name: str):
        super().__init__(f"A club named '{name}' already exists")


class ValidationError(ClubhouseError):
    """Raised when input validation fails."""

    kind = "invalid_input"
    status_code = 400


class InvalidRangeError(ValidationError):
    """Raised when an end timestamp precedes its start."""

    def __init__(self, message: str = "endAt must not be earlier than startAt"):
        super().__init__(message)
