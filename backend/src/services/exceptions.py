"""Shared exceptions for service layer operations."""


class NotFoundError(Exception):
    """Raised when a bookmark or user data document does not exist (or is not visible)."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ValidationError(Exception):
    """
    Raised when submitted data fails business validation.

    Carries every failed check in `validation_errors` so clients can show all
    problems at once instead of fixing them one request at a time.
    """

    def __init__(self, message: str, validation_errors: list[str]) -> None:
        self.message = message
        self.validation_errors = validation_errors
        super().__init__(message)


class PublicBookmarkExistsError(Exception):
    """Raised when a public bookmark with the same location already exists."""

    def __init__(self, location: str) -> None:
        self.location = location
        super().__init__(f"A public bookmark with the location '{location}' is already present")


class DuplicateLocationError(Exception):
    """Raised when the user already has a bookmark with the same location."""

    def __init__(self, location: str) -> None:
        self.location = location
        super().__init__(f"You already have a bookmark with the location '{location}'")


class UserIdMismatchError(Exception):
    """Raised when the user id in the path does not match the access token subject."""

    def __init__(
        self, message: str = "the userId does not match the subject in the access token",
    ) -> None:
        super().__init__(message)


class UserDataExistsError(Exception):
    """Raised when creating user data for a user that already has it."""

    def __init__(self, user_id: str) -> None:
        self.user_id = user_id
        super().__init__(f"User data already exists for userId {user_id}")
