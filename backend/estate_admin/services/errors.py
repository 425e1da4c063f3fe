"""Store-level errors raised by the sidebar and permission services."""


class EstateAdminError(Exception):
    """Base exception for all store-level errors."""


class ConfigNotFoundError(EstateAdminError):
    """Raised when a sidebar configuration does not exist."""


class ItemNotFoundError(EstateAdminError):
    """Raised when a navigation item id is not in the configuration."""


class DuplicateItemError(EstateAdminError):
    """Raised when adding an item whose id is already used in the configuration."""


class VersionConflictError(EstateAdminError):
    """Raised when a write carries a stale configuration version."""

    def __init__(self, expected: int | None, actual: int):
        super().__init__(f"Configuration changed (version {actual}, request based on {expected})")
        self.expected = expected
        self.actual = actual


class LastDefaultError(EstateAdminError):
    """Raised when deleting the only default configuration of a role."""


class UserNotFoundError(EstateAdminError):
    """Raised when the target user does not exist."""


class PermissionNotAllowedError(EstateAdminError):
    """Raised when granting tokens outside the manageable employee set."""

    def __init__(self, tokens: list[str]):
        super().__init__(f"Permissions not allowed: {', '.join(tokens)}")
        self.tokens = tokens


class PermissionRecordExistsError(EstateAdminError):
    """Raised when creating a permission record for a user who already has one."""


class NotAnEmployeeError(EstateAdminError):
    """Raised when employee-only grants target a non-employee account."""


class OverrideNotDefaultableError(EstateAdminError):
    """Raised when a per-user override is promoted to a role default."""


class InvalidParentError(EstateAdminError):
    """Raised when moving an item under itself or one of its descendants."""
