# smartcart/domain/errors.py


class AccessDeniedError(PermissionError):
    """Row owned by another user (row-level security rejection)."""

    code = "42501"


class AuthError(PermissionError):
    """Credentials or session token rejected by the auth service."""


class NotFoundError(LookupError):
    pass


class BackendError(RuntimeError):
    """Backend unreachable or a query failed with nothing cached to fall back on."""


class VisionApiError(RuntimeError):
    """Vision API call failed: network error, non-2xx status or malformed body."""


class DuplicateMutationError(RuntimeError):
    pass
