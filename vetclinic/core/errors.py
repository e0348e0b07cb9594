# vetclinic/core/errors.py
"""
Application error taxonomy.

Every error is an HTTPException so FastAPI renders it as `{"detail": ...}`
without extra handlers. Services raise these directly; routers never catch
them.
"""

from fastapi import HTTPException, status


class AuthenticationError(HTTPException):
    """Bad credentials, or a missing/invalid/expired access token."""

    def __init__(self, detail: str = "Invalid email or password"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class RoleMismatchError(HTTPException):
    """
    The identity is valid with the provider but has no matching (active)
    profile or membership for the claimed portal.
    """

    def __init__(self, detail: str = "User is not allowed in this portal"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class AuthorizationError(HTTPException):
    """Caller is known but lacks the role or clinic access for the operation."""

    def __init__(self, detail: str = "Permission denied"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class ValidationError(HTTPException):
    """Business-level validation (required fields, CPF format, ...)."""

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class NotFoundError(HTTPException):
    """Entity does not exist, or exists outside the caller's clinic."""

    def __init__(self, resource: str):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource} not found",
        )


class InvalidTransitionError(HTTPException):
    """State change not allowed from the entity's current state."""

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class RemoteError(HTTPException):
    """Identity provider or storage failed for infrastructure reasons."""

    def __init__(self, detail: str = "Upstream service error"):
        super().__init__(status_code=status.HTTP_502_BAD_GATEWAY, detail=detail)
