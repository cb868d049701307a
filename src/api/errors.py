"""
Failure-to-HTTP mapping.

Each ErrorKind maps to exactly one status code; the catalog message is
returned unchanged as ``detail``.
"""

from fastapi import HTTPException, status

from src.domain.results import ErrorKind, Failure

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.AUTH: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def http_error(failure: Failure) -> HTTPException:
    """Build the HTTPException for a service Failure."""
    headers = {"WWW-Authenticate": "Bearer"} if failure.kind is ErrorKind.AUTH else None
    return HTTPException(
        status_code=STATUS_BY_KIND[failure.kind],
        detail=failure.message,
        headers=headers,
    )
