"""
Access layer errors as HTTP responses.

Not-found becomes 404; every other access layer failure becomes 500 with
the operation's short message. Store details stay in the logs.
"""

from typing import NoReturn

from fastapi import HTTPException, status

from ..core.objects.errors import AccessLayerError, ObjectNotFoundError


def raise_for_access_error(error: AccessLayerError) -> NoReturn:
    """Translate an access layer failure into an HTTP error."""
    if isinstance(error, ObjectNotFoundError):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=error.message,
        ) from error
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=error.message,
    ) from error
