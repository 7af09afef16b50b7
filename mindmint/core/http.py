from fastapi import HTTPException, status

from mindmint.core.exceptions import ErrorCategory, MindMintError

STATUS_BY_CATEGORY = {
    ErrorCategory.VALIDATION: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCategory.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCategory.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCategory.COLLABORATOR: status.HTTP_502_BAD_GATEWAY,
    ErrorCategory.STORAGE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def to_http_exception(error: MindMintError) -> HTTPException:
    """Maps a domain error to the HTTP status of its category."""
    return HTTPException(status_code=STATUS_BY_CATEGORY[error.category], detail=error.message)
