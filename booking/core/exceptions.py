from fastapi import HTTPException, status

from .security import AuthorizationError


class NotFoundError(HTTPException):
    def __init__(self, detail: str = "Recurso não encontrado"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ConflictError(HTTPException):
    """A booking rule rejected the request.

    Mapped to 400, which booking clients already handle.
    """

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class ForbiddenError(AuthorizationError):
    pass


class UnexpectedError(HTTPException):
    def __init__(self, detail: str = "Erro inesperado"):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)
