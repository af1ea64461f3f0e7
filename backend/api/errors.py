from fastapi import FastAPI, Request, HTTPException
from fastapi.exception_handlers import http_exception_handler

from domain.errors import (
    DomainError, ValidationFailure, NotFound, DuplicateIdentifier,
    PersistError, SongInUse, SongAlreadyInSetlist,
)

STATUS_CODES = {
    ValidationFailure: 422,
    NotFound: 404,
    DuplicateIdentifier: 409,
    SongInUse: 409,
    SongAlreadyInSetlist: 409,
    PersistError: 503,
}

def to_http_exception(exc: DomainError) -> HTTPException:
    status_code = next(
        (code for error_type, code in STATUS_CODES.items() if isinstance(exc, error_type)),
        500,
    )
    if isinstance(exc, ValidationFailure):
        return HTTPException(status_code=status_code, detail=exc.to_dict())
    return HTTPException(status_code=status_code, detail=str(exc))

async def domain_error_handler(request: Request, exc: DomainError):
    return await http_exception_handler(request, to_http_exception(exc))

def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(DomainError, domain_error_handler)
