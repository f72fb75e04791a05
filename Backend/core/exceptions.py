from fastapi import Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException
from fastapi.responses import JSONResponse

from core.logger import app_logger
from model.dao.enums import FormErrorKind
from model.dto.base import BaseResponseDTO


class FormGenServiceException(Exception):
    kind: FormErrorKind | None = None
    status_code: int = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class DAOException(FormGenServiceException):
    status_code = 500


class InvalidFormatException(FormGenServiceException):
    kind = FormErrorKind.INVALID_FORMAT

    def __init__(self, message: str = "NIT must contain only digits"):
        super().__init__(message)


class EmptyNameException(FormGenServiceException):
    kind = FormErrorKind.EMPTY_NAME

    def __init__(self, message: str = "Please enter a form name"):
        super().__init__(message)


class NoFieldsException(FormGenServiceException):
    kind = FormErrorKind.NO_FIELDS

    def __init__(self, message: str = "Form must have at least one field"):
        super().__init__(message)


class LockedFieldException(FormGenServiceException):
    kind = FormErrorKind.LOCKED_FIELD


class MissingPrimaryKeyException(FormGenServiceException):
    kind = FormErrorKind.MISSING_PRIMARY_KEY

    def __init__(self, message: str = "No primary key found in table"):
        super().__init__(message)


class UnsupportedDisplayFieldException(FormGenServiceException):
    kind = FormErrorKind.UNSUPPORTED_DISPLAY_FIELD
    status_code = 422


class BadRequestException(HTTPException):
    def __init__(self, message: str = "Bad Request"):
        super().__init__(400, message)


class NotFoundException(HTTPException):
    def __init__(self, message: str = "Not Found"):
        super().__init__(404, message)


class ServiceUnavailableException(HTTPException):
    def __init__(self, message: str = "Service Unavailable"):
        super().__init__(503, message)


# Exception Handlers
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    app_logger.error(f"HTTP Exception: {exc.status_code} - {exc.detail}")

    response_dto = BaseResponseDTO(message="An error occurred")

    if isinstance(exc.detail, str):
        response_dto.message = exc.detail
    elif isinstance(exc.detail, list):
        response_dto.errors = exc.detail
    else:
        response_dto.errors = [exc.detail]

    return JSONResponse(
        status_code=exc.status_code,
        content=response_dto.model_dump(),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = []

    for error in exc.errors():
        location = ".".join([str(loc) for loc in error.get("loc", [])])
        message = error.get("msg", "")

        errors.append({"location": location, "error": message})

    response_dto = BaseResponseDTO(message="Validation Error")

    if errors:
        response_dto.errors = errors

    app_logger.error(f"Validation Error: {errors}")

    return JSONResponse(
        status_code=400,
        content=response_dto.model_dump(),
    )


async def service_exception_handler(
    request: Request, exc: FormGenServiceException
) -> JSONResponse:
    app_logger.warning(f"Service Exception: {exc.kind} - {exc.message}")

    response_dto = BaseResponseDTO(message=exc.message)
    if exc.kind is not None:
        response_dto.errors = [{"kind": str(exc.kind)}]

    return JSONResponse(
        status_code=exc.status_code,
        content=response_dto.model_dump(),
    )
