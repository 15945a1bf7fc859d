from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from travel_requests.core.errors import TravelRequestError, ValidationError


async def travel_request_error_handler(request: Request, exc: TravelRequestError) -> JSONResponse:
    content = {"message": exc.message, "code": exc.code.value}
    if isinstance(exc, ValidationError):
        content["errors"] = exc.errors
    return JSONResponse(status_code=exc.status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TravelRequestError, travel_request_error_handler)
