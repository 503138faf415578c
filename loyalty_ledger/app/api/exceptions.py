from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..core.errors import LoyaltyPointsError
from ..services.validation import DEFAULT_ERROR_MESSAGE


def register_exception_handlers(app: FastAPI) -> None:
    # every domain rejection is a client error carrying a message
    @app.exception_handler(LoyaltyPointsError)
    async def loyalty_points_error_handler(
        request: Request, exc: LoyaltyPointsError
    ) -> JSONResponse:
        return JSONResponse(status_code=400, content={"message": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(status_code=400, content={"message": DEFAULT_ERROR_MESSAGE})
