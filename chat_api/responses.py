from typing import Any

from fastapi import Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

GATEWAY_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    # DELETE is advertised for browser clients but no action implements it
    "Access-Control-Allow-Methods": "GET, POST, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
    "Cache-Control": "no-store, no-cache, must-revalidate, max-age=0",
    "Pragma": "no-cache",
    "Expires": "Sat, 01 Jan 2000 00:00:00 GMT",
}


def success(data: Any, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": True, "data": jsonable_encoder(data)},
    )


def failure(error: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": error})


def preflight() -> Response:
    return Response(status_code=status.HTTP_200_OK, media_type="application/json")


def apply_gateway_headers(response: Response) -> Response:
    for name, value in GATEWAY_HEADERS.items():
        response.headers[name] = value
    return response
