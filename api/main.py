"""
FastAPI main application for the Book Collection API.
"""

import json
from contextlib import asynccontextmanager
from typing import Any, Dict

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.config import config
from api.models import (
    BOOK_NOT_FOUND, INTERNAL_ERROR, INVALID_JSON, ROUTE_NOT_FOUND, STORAGE_ERROR,
    MessageResponse
)
from api.service import BookNotFoundError, BookService
from api.storage import JSONFileStorage, StorageError
from utilities.logger import get_logger, setup_logging

# Setup logging
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    setup_logging(
        log_level=config.log_level,
        log_format=config.log_format,
        log_file=config.log_file,
        debug=config.debug
    )

    storage = JSONFileStorage(config.data_file)
    app.state.book_service = BookService(storage, error_policy=config.storage_error_policy)
    logger.info(
        "Server is running",
        port=config.port,
        data_file=str(config.data_file),
        storage_error_policy=config.storage_error_policy
    )

    yield

    logger.info("Shutting down Book Collection API")


app = FastAPI(
    title=config.api_title,
    description=config.api_description,
    version=config.api_version,
    lifespan=lifespan,
    # "/books/" and "/books/1/" are unmatched routes, not redirects
    redirect_slashes=False,
    # Interactive docs only in debug; every other path outside /books is a 404
    docs_url="/docs" if config.debug else None,
    redoc_url="/redoc" if config.debug else None,
    openapi_url="/openapi.json" if config.debug else None
)


def get_book_service(request: Request) -> BookService:
    """Book service created at startup."""
    return request.app.state.book_service


def message_response(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=MessageResponse(message=message).model_dump(),
        headers=headers
    )


def _reject_constant(name: str):
    raise ValueError(f"Unsupported JSON constant: {name}")


async def read_json_object(request: Request) -> Dict[str, Any]:
    """Read the whole request body and parse it as a JSON object."""
    body = await request.body()
    try:
        payload = json.loads(body, parse_constant=_reject_constant)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_JSON)

    if not isinstance(payload, dict):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_JSON)
    return payload


# CORS: preflight for every path, headers on everything under /books
@app.middleware("http")
async def cors_middleware(request: Request, call_next):
    if request.method == "OPTIONS":
        return Response(status_code=status.HTTP_204_NO_CONTENT, headers=config.cors_headers())

    response = await call_next(request)
    if request.url.path.startswith("/books"):
        for name, value in config.cors_headers().items():
            response.headers[name] = value
    return response


# Exception handlers
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions; unknown paths and methods share one 404."""
    if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
        return message_response(status.HTTP_404_NOT_FOUND, ROUTE_NOT_FOUND)
    return message_response(exc.status_code, str(exc.detail), headers=exc.headers)


@app.exception_handler(BookNotFoundError)
async def book_not_found_handler(request: Request, exc: BookNotFoundError):
    return message_response(status.HTTP_404_NOT_FOUND, BOOK_NOT_FOUND)


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    """Storage failures that the configured policy does not mask."""
    logger.error("Storage failure", error=str(exc), path=request.url.path)
    return message_response(status.HTTP_500_INTERNAL_SERVER_ERROR, STORAGE_ERROR)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions."""
    logger.error("Unhandled exception", error=str(exc), path=request.url.path)
    return message_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR)


# Books endpoints
@app.get("/books", tags=["Books"])
async def list_books(service: BookService = Depends(get_book_service)):
    """Get every book in the collection."""
    return JSONResponse(content=await service.list_books())


@app.get("/books/{book_id:int}", tags=["Books"])
async def get_book(book_id: int, service: BookService = Depends(get_book_service)):
    """
    Get a single book by ID.

    - **book_id**: Book identifier (digits only)
    """
    return JSONResponse(content=await service.get_book(book_id))


@app.post("/books", status_code=status.HTTP_201_CREATED, tags=["Books"])
async def create_book(request: Request, service: BookService = Depends(get_book_service)):
    """Create a book from any JSON object; the server assigns its id."""
    payload = await read_json_object(request)
    book = await service.create_book(payload)
    return JSONResponse(status_code=status.HTTP_201_CREATED, content=book)


@app.put("/books/{book_id:int}", tags=["Books"])
async def update_book(
    book_id: int,
    request: Request,
    service: BookService = Depends(get_book_service)
):
    """
    Update a book with the fields present in the body.

    Fields not in the body are left unchanged.
    """
    payload = await read_json_object(request)
    return JSONResponse(content=await service.update_book(book_id, payload))


@app.delete("/books/{book_id:int}", status_code=status.HTTP_204_NO_CONTENT, tags=["Books"])
async def delete_book(book_id: int, service: BookService = Depends(get_book_service)):
    """Delete a book by ID."""
    await service.delete_book(book_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower()
    )
