"""
Global exception handler for the Livestock AMU API.
Provides centralized error handling for all API exceptions.
"""
import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from .exceptions import (
    DrugNotFoundException,
    TreatmentNotFoundException,
    ValidationException,
    ReferenceDataException,
    DynamoDBException,
    SheetsExportException
)

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI application."""

    @app.exception_handler(DrugNotFoundException)
    async def handle_drug_not_found(request: Request, exc: DrugNotFoundException):
        return JSONResponse(
            status_code=404,
            content={"error": "Not Found", "message": exc.message}
        )

    @app.exception_handler(TreatmentNotFoundException)
    async def handle_treatment_not_found(request: Request, exc: TreatmentNotFoundException):
        return JSONResponse(
            status_code=404,
            content={"error": "Not Found", "message": exc.message}
        )

    @app.exception_handler(ValidationException)
    async def handle_validation_error(request: Request, exc: ValidationException):
        return JSONResponse(
            status_code=400,
            content={"error": "Validation Error", "message": exc.message}
        )

    @app.exception_handler(ReferenceDataException)
    async def handle_reference_data_error(request: Request, exc: ReferenceDataException):
        logger.error("Reference data unavailable: %s", exc.message)
        return JSONResponse(
            status_code=500,
            content={"error": "Reference Data Error", "message": exc.message}
        )

    @app.exception_handler(DynamoDBException)
    async def handle_dynamodb_error(request: Request, exc: DynamoDBException):
        logger.error("Database error on %s: %s", request.url.path, exc.message)
        return JSONResponse(
            status_code=500,
            content={"error": "Database Error", "message": exc.message}
        )

    @app.exception_handler(SheetsExportException)
    async def handle_sheets_error(request: Request, exc: SheetsExportException):
        logger.error("Sheets export failed: %s", exc.message)
        return JSONResponse(
            status_code=502,
            content={"error": "Export Failed", "message": exc.message}
        )

    @app.exception_handler(Exception)
    async def handle_generic_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s", request.url.path)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal Server Error", "message": "An unexpected error occurred"}
        )
