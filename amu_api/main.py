"""
Main FastAPI application entry point.
Configures and initializes the Livestock AMU API.
"""
import logging
from fastapi import FastAPI, Request
from mangum import Mangum
from amu_api.core.config import settings
from amu_api.core.exception_handler import register_exception_handlers
from amu_api.core.logging_config import configure_logging
from amu_api.api.routes import health_routes, withdrawal_routes, treatment_routes

configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

# Create FastAPI application
app = FastAPI(
    title=settings.api_title,
    version=settings.api_version,
    description="Antimicrobial usage records and withdrawal-period monitoring for livestock",
    root_path=f"/{settings.environment}"
)

# Register exception handlers
register_exception_handlers(app)

# Register routes
app.include_router(health_routes.router)
app.include_router(withdrawal_routes.router)
app.include_router(treatment_routes.router)

# Middleware to log request paths
@app.middleware("http")
async def log_request(request: Request, call_next):
    logger.info("Request path: %s", request.url.path)
    response = await call_next(request)
    return response

# Lambda handler for AWS
handler = Mangum(app, lifespan="off")


# For local development
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
