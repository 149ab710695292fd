from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from ..core.logging import setup_logging
from ..core.config import settings
from .routers import health, invoice

logger = setup_logging()
app = FastAPI(title="Portal Invoice Extractor")


# Add custom exception handler for validation errors
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.error(f"Validation error: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": jsonable_errors(exc), "body": str(await request.body())[:2000]},
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    # Validation errors can carry raw bytes/exceptions in "input"/"ctx"
    return [
        {key: (value if key in ("type", "loc", "msg") else str(value)) for key, value in error.items()}
        for error in exc.errors()
    ]


# Configure CORS to allow portal frontend access
# Example: CORS_ORIGINS=http://localhost:3000,https://portal.example.com
allowed_origins = [origin.strip() for origin in settings.cors_origins.split(",")]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(invoice.router)
