import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.config import get_cors_origins, get_log_level, get_port
from core.database import engine, Base
from services.geocoding_service import GeocodingService
from services.storage_service import StorageService

# Import all models to register them
from models.incident import Incident  # noqa: F401

# Import routers
from api import incidents, system

logging.basicConfig(
    level=get_log_level(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
log = logging.getLogger(__name__)

# Create database tables
Base.metadata.create_all(bind=engine)

# Initialize FastAPI app
app = FastAPI(
    title="Trail Incident Reporting API",
    description="Incident reports with photo upload and GPS-aware location resolution",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(incidents.router, prefix="/api")
app.include_router(system.router, prefix="/api")


@app.on_event("startup")
def start_gateways() -> None:
    app.state.storage = StorageService.from_env()
    app.state.geocoder = GeocodingService.from_env()
    log.info("Storage bucket %s ready; geocoder %s", app.state.storage.bucket, app.state.geocoder.url)


@app.on_event("shutdown")
def stop_gateways() -> None:
    geocoder = getattr(app.state, "geocoder", None)
    if geocoder:
        geocoder.close()


@app.middleware("http")
async def log_requests(request: Request, call_next):
    log.info("%s %s", request.method, request.url.path)
    return await call_next(request)


# ==================== ERROR BODIES ====================
@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)}, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    log.error("Unhandled error on %s %s: %s", request.method, request.url.path, exc, exc_info=True)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


@app.get("/", response_class=PlainTextResponse)
def home():
    return "Trail Incident Reporting Backend Running."


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=get_port())
