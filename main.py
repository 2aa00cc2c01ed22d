from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from config import settings
from config.database import Database
from core.exceptions import EventoriaError, FORM_ERROR_MESSAGE
from routes import (
    auth_routes,
    user_routes,
    category_routes,
    event_routes,
    approval_routes,
    request_routes,
    confirmed_event_routes,
    admin_routes,
    upload_routes
)
import uvicorn
import logging
import os

logger = logging.getLogger(__name__)

app = FastAPI(title="Eventoria API")

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include all routers
app.include_router(auth_routes.router, prefix="/api")
app.include_router(user_routes.router, prefix="/api")
app.include_router(category_routes.router, prefix="/api")
app.include_router(event_routes.router, prefix="/api")
app.include_router(approval_routes.router, prefix="/api")
app.include_router(request_routes.router, prefix="/api")
app.include_router(confirmed_event_routes.router, prefix="/api")
app.include_router(admin_routes.router, prefix="/api")
app.include_router(upload_routes.router, prefix="/api")

os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
app.mount(settings.MEDIA_URL, StaticFiles(directory=settings.UPLOAD_DIR), name="media")


@app.exception_handler(EventoriaError)
async def eventoria_error_handler(request: Request, exc: EventoriaError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "code": exc.error_code, "errors": exc.field_errors},
        headers=exc.headers,
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "code": f"http-{exc.status_code}", "errors": {}},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = {
        ".".join(str(part) for part in error["loc"] if part != "body"): error["msg"]
        for error in exc.errors()
    }
    return JSONResponse(
        status_code=422,
        content={"detail": FORM_ERROR_MESSAGE, "code": "validation-failed", "errors": errors},
    )


@app.on_event("startup")
async def startup_db_client():
    try:
        await Database.connect_db()
    except Exception as e:
        logger.error(f"Error during startup: {str(e)}")
        raise


@app.on_event("shutdown")
async def shutdown_db_client():
    try:
        await Database.close_db()
    except Exception as e:
        logger.error(f"Error during shutdown: {str(e)}")


@app.get("/")
def read_root():
    return {"message": "Welcome to Eventoria API"}


if __name__ == "__main__":
    port = int(os.environ.get("PORT", "10000"))
    uvicorn.run(app, host="0.0.0.0", port=port)
