import os
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import settings
from database import Database
from exceptions import SchoolPortalError
from logging_config import setup_logging

# --- IMPORT ROUTERS (APIs) ---
from routers import auth, dashboard, results, students, teachers, website
from routers import bulk_import

# --- IMPORT MODELS (registers every table on Base) ---
from models.admins import Admin
from models.results import ResultRecord
from models.students import Student
from models.teachers import Teacher
from models.website import Notice, GalleryItem, VisitorCount

setup_logging()
logger = logging.getLogger(__name__)


# ==========================================
#   STORAGE LIFECYCLE
# ==========================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    database = Database(settings.DATABASE_URL, echo=settings.DB_ECHO)
    database.connect()
    app.state.database = database
    logger.info("%s started", settings.APP_NAME)
    try:
        yield
    finally:
        database.close()


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)


# ==========================================
#   ERROR RESPONSES ({"success": false, ...})
# ==========================================
@app.exception_handler(SchoolPortalError)
async def portal_error_handler(request: Request, exc: SchoolPortalError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    # raw input is left out: it may hold NaN or Infinity, which JSON cannot carry
    errors = [
        {"loc": list(err["loc"]), "msg": err["msg"], "type": err["type"]}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content={"success": False, "code": "VALIDATION_ERROR", "message": "Invalid request", "details": errors},
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


# ==========================================
#   CORS
# ==========================================
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- UPLOADED FILES ---
os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")

# --- REGISTER ROUTERS ---
app.include_router(auth.router)
app.include_router(bulk_import.router)
app.include_router(results.router)
app.include_router(students.router)
app.include_router(teachers.router)
app.include_router(website.router)
app.include_router(dashboard.router)


@app.get("/", response_class=PlainTextResponse)
def root():
    return "Server Running with Student, Result, Teacher & Admin APIs"


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host=settings.SERVER_HOST, port=settings.SERVER_PORT)
