import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from runclub.api.runs import router as runs_router
from runclub.api.users import router as users_router
from runclub.core.errors import RunClubError, RunValidationError
from runclub.core.logging import setup_logging
from runclub.db import Base, engine
from runclub.models.user import User  # noqa: F401  (import ensures table is registered)
from runclub.models.run import Run  # noqa: F401


setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="RunClub")

# Allow CORS for local frontend
origins = ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Create DB tables (users, runs) on startup
Base.metadata.create_all(bind=engine)

app.include_router(runs_router)
app.include_router(users_router)


@app.exception_handler(RunClubError)
async def runclub_error_handler(request: Request, exc: RunClubError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    else:
        logger.info(
            "%s %s rejected (%s): %s",
            request.method, request.url.path, exc.error_code, exc.detail,
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "error_code": exc.error_code},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # Same body shape as domain errors: one readable detail plus a code
    problems = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        problems.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    detail = "; ".join(problems) or "Invalid request"
    logger.info("%s %s rejected: %s", request.method, request.url.path, detail)
    return JSONResponse(
        status_code=RunValidationError.status_code,
        content={"detail": detail, "error_code": RunValidationError.error_code},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.get("/")
def root():
    return {"message": "RunClub backend is running"}
