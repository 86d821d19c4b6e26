import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .logging_config import setup_logging
from .settings import settings
from .routers import health, quiz

setup_logging(settings.environment, settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="Chinese Reading Quiz API")
app.add_middleware(
	CORSMiddleware,
	allow_origins=settings.cors_origins,
	allow_methods=["GET", "POST"],
	allow_headers=["*"],
)
app.include_router(health.router)
app.include_router(quiz.router)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
	# Absent, empty, zero, wrong-typed or out-of-range fields all read as "missing" to the caller
	logger.info("Rejected generation request: %s", exc.errors())
	return JSONResponse(status_code=400, content={"error": quiz.MISSING_PARAMETERS})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
	return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)}, headers=exc.headers)


def run() -> None:
	import uvicorn

	uvicorn.run("zhquiz.main:app", host=settings.host, port=settings.port)
