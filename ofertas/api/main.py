"""FastAPI application for the offers marketplace."""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from ofertas.api import catalog, posts
from ofertas.errors import OfertasError

load_dotenv()
logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO"))
logger = logging.getLogger(__name__)

app = FastAPI(title="Ofertas API")
app.include_router(posts.router)
app.include_router(catalog.router)
app.include_router(catalog.commerce_router)


@app.exception_handler(OfertasError)
async def ofertas_error_handler(request: Request, exc: OfertasError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
    return JSONResponse({"detail": exc.message, "code": exc.code}, status_code=exc.status_code)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    errors = [{"loc": list(error["loc"]), "msg": error["msg"]} for error in exc.errors()]
    return JSONResponse({"detail": errors}, status_code=422)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"api": "ok"}
