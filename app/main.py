from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.api.admin import router as admin_router
from app.api.referrals import router as referrals_router
from app.api.vouchers import router as vouchers_router
from app.core.config import settings
from app.core.errors import RewardsError
from app.core.logging import setup_logging
from app.stores import build_store

app = FastAPI(title="Rewards Backend")


@app.middleware("http")
async def bind_request_context(request: Request, call_next):
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(method=request.method, path=request.url.path)
    return await call_next(request)


@app.exception_handler(RewardsError)
async def rewards_error_handler(request: Request, exc: RewardsError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
    )


@app.on_event("startup")
async def on_startup() -> None:
    setup_logging()
    store = build_store(settings)
    await store.initialize()
    if settings.DB_RESET_ON_STARTUP:
        await store.reset()
    app.state.store = store


@app.on_event("shutdown")
async def on_shutdown() -> None:
    store = getattr(app.state, "store", None)
    if store is not None:
        await store.close()


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}


app.include_router(vouchers_router)
app.include_router(referrals_router)
app.include_router(admin_router)
