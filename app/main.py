from fastapi import FastAPI, Request
from loguru import logger

from app.api.calendar import router as calendar_router
from app.api.codes import router as codes_router
from app.api.me import router as me_router
from app.api.metrics import router as metrics_router
from app.config.settings import settings
from app.core.logger import request_context, setup_logger

REQUEST_ID_HEADER = "X-Request-ID"

setup_logger(level=settings.log_level, log_file=settings.log_file or None)

app = FastAPI(title="Network Performance Dashboard API", version="1.0.0")


@app.middleware("http")
async def bind_request_id(request: Request, call_next):
    # Reuse a caller-supplied id so gateway and API logs correlate
    with request_context(request.headers.get(REQUEST_ID_HEADER)) as rid:
        logger.debug(f"{request.method} {request.url.path}")
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        return response


app.include_router(calendar_router)
app.include_router(codes_router)
app.include_router(me_router)
app.include_router(metrics_router)

logger.info("API routers registered: calendar, codes, me, metrics")


@app.get("/health")
def health():
    return {"status": "ok"}
