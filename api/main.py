import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware

from core import db, settings
from core.envelope import install_exception_handlers, send_error
from core.log import configure_logging
from forms import router as forms_router
from reviews import router as reviews_router

logger = logging.getLogger(__name__)

_SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
}


@asynccontextmanager
async def lifespan(_: FastAPI):
    configure_logging()
    # Initialize the DB pool once per process.
    await db.init_pool()
    try:
        yield
    finally:
        await db.close_pool()


app = FastAPI(lifespan=lifespan)

# Public form endpoints; origins are configurable via CORS_ORIGINS.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

install_exception_handlers(app)


@app.middleware("http")
async def request_guard(request: Request, call_next):
    timeout_s = settings.request_timeout_s()
    try:
        response = await asyncio.wait_for(call_next(request), timeout=timeout_s)
    except asyncio.TimeoutError:
        logger.warning(
            "request_timeout method=%s path=%s timeout_s=%s",
            request.method,
            request.url.path,
            timeout_s,
        )
        response = send_error("Request timed out", code=status.HTTP_504_GATEWAY_TIMEOUT)
    for name, value in _SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    return response


app.include_router(forms_router.router, prefix="/form", tags=["forms"])
app.include_router(reviews_router.router, prefix="/form", tags=["reviews"])


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/")
def root() -> dict:
    return {"message": "form insights api"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=settings.port())
