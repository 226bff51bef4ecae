import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.config import settings
from core.database import engine, init_models
from models.base import Base
from services.errors import DomainError

from routers.account import router as account_router
from routers.users import router as users_router
from routers.likes import router as likes_router
from routers.messages import router as messages_router
from routers.health import router as health_router

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger("uvicorn.error")


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_models(Base.metadata)
    logger.info("Database schema ready")

    yield

    # Закрываем все соединения пула
    await engine.dispose()


app = FastAPI(
    title="Heartline Backend",
    version="0.1.0",
    description="Backend для приложения знакомств Heartline",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Pagination"],
)


@app.middleware("http")
async def log_request_time(request: Request, call_next):
    start_time = time.perf_counter()
    response = await call_next(request)
    process_time = (time.perf_counter() - start_time) * 1000
    logger.info(
        f"{request.method} {request.url.path} completed in {process_time:.2f} ms"
    )
    return response


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


app.include_router(account_router)
app.include_router(users_router)
app.include_router(likes_router)
app.include_router(messages_router)
app.include_router(health_router)


@app.get("/")
async def root():
    return {"message": "Heartline Backend"}
