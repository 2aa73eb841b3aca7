import logging
import sys
import time
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from .articles.router import router as articles_router
from .auth.router import router as auth_router
from .categories.router import router as categories_router
from .comments.router import router as comments_router
from .config import settings
from .database import RecordStore
from .error_handlers import register_error_handlers

log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
logging.basicConfig(
    level=log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)

logger = logging.getLogger(__name__)
logger.info(f"Application starting with log level: {settings.LOG_LEVEL}")

# the static mount needs the directory to exist at import time
Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.store = await RecordStore(settings.DB_FILE).load()
    logger.info(f"Serving uploads from {Path(settings.UPLOAD_DIR).resolve()} at {settings.PUBLIC_URL_PATH}")
    yield


app = FastAPI(
    title="Blog API",
    version="1.0.0",
    description="Blog backend backed by a JSON file",
    docs_url="/api-docs",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    elapsed_ms = (time.time() - start_time) * 1000
    logger.info(f"{request.method} {request.url.path} {response.status_code} {elapsed_ms:.1f}ms")
    return response


register_error_handlers(app)

api_router = APIRouter(prefix="/api")
api_router.include_router(categories_router)
api_router.include_router(articles_router)
api_router.include_router(comments_router)
api_router.include_router(auth_router)
app.include_router(api_router)

app.mount(settings.PUBLIC_URL_PATH, StaticFiles(directory=settings.UPLOAD_DIR), name="public")


@app.get("/", tags=["health"])
async def root(request: Request):
    base_url = str(request.base_url).rstrip("/")
    return {
        "message": "Welcome to the Blog API",
        "documentation": f"{base_url}{app.docs_url}",
    }


@app.get("/health", tags=["health"])
async def health():
    return {"status": "ok"}
