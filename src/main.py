import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from src.routes import contacts, editor, navigation, suggestions
from src.conf.base import Base
from src.conf.config import settings
from src.conf.db import engine
from src.services.storage import StorageError

import contextlib

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
log = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.storage_backend == "sql":
        Base.metadata.create_all(bind=engine)
    yield

app = FastAPI(lifespan=lifespan)

app.include_router(contacts.router, prefix="/api")
app.include_router(suggestions.router, prefix="/api")
app.include_router(editor.router, prefix="/api")
app.include_router(navigation.router, prefix="/api")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    log.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=503, content={"detail": f"Storage unavailable: {exc}"})


@app.get("/")
def read_root():
    return {"message": "Kinship is running"}
