from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn
from api import upload, status
from api.upload import UploadHandler
from core.config import COMPRESS_UPLOADS, HOST, PORT, SERVICE_NAME, UPLOAD_DIR
from core.logger import get_logger
from core.tasks_store import TaskRegistry, upload_tasks
from services.storage import ensure_upload_dir

logger = get_logger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application startup event triggered.")
    # Any OSError here aborts startup: never serve without a usable upload directory.
    upload_dir = ensure_upload_dir(app.state.upload_handler.upload_dir)
    app.state.upload_handler.upload_dir = upload_dir
    logger.info("Application startup complete.")
    yield
    logger.info("Application shutdown.")


def create_app(
    upload_dir=UPLOAD_DIR,
    registry: Optional[TaskRegistry] = None,
    compress_uploads: bool = COMPRESS_UPLOADS,
) -> FastAPI:
    app = FastAPI(title=SERVICE_NAME, lifespan=lifespan)
    app.state.upload_handler = UploadHandler(
        registry=registry if registry is not None else TaskRegistry(),
        upload_dir=upload_dir,
        compress=compress_uploads,
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    async def root():
        return {"message": SERVICE_NAME}

    # Include API routers
    app.include_router(upload.router)
    app.include_router(status.router)
    return app


app = create_app(registry=upload_tasks)

if __name__ == "__main__":
    logger.info(f"{SERVICE_NAME} running on http://{HOST}:{PORT}")
    uvicorn.run(app, host=HOST, port=PORT)
