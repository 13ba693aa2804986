
# app/main.py

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging

# Импортируем роутеры (production way)
from app.api.activity import router as activity_router
from app.api.archive import router as archive_router
from app.api.attachment import router as attachment_router
from app.api.comment import router as comment_router
from app.api.metrics import router as metrics_router
from app.api.subtask import router as subtask_router
from app.api.task import router as task_router
from app.api.ws import router as ws_router

from app.core.settings import settings
from app.core.exceptions import NotFoundError, ValidationError, VersionConflict, StoreError
from app.initial_data import init_db
from app.services.broadcast import BroadcastHub

# Логирование
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger("OCB.App")

app = FastAPI(
    title="OpenClaw Board API",
    version="1.0.0",
    description="Kanban board shared by a human and an AI agent, with live WebSocket updates",
)

# Хаб рассылки живёт вместе с приложением, хендлеры получают его через get_hub
app.state.hub = BroadcastHub()

# Middlewares
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Роутеры
app.include_router(task_router)
app.include_router(comment_router)
app.include_router(subtask_router)
app.include_router(attachment_router)
app.include_router(activity_router)
app.include_router(archive_router)
app.include_router(metrics_router)
app.include_router(ws_router)

# Health check & root
@app.get("/", tags=["Health"])
def root():
    return {"status": "OpenClaw Board API is running!"}

@app.get("/health", tags=["Health"])
def health():
    return {"ok": True, "subscribers": app.state.hub.subscriber_count}

@app.on_event("startup")
async def startup_event():
    logger.info(f"Starting OpenClaw Board API ({settings.ENV})")
    init_db()

@app.on_event("shutdown")
async def shutdown_event():
    await app.state.hub.shutdown()
    logger.info("Stopping OpenClaw Board API")

# Запасные обработчики: роуты сами маппят свои ошибки, сюда попадает то, что проскочило

@app.exception_handler(NotFoundError)
async def not_found_exception_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})

@app.exception_handler(ValidationError)
async def validation_exception_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})

@app.exception_handler(VersionConflict)
async def version_conflict_exception_handler(request: Request, exc: VersionConflict):
    return JSONResponse(status_code=409, content={"detail": str(exc)})

@app.exception_handler(StoreError)
async def store_exception_handler(request: Request, exc: StoreError):
    logger.error(f"Unhandled store error on {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": str(exc)})

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )
