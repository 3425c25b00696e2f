import logging
import os
from contextlib import asynccontextmanager
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, File, Form, Query, Request, UploadFile
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from openai import OpenAI

from . import schemas
from .config import Config, settings as default_settings
from .context import ContextAssembler
from .database import create_db_engine, init_db
from .errors import BorderWatchError
from .logger import setup_logger
from .pipeline import SubmissionPipeline
from .scenarios import list_scenarios, lookup
from .services.llm_service import ConversationGateway
from .services.upload_service import UploadStore
from .store import RecordStore
from .timeutils import local_date_range

logger = logging.getLogger("borderwatch.server")

router = APIRouter(prefix="/api")


# --- Dependencies ---
def get_store(request: Request) -> RecordStore:
    return request.app.state.store


def get_pipeline(request: Request) -> SubmissionPipeline:
    return request.app.state.pipeline


def get_gateway(request: Request) -> ConversationGateway:
    return request.app.state.gateway


# --- Routes ---
@router.get("/health")
def health_check():
    return {"status": "running"}


@router.get("/scenarios", response_model=schemas.ScenarioList)
def get_scenarios():
    return schemas.ScenarioList(
        scenarios=[schemas.ScenarioOption(value=s.key, label=s.label) for s in list_scenarios()]
    )


@router.post("/submit", response_model=schemas.SubmitResponse)
async def submit(
    scenario: Optional[str] = Form(None),
    photo: Optional[UploadFile] = File(None),
    pipeline: SubmissionPipeline = Depends(get_pipeline),
):
    result = await pipeline.submit(scenario, photo)
    return schemas.SubmitResponse(
        scenario=result.scenario,
        file_path=result.file_path,
        chatbot_message=result.acknowledgement,
        kpis=schemas.Kpis.from_snapshot(result.metrics),
    )


@router.get("/kpis", response_model=schemas.KpiResponse)
async def get_kpis(
    scenario: Optional[str] = None,
    pipeline: SubmissionPipeline = Depends(get_pipeline),
):
    metrics = await pipeline.metrics(scenario)
    return schemas.KpiResponse(scenario=scenario, kpis=schemas.Kpis.from_snapshot(metrics))


@router.post("/clear", response_model=schemas.ClearResponse)
async def clear(
    body: schemas.ClearRequest,
    pipeline: SubmissionPipeline = Depends(get_pipeline),
):
    result = await pipeline.clear(body.scenario, clear_notifications=body.clear_notifications)
    return schemas.ClearResponse(
        scenario=result.scenario,
        kpis=schemas.Kpis.from_snapshot(result.metrics),
        chatbot_message=result.message,
    )


@router.get("/notifications", response_model=schemas.NotificationList)
async def get_notifications(
    scenario: Optional[str] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
    limit: int = Query(100, ge=1, le=1000),
    store: RecordStore = Depends(get_store),
):
    if scenario:
        lookup(scenario)
    time_range = local_date_range(start, end) if (start or end) else None
    entries = await store.query_notifications(scenario=scenario, time_range=time_range, limit=limit)
    return schemas.NotificationList(
        items=[
            schemas.NotificationItem(created_at=e.created_at, scenario=e.scenario, message=e.message)
            for e in entries
        ]
    )


@router.post("/llm-chat", response_model=schemas.ChatResponse)
async def llm_chat(
    body: schemas.ChatRequest,
    gateway: ConversationGateway = Depends(get_gateway),
):
    history = [m.model_dump() for m in body.messages]
    result = await gateway.chat(history)
    return schemas.ChatResponse(reply=result.reply, scenario=result.scenario)


# --- Error handling ---
async def borderwatch_error_handler(request: Request, exc: BorderWatchError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.error(f"Validation Error: {exc.errors()}")
    return JSONResponse(
        status_code=422,
        content={"error": "Invalid request", "detail": jsonable_encoder(exc.errors())},
    )


async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unexpected error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"error": "Unexpected error"})


# --- Application factory ---
def create_app(
    settings: Optional[Config] = None,
    store: Optional[RecordStore] = None,
    uploads: Optional[UploadStore] = None,
    llm_client=None,
) -> FastAPI:
    settings = settings or default_settings
    setup_logger(settings)

    uploads = uploads or UploadStore(settings.UPLOAD_DIR)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app_store = store
        if app_store is None:
            engine = create_db_engine(settings.DATABASE_URL)
            init_db(engine)
            app_store = RecordStore(engine)

        client = llm_client
        if client is None and settings.OPENAI_API_KEY:
            client = OpenAI(api_key=settings.OPENAI_API_KEY)
        if client is None:
            logger.warning("OPENAI_API_KEY not set. Chat endpoint disabled.")

        app.state.store = app_store
        app.state.pipeline = SubmissionPipeline(app_store, uploads)
        app.state.gateway = ConversationGateway(
            client,
            ContextAssembler(app_store),
            model=settings.OPENAI_MODEL,
            temperature=settings.LLM_TEMPERATURE,
            timeout=settings.LLM_TIMEOUT,
            history_limit=settings.CHAT_HISTORY_LIMIT,
            debug_log_prompts=settings.DEBUG_LOG_LLM_PROMPTS,
        )
        logger.info("BorderWatch ready")

        yield

        logger.info("Shutting down...")
        app.state.gateway.close()
        app_store.close()

    app = FastAPI(title="BorderWatch Backend", version="1.0.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(BorderWatchError, borderwatch_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)

    app.include_router(router)

    app.mount("/uploads", StaticFiles(directory=uploads.upload_dir), name="uploads")
    if os.path.isdir(settings.PUBLIC_DIR):
        app.mount("/", StaticFiles(directory=settings.PUBLIC_DIR, html=True), name="public")

    return app


def run_server():
    """Run the BorderWatch server"""
    import uvicorn

    logger.info(f"Starting server on port {default_settings.PORT}")
    uvicorn.run(
        "borderwatch.main:create_app",
        factory=True,
        host=default_settings.HOST,
        port=default_settings.PORT,
        reload=False,
    )


if __name__ == "__main__":
    run_server()
