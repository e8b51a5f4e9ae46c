from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import httpx
import logging

from lumi.core.config import settings
from lumi.core.llm import llm_client
from lumi.db.session import create_tables
from lumi.routes import chat, tasks, reflections, habits
from lumi.services.memory_store import memory_store
from lumi.services.scheduler import scheduler_service


# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"Starting {settings.assistant_name} API")
    logger.info(f"CORS allow_origins: {settings.cors_origins}")
    await create_tables()
    try:
        await memory_store.initialize_schema()
    except httpx.HTTPError as e:
        logger.error(f"Could not initialize memory schema: {e}")
    scheduler_service.start()
    yield
    # Shutdown
    scheduler_service.shutdown()
    await llm_client.close()
    await memory_store.close()
    logger.info("Shutting down API")


app = FastAPI(
    title=f"{settings.assistant_name} Assistant API",
    description=f"{settings.assistant_name}, a cheerful productivity assistant for tasks, memories, habits and reflections",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(chat.router, prefix="/chat", tags=["chat"])
app.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
app.include_router(reflections.router, prefix="/reflections", tags=["reflections"])
app.include_router(habits.router, prefix="/habits", tags=["habits"])


@app.get("/")
async def root():
    return {
        "message": f"Welcome to {settings.assistant_name} API",
        "version": "1.0.0"
    }


@app.get("/health")
async def health():
    return {"status": "healthy", "assistant": settings.assistant_name}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("lumi.main:app", host="0.0.0.0", port=8000)
