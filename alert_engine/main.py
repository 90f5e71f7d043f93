# alert_engine/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI

from alert_engine.alerts.setup import init_evaluation_service
from alert_engine.api.alerts import router as alerts_router
from alert_engine.api.health import router as health_router
from alert_engine.health.setup import init_health_monitor


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    # Startup
    init_health_monitor()
    init_evaluation_service()
    yield
    # Shutdown


app = FastAPI(title="Alert Rule Evaluation Engine", version="0.1.0", lifespan=lifespan)

app.include_router(alerts_router)
app.include_router(health_router)


@app.get("/health")
async def health():
    return {"status": "healthy"}
