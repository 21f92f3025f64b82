import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from goalforge.database import init_db
from goalforge.routes.achievement_routes import router as achievement_router
from goalforge.routes.auth_routes import router as auth_router
from goalforge.routes.goal_routes import router as goal_router
from goalforge.routes.habit_routes import router as habit_router
from goalforge.routes.kpi_routes import router as kpi_router
from goalforge.routes.report_routes import router as report_router
from goalforge.routes.task_routes import router as task_router
from goalforge.services.llm_router import get_llm_router

logger = logging.getLogger(__name__)

# Initialize db configuration
try:
    init_db()
except Exception as e:
    logger.error(f"Database init skipped or failed: {e}")

app = FastAPI(title="GoalForge Career Tracker")


@app.get("/api/v1/health-check")
async def health():
    return {"status": "ok", "message": "Backend is alive!"}


@app.get("/api/v1/ai/status")
async def ai_status():
    """Configured AI providers and how many of their keys are still usable today."""
    return {"status": "success", "data": get_llm_router().get_provider_status()}


# Configure CORS for the web client
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

for router in (auth_router, goal_router, task_router, kpi_router, achievement_router, habit_router, report_router):
    app.include_router(router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("goalforge.main:app", host="0.0.0.0", port=8000, reload=True)
