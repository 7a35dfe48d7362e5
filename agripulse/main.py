# agripulse/main.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
# Import routers
from agripulse.api.endpoints import sessions as sessions_router
from agripulse.api.endpoints import advisor as advisor_router
from agripulse.api.endpoints import diagnostics as diagnostics_router
from agripulse.api.endpoints import hybrid as hybrid_router
from agripulse.services.gemini_client import configure_gemini
from agripulse.services.screens import session_store
# Import settings
from agripulse.core.config import settings
import logging

# --- Configure Logging ---
logging.basicConfig(level=settings.LOG_LEVEL.upper(), format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logging.getLogger('httpx').setLevel(logging.WARNING)
logging.getLogger('httpcore').setLevel(logging.WARNING)
logging.getLogger('multipart').setLevel(logging.WARNING)
logging.getLogger('uvicorn.access').setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

# --- FastAPI App Instantiation ---
app = FastAPI(
    title="AgriPulse",
    version="0.1.0"
)

# --- Startup Event (Configures Gemini) ---
@app.on_event("startup")
async def startup_event():
    logger.info("FastAPI application startup...")
    try:
        configure_gemini()
    except Exception as e:
        # Advisor calls will surface as "unavailable" until the key is fixed
        logger.error(f"Gemini configuration failed: {e}", exc_info=True)

# --- Shutdown Event ---
@app.on_event("shutdown")
async def shutdown_event():
    logger.info(f"FastAPI application shutting down, dropping {len(session_store)} session(s)...")

# --- CORS Configuration ---
origins = settings.ALLOWED_ORIGINS.split(",") if settings.ALLOWED_ORIGINS else ["*"]
logger.info(f"Configuring CORS for origins: {origins}")
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- API Routers ---
logger.info("Including API routers...")
app.include_router(sessions_router.router, prefix="/api/v1/sessions", tags=["Sessions"])
app.include_router(advisor_router.router, prefix="/api/v1/sessions", tags=["Advisor"])
app.include_router(diagnostics_router.router, prefix="/api/v1/sessions", tags=["Diagnostics"])
app.include_router(hybrid_router.router, prefix="/api/v1/sessions", tags=["Hybrid Lab"])
logger.info("Included screen routers at /api/v1/sessions")

# --- Root Endpoint ---
@app.get("/")
def read_root():
    return {
        "message": "Welcome to the AgriPulse farm advisory API",
        "model": settings.GEMINI_MODEL_NAME,
    }

# --- Health Check Endpoint ---
@app.get("/health")
def health_check():
    return {
        "status": "ok",
        "gemini_configured": bool(settings.GEMINI_API_KEY),
        "active_sessions": len(session_store),
    }

if __name__ == "__main__":
    import uvicorn
    logger.info("Starting Uvicorn server directly...")
    uvicorn.run(app, host="0.0.0.0", port=8000)
