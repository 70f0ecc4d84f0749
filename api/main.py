"""
FastAPI Backend dla edytora ustawienia areny.

Endpoints:
    GET  /api/arenas                         - lista aren i layoutów
    GET  /api/characters                     - lista postaci z umiejętnościami
    POST /api/sessions                       - nowa sesja ustawiania
    GET  /api/sessions/{id}                  - stan planszy sesji
    POST /api/sessions/{id}/place|remove|move|swap|auto-place|clear
    GET  /api/sessions/{id}/targets          - cele aktywnych umiejętności
    GET  /api/sessions/{id}/pathfinding      - najbliższe cele i ścieżki A*
    GET  /api/sessions/{id}/export           - eksport stanu
    POST /api/sessions/{id}/import           - import stanu
    GET  /api/sessions/{id}/events           - log zdarzeń (opcjonalnie jednej postaci)
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import sys
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from api.routers import arenas, characters, sessions


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown events."""
    # Startup
    print("🚀 HexArena API starting...")
    print(f"📁 Data directory: {arenas.DATA_PATH}")
    yield
    # Shutdown
    sessions.SESSIONS.clear()
    print("👋 HexArena API shutting down...")


app = FastAPI(
    title="HexArena API",
    description="Backend API for hex arena team setup and skill targeting",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS - allow all origins (including file://)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(arenas.router, prefix="/api", tags=["Arenas"])
app.include_router(characters.router, prefix="/api", tags=["Characters"])
app.include_router(sessions.router, prefix="/api", tags=["Sessions"])


@app.get("/api/health")
async def health():
    """API health check."""
    return {"status": "healthy"}
