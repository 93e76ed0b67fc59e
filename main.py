# ==========================
# Main Application - Alpha Token Dashboard API
# ==========================
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import locale
import logging
import socketio
from config.settings import settings
from controllers.token_controller import TokenController
from controllers.chain_controller import ChainController
from controllers.diagnostics_controller import DiagnosticsController
from services.aggregation_service import aggregation_service
from services.http_client import http_client
from services.scheduler_service import scheduler_service
from services.websocket_service import websocket_service

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Text sorting collates with the environment's locale
try:
    locale.setlocale(locale.LC_COLLATE, "")
except locale.Error as e:
    logger.warning(f"Locale from environment unavailable, collating in the C locale: {e}")

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifecycle manager
    """
    # Startup
    logger.info("="*70)
    logger.info(" ALPHA TOKEN DASHBOARD API")
    logger.info("="*70)
    logger.info("Starting application...")
    logger.info(f"Configuration: {settings.describe()}")

    if settings.token_broadcast_enabled:
        scheduler_service.inject_aggregation_service(aggregation_service)
        scheduler_service.inject_websocket_service(websocket_service)
        scheduler_service.start()
        logger.info(f"Scheduler: Token broadcast every {settings.token_broadcast_interval} seconds")
    else:
        logger.info("Scheduler: Token broadcast disabled")

    logger.info("="*70)
    logger.info(f" Server running on http://{settings.host}:{settings.port}")
    logger.info(f" WebSocket available at ws://{settings.host}:{settings.port}/socket.io/")
    logger.info(f" API Documentation at http://{settings.host}:{settings.port}/docs")
    logger.info("="*70)

    yield

    # Shutdown
    logger.info("Shutting down application...")
    scheduler_service.stop()
    await http_client.close_client()
    logger.info("Application shut down successfully")

# Create FastAPI application
app = FastAPI(
    title="Alpha Token Dashboard API",
    description="Binance Alpha tokens merged with DEX liquidity, holder analytics and Binance listing status",
    version="1.0.0",
    lifespan=lifespan
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount SocketIO application
sio_asgi_app = socketio.ASGIApp(
    websocket_service.sio,
    other_asgi_app=app,
    socketio_path='/socket.io'
)

# Register controllers
token_controller = TokenController()
chain_controller = ChainController()
diagnostics_controller = DiagnosticsController()

app.include_router(token_controller.router)
app.include_router(chain_controller.router)
app.include_router(diagnostics_controller.router)

# Health check endpoint
@app.get("/health")
async def health_check():
    """
    Health check endpoint
    """
    return {
        "status": "healthy",
        "service": "Alpha Token Dashboard API",
        "version": "1.0.0",
        "features": ["REST API", "WebSocket", "Scheduler"]
    }

# Root endpoint
@app.get("/")
async def root():
    """
    Root endpoint
    """
    return {
        "message": "Alpha Token Dashboard API",
        "version": "1.0.0",
        "documentation": "/docs",
        "health": "/health",
        "websocket": "/socket.io/",
        "endpoints": {
            "tokens": "/api/tokens",
            "token": "/api/token/{address}",
            "liquidity": "/api/liquidity/{address}",
            "chains": "/api/chains",
            "diagnostics": "/api/diagnostics/upstream",
            "scheduler": "/api/scheduler/status"
        }
    }

if __name__ == "__main__":
    import uvicorn

    # Run server with SocketIO integration
    uvicorn.run(
        sio_asgi_app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower()
    )
