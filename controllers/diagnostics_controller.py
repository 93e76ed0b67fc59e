# ==========================
# Diagnostics Controller
# ==========================
import asyncio
import time
from fastapi import APIRouter
import logging
from config.settings import settings
from models.adapter_result import Success, describe_failure
from services.binance_alpha_service import BinanceAlphaService

logger = logging.getLogger(__name__)

class DiagnosticsController:
    """
    REST API Controller for upstream reachability checks
    """

    def __init__(self, binance=None):
        self.router = APIRouter(prefix="/api/diagnostics", tags=["diagnostics"])
        self.binance = binance or BinanceAlphaService()
        self._setup_routes()

    def _setup_routes(self):
        """Setup API routes"""
        self.router.add_api_route(
            "/upstream",
            self.check_upstream,
            methods=["GET"]
        )

    @staticmethod
    async def _check_upstream(call):
        started = time.perf_counter()
        result = await call
        elapsed_ms = int((time.perf_counter() - started) * 1000)
        if isinstance(result, Success):
            return {"ok": True, "latencyMs": elapsed_ms}
        return {"ok": False, "latencyMs": elapsed_ms, "error": describe_failure(result)}

    async def check_upstream(self):
        """
        Ping Binance Alpha and Binance spot without using the cache

        Returns:
            Per-upstream reachability, latency and the current configuration summary
        """
        alpha, spot = await asyncio.gather(
            self._check_upstream(self.binance.ping_alpha()),
            self._check_upstream(self.binance.ping_spot())
        )

        if not (alpha["ok"] and spot["ok"]):
            logger.warning(f"Upstream check failed: alpha={alpha}, spot={spot}")

        return {
            "status": "Success" if alpha["ok"] and spot["ok"] else "Degraded",
            "upstreams": {
                "binanceAlpha": alpha,
                "binanceSpot": spot
            },
            "config": settings.describe()
        }
