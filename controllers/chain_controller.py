# ==========================
# Chain Controller
# ==========================
from fastapi import APIRouter
import logging
from config.chains import get_supported_chains
from services.aggregation_service import aggregation_service
from services.exceptions import TokenListUnavailableError

logger = logging.getLogger(__name__)

class ChainController:
    """
    REST API Controller for the supported chain registry
    """

    def __init__(self, service=None):
        self.router = APIRouter(prefix="/api/chains", tags=["chains"])
        self.service = service or aggregation_service
        self._setup_routes()

    def _setup_routes(self):
        """Setup API routes"""
        self.router.add_api_route(
            "",
            self.get_chains,
            methods=["GET"]
        )

    async def get_chains(self):
        """
        Get supported chains with their token counts

        Counts are empty when the token list is unavailable; the chain
        records are always returned.
        """
        counts = {}
        try:
            counts = await self.service.get_token_counts()
        except TokenListUnavailableError as e:
            logger.warning(f"Token counts unavailable: {e}")
        except Exception as e:
            logger.error(f"Error counting tokens by chain: {e}")

        chains = []
        for chain in get_supported_chains():
            record = chain.model_dump(by_alias=True)
            record["tokenCount"] = counts.get(chain.id, 0)
            chains.append(record)

        return {
            "chains": chains,
            "counts": counts,
            "totalCount": sum(counts.values())
        }
