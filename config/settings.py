# ==========================
# Application Settings
# ==========================
from dotenv import load_dotenv
from typing import List
import os
import logging

load_dotenv()

logger = logging.getLogger(__name__)

def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == '':
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')

class Settings:
    """
    Runtime configuration read from the environment
    Holder-analytics credentials are optional: an empty key disables that provider
    """

    def __init__(self):
        self.birdeye_api_key = os.getenv('BIRDEYE_API_KEY', '')
        self.moralis_api_key = os.getenv('MORALIS_API_KEY', '')

        self.http_timeout = float(os.getenv('HTTP_TIMEOUT', 15))
        self.default_chain_id = os.getenv('DEFAULT_CHAIN_ID', '56')

        # DexScreener batch enrichment of the token list
        self.enrich_with_pools = _env_bool('ENRICH_WITH_POOLS', True)

        # Live token feed over Socket.IO
        self.token_broadcast_enabled = _env_bool('TOKEN_BROADCAST_ENABLED', True)
        self.token_broadcast_interval = int(os.getenv('TOKEN_BROADCAST_INTERVAL', 60))

        self.host = os.getenv('HOST', '0.0.0.0')
        self.port = int(os.getenv('PORT', 8000))
        self.log_level = os.getenv('LOG_LEVEL', 'INFO').upper()
        self.cors_origins: List[str] = [
            origin.strip()
            for origin in os.getenv('CORS_ORIGINS', '*').split(',')
            if origin.strip()
        ]

    def describe(self) -> dict:
        """Configuration summary safe to log (no credentials)"""
        return {
            'birdeye_configured': bool(self.birdeye_api_key),
            'moralis_configured': bool(self.moralis_api_key),
            'http_timeout': self.http_timeout,
            'default_chain_id': self.default_chain_id,
            'enrich_with_pools': self.enrich_with_pools,
            'token_broadcast_enabled': self.token_broadcast_enabled,
            'token_broadcast_interval': self.token_broadcast_interval,
        }

# Singleton instance
settings = Settings()
