# ==========================
# Service Exceptions
# ==========================

class UpstreamError(Exception):
    """An upstream data provider could not be used"""

class TokenListUnavailableError(UpstreamError):
    """The base token list could not be fetched; nothing can be aggregated"""

class TokenNotFoundError(Exception):
    """No provider has any record for the requested token"""

    def __init__(self, chain_id: str, address: str):
        self.chain_id = chain_id
        self.address = address
        super().__init__(f"Token {address} not found on chain {chain_id}")
