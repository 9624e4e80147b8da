__all__ = ["AddOrderResult", "ApiResponse", "KrakenApiError", "KrakenPrivateClient"]

from kraken_signer.exchange.kraken_private import (
    AddOrderResult,
    ApiResponse,
    KrakenApiError,
    KrakenPrivateClient,
)
