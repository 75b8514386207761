"""Error taxonomy for chain derivations."""


class ChainLensError(Exception):
    """Base class for every error raised by chainlens."""

    default_message = "chainlens error"

    def __init__(self, message: str | None = None, details: dict | None = None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)


class UnsupportedChainError(ChainLensError):
    """Chain id is not in the catalog."""

    def __init__(self, chain_id: int):
        super().__init__(f"Chain ID {chain_id} is not supported", {"chain_id": chain_id})
        self.chain_id = chain_id


class ClientNotReadyError(ChainLensError):
    """A client was requested before ensure_chain() registered it."""

    def __init__(self, chain_id: int | None = None):
        if chain_id is None:
            message = "Decoder not initialized; call ensure_chain() first"
        else:
            message = f"Client for chain ID {chain_id} not initialized"
        super().__init__(message, {"chain_id": chain_id})
        self.chain_id = chain_id


class DecodeFailure(ChainLensError):
    """A single log or ABI return value could not be decoded."""

    default_message = "decode failure"


class QueryServiceFailure(ChainLensError):
    """Transport, HTTP or payload error from the query service."""

    default_message = "query service request failed"


class InvalidAddressError(ChainLensError):
    """Address or hash argument is not well-formed hex."""

    def __init__(self, value: str, kind: str = "address"):
        super().__init__(f"Invalid {kind}: {value!r}", {"value": value, "kind": kind})
