"""Custom exceptions for knowledge-explorer."""


class ExplorerError(Exception):
    """Base exception for explorer operations."""


class DataSourceUnavailableError(ExplorerError):
    """Raised when the blockchain node cannot be reached or answers badly."""


class RpcError(DataSourceUnavailableError):
    """Raised when the node returns an error envelope for a JSON-RPC call."""

    def __init__(self, message: str, code: int | None = None) -> None:
        super().__init__(message)
        self.code = code


class InvalidNodeIdError(ExplorerError, ValueError):
    """Raised when a composite node id cannot be decoded."""
