"""Error taxonomy shared by the wallet session and the operation coordinator."""

from __future__ import annotations


class GardenError(Exception):
    """Base class for recoverable console failures."""


class WalletUnavailable(GardenError):
    """No compatible wallet extension is installed or enabled."""

    def __init__(self, message: str = "No compatible wallet extension found") -> None:
        super().__init__(message)


class AuthorizationDenied(GardenError):
    """The user or the wallet rejected the authorization request."""


class ChainConnectionError(GardenError):
    """RPC or network failure while connecting or submitting."""


class SubmissionError(GardenError):
    """The chain rejected the transaction or failed to include it."""


class NotConnected(GardenError):
    """An operation needed a connected wallet session."""

    def __init__(self, message: str = "Connect a wallet first") -> None:
        super().__init__(message)
