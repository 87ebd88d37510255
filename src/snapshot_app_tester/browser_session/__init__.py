"""Browser session domain exports."""

from .client_contracts import ClientSession, ClientValues, DispatchOutcome
from .playwright_session import ClientSessionError, PlaywrightClientSession

__all__ = [
    "ClientSession",
    "ClientValues",
    "DispatchOutcome",
    "ClientSessionError",
    "PlaywrightClientSession",
]
