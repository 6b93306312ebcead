from __future__ import annotations

from typing import Any


class ChainInspectionError(Exception):
    """
    Base for every failure raised while inspecting a host's chain.
    `kind` is the stable name a host boundary reports to its callers.
    """
    kind = "ChainInspectionError"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "message": self.message}


class InvalidTargetError(ChainInspectionError):
    kind = "InvalidTargetError"


# Network layer

class ResolutionError(ChainInspectionError):
    kind = "ResolutionError"


class ConnectError(ChainInspectionError):
    kind = "ConnectionError"


class HandshakeError(ChainInspectionError):
    kind = "HandshakeError"


class FetchTimeoutError(ChainInspectionError):
    kind = "TimeoutError"


# Parsing layer

class MalformedCertificateError(ChainInspectionError):
    kind = "MalformedCertificateError"


class EmptyChainError(ChainInspectionError):
    kind = "EmptyChainError"
