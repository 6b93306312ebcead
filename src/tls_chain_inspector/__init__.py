from __future__ import annotations

__version__ = "0.1.0"

from .analyze import is_leaf_expired, parse_certificate, parse_chain, render_subject
from .api import EXPORTS, chain, check_expired, inspect_chain, is_expired
from .errors import (
    ChainInspectionError,
    ConnectError,
    EmptyChainError,
    FetchTimeoutError,
    HandshakeError,
    InvalidTargetError,
    MalformedCertificateError,
    ResolutionError,
)
from .fetch import fetch_chain
from .models import DEFAULT_PORT, DEFAULT_TIMEOUT, CertificateRecord, Target

__all__ = [
    "__version__",
    "EXPORTS",
    "DEFAULT_PORT",
    "DEFAULT_TIMEOUT",
    "CertificateRecord",
    "Target",
    "ChainInspectionError",
    "ConnectError",
    "EmptyChainError",
    "FetchTimeoutError",
    "HandshakeError",
    "InvalidTargetError",
    "MalformedCertificateError",
    "ResolutionError",
    "chain",
    "check_expired",
    "fetch_chain",
    "inspect_chain",
    "is_expired",
    "is_leaf_expired",
    "parse_certificate",
    "parse_chain",
    "render_subject",
]
