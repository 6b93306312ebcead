"""
Operations exposed to an embedding host.

`is_expired` and `chain` are coroutines; the blocking connect and handshake run
in a worker thread, so awaiting them does not hold up other tasks. The
connector enforces its own timeout, which means the connection is released
even when the awaiting task gives up first.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any

from .analyze import is_leaf_expired, parse_chain
from .fetch import fetch_chain
from .models import DEFAULT_TIMEOUT, CertificateRecord, Target

log = logging.getLogger(__name__)


def inspect_chain(host: str, *, timeout: float = DEFAULT_TIMEOUT) -> list[CertificateRecord]:
    target = Target.parse(host)
    log.debug("inspecting chain of %s", target)
    return parse_chain(fetch_chain(target, timeout=timeout))


def check_expired(host: str, *, timeout: float = DEFAULT_TIMEOUT) -> bool:
    target = Target.parse(host)
    log.debug("checking leaf expiry of %s", target)
    raw = fetch_chain(target, timeout=timeout)
    # only the leaf matters here
    return is_leaf_expired(parse_chain(raw[:1]))


async def is_expired(host: str, *, timeout: float = DEFAULT_TIMEOUT) -> bool:
    return await asyncio.to_thread(check_expired, host, timeout=timeout)


async def chain(host: str, *, timeout: float = DEFAULT_TIMEOUT) -> list[dict[str, Any]]:
    records = await asyncio.to_thread(inspect_chain, host, timeout=timeout)
    return [r.to_dict() for r in records]


# Names under which a scripting host binds the two operations.
EXPORTS = {
    "isExpired": is_expired,
    "chain": chain,
}
