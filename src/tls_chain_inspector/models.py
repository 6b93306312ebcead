from __future__ import annotations

import ipaddress
from dataclasses import dataclass
from typing import Any

from .errors import InvalidTargetError

DEFAULT_PORT = 443
DEFAULT_TIMEOUT = 10.0


@dataclass(frozen=True)
class Target:
    """
    Host to inspect, normalized to `host:port`.
    """
    host: str
    port: int = DEFAULT_PORT

    @classmethod
    def parse(cls, text: str, default_port: int = DEFAULT_PORT) -> Target:
        """
        Accepts `host`, `host:port`, `[v6addr]` or `[v6addr]:port`.
        A bare IPv6 literal (more than one colon, no brackets) is taken as a host.
        """
        text = (text or "").strip()
        if not text:
            raise InvalidTargetError("target is required")

        port_s: str | None = None
        if text.startswith("["):
            end = text.find("]")
            if end < 0:
                raise InvalidTargetError(f"unterminated '[' in target {text!r}")
            host = text[1:end]
            rest = text[end + 1:]
            if rest:
                if not rest.startswith(":"):
                    raise InvalidTargetError(f"unexpected text after ']' in target {text!r}")
                port_s = rest[1:]
        elif text.count(":") == 1:
            host, port_s = text.split(":", 1)
        else:
            host = text

        host = host.strip()
        if not host:
            raise InvalidTargetError("host is empty")

        if port_s is None:
            return cls(host=host, port=default_port)

        port_s = port_s.strip()
        if not port_s.isdigit():
            raise InvalidTargetError("port must be a number")
        port = int(port_s)
        if not (1 <= port <= 65535):
            raise InvalidTargetError("port out of range")
        return cls(host=host, port=port)

    @property
    def is_ip(self) -> bool:
        try:
            ipaddress.ip_address(self.host)
        except ValueError:
            return False
        return True

    def __str__(self) -> str:
        if ":" in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"


@dataclass(frozen=True)
class CertificateRecord:
    """
    Normalized facts about one presented certificate.
    """
    subject: str
    expires: int  # not-valid-after, epoch milliseconds UTC
    isca: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"subject": self.subject, "expires": self.expires, "isca": self.isca}
