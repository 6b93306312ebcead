from __future__ import annotations

import random
import socket
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Callable, Iterator, NamedTuple

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

LEAF_EXPIRES = 1770335999000
INTERMEDIATE_EXPIRES = 1924991999000
ROOT_EXPIRES = 1861919999000

INTERMEDIATE_SUBJECT = (
    "CN=Sectigo ECC Domain Validation Secure Server CA,O=Sectigo Limited,"
    "L=Salford,ST=Greater Manchester,C=GB"
)
ROOT_SUBJECT = (
    "CN=USERTrust ECC Certification Authority,O=The USERTRUST Network,"
    "L=Jersey City,ST=New Jersey,C=US"
)


class Issued(NamedTuple):
    cert: x509.Certificate
    key: ec.EllipticCurvePrivateKey

    @property
    def der(self) -> bytes:
        return self.cert.public_bytes(serialization.Encoding.DER)

    @property
    def pem(self) -> bytes:
        return self.cert.public_bytes(serialization.Encoding.PEM)


def ms_to_dt(ms: int) -> datetime:
    return datetime.fromtimestamp(ms // 1000, tz=timezone.utc)


def issue(
    subject: x509.Name,
    expires_ms: int,
    *,
    ca: bool | None = None,
    issuer: Issued | None = None,
) -> Issued:
    """
    Build a certificate for `subject`. `ca=None` leaves out basic constraints.
    Without `issuer` the certificate is self-signed.
    """
    key = ec.generate_private_key(ec.SECP256R1())
    builder = (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(issuer.cert.subject if issuer else subject)
        .public_key(key.public_key())
        .serial_number(random.getrandbits(64) | 1)
        .not_valid_before(datetime(2020, 1, 1, tzinfo=timezone.utc))
        .not_valid_after(ms_to_dt(expires_ms))
    )
    if ca is not None:
        builder = builder.add_extension(x509.BasicConstraints(ca=ca, path_length=None), critical=True)
    signer = issuer.key if issuer else key
    return Issued(builder.sign(signer, hashes.SHA256()), key)


def name(*pairs: tuple[x509.ObjectIdentifier, str]) -> x509.Name:
    return x509.Name([x509.NameAttribute(oid, value) for oid, value in pairs])


@pytest.fixture(scope="session")
def github_chain() -> list[Issued]:
    # attributes encoded country first, as real CA certificates do
    root = issue(
        name(
            (NameOID.COUNTRY_NAME, "US"),
            (NameOID.STATE_OR_PROVINCE_NAME, "New Jersey"),
            (NameOID.LOCALITY_NAME, "Jersey City"),
            (NameOID.ORGANIZATION_NAME, "The USERTRUST Network"),
            (NameOID.COMMON_NAME, "USERTrust ECC Certification Authority"),
        ),
        ROOT_EXPIRES,
        ca=True,
    )
    intermediate = issue(
        name(
            (NameOID.COUNTRY_NAME, "GB"),
            (NameOID.STATE_OR_PROVINCE_NAME, "Greater Manchester"),
            (NameOID.LOCALITY_NAME, "Salford"),
            (NameOID.ORGANIZATION_NAME, "Sectigo Limited"),
            (NameOID.COMMON_NAME, "Sectigo ECC Domain Validation Secure Server CA"),
        ),
        INTERMEDIATE_EXPIRES,
        ca=True,
        issuer=root,
    )
    leaf = issue(name((NameOID.COMMON_NAME, "github.com")), LEAF_EXPIRES, issuer=intermediate)
    return [leaf, intermediate, root]


@pytest.fixture(scope="session")
def github_ders(github_chain: list[Issued]) -> list[bytes]:
    return [c.der for c in github_chain]


@contextmanager
def serve_once(handler: Callable[[socket.socket], None]) -> Iterator[int]:
    """
    Listen on a loopback port and hand the first accepted connection to
    `handler` in a background thread. Yields the port.
    """
    lsock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    lsock.bind(("127.0.0.1", 0))
    lsock.listen(1)
    lsock.settimeout(5)

    def run() -> None:
        try:
            conn, _ = lsock.accept()
        except OSError:
            return
        with conn:
            conn.settimeout(5)
            try:
                handler(conn)
            except OSError:
                pass

    t = threading.Thread(target=run, daemon=True)
    t.start()
    try:
        yield lsock.getsockname()[1]
    finally:
        t.join(timeout=5)
        lsock.close()


def drain(conn: socket.socket) -> None:
    while conn.recv(4096):
        pass
