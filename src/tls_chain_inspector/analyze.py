from __future__ import annotations

from typing import Sequence

from cryptography import x509
from cryptography.x509.oid import NameOID

from . import utils
from .errors import EmptyChainError, MalformedCertificateError
from .models import CertificateRecord

# Subject components are rendered in this order regardless of how the
# certificate encodes them; anything else follows in encoded order.
_SUBJECT_ORDER = (
    NameOID.COMMON_NAME,
    NameOID.ORGANIZATION_NAME,
    NameOID.ORGANIZATIONAL_UNIT_NAME,
    NameOID.LOCALITY_NAME,
    NameOID.STATE_OR_PROVINCE_NAME,
    NameOID.COUNTRY_NAME,
)


def render_subject(name: x509.Name) -> str:
    """
    `CN=...,O=...,OU=...,L=...,ST=...,C=...` followed by the remaining
    attributes. Labels and value escaping follow RFC 4514; empty values are
    left out.
    """
    attrs = [a for a in name if a.value]
    ordered: list[x509.NameAttribute] = []
    for oid in _SUBJECT_ORDER:
        ordered.extend(a for a in attrs if a.oid == oid)
    ordered.extend(a for a in attrs if a.oid not in _SUBJECT_ORDER)
    return ",".join(a.rfc4514_string() for a in ordered)


def _is_ca(cert: x509.Certificate) -> bool:
    try:
        bc = cert.extensions.get_extension_for_class(x509.BasicConstraints).value
    except x509.ExtensionNotFound:
        return False
    return bool(bc.ca)


def parse_certificate(der: bytes) -> CertificateRecord:
    try:
        cert = x509.load_der_x509_certificate(der)
        return CertificateRecord(
            subject=render_subject(cert.subject),
            expires=utils.dt_to_epoch_ms(cert.not_valid_after_utc),
            isca=_is_ca(cert),
        )
    except (ValueError, x509.DuplicateExtension, x509.InvalidVersion) as e:
        raise MalformedCertificateError(f"cannot decode certificate: {e}") from e


def parse_chain(raw: Sequence[bytes]) -> list[CertificateRecord]:
    """
    One record per DER blob, same order. A single undecodable blob fails the
    whole chain.
    """
    if not raw:
        raise EmptyChainError("certificate chain is empty")

    records: list[CertificateRecord] = []
    for idx, der in enumerate(raw):
        try:
            records.append(parse_certificate(der))
        except MalformedCertificateError as e:
            raise MalformedCertificateError(f"certificate #{idx} in chain: {e.message}") from e
    return records


def is_leaf_expired(records: Sequence[CertificateRecord], now_ms: int | None = None) -> bool:
    if not records:
        raise EmptyChainError("no certificates to check")
    current = utils.now_ms() if now_ms is None else now_ms
    return current > records[0].expires
