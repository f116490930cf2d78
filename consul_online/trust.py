"""
Transport selection and TLS trust material.

resolve_base_url() picks http or https from the address and the --tls flag.
build_trust_material() turns the CA / client certificate options into an
immutable TrustMaterial, validating everything eagerly so that a broken
certificate aborts before the first request. TrustMaterial.ssl_context()
builds the ssl.SSLContext handed to the HTTP adapter.

With skip_verify the CA certificate option is never read: any server
certificate is accepted and a configured CA has no effect.
"""

import ssl
from dataclasses import dataclass, field
from typing import Optional, Tuple

import certifi
from cryptography import x509
from cryptography.hazmat.primitives import serialization

from .config import log
from .errors import (
    UnixSocketUnsupported,
    ReadCaCert, ParseCaCert, AddCaCert, AddClientCert,
    MissingClientKey, MissingClientCert,
    ReadClientKey, ParseClientKey, ReadClientCert, ParseClientCert,
)


# ─── Address resolution ──────────────────────────────────────────

def resolve_base_url(config):
    """
    Return (base_url, use_tls) for config.http_addr.

      http://h:p   → http, or https (with a warning) when --tls is set
      https://h:p  → https
      unix:...     → UnixSocketUnsupported
      h:p          → https with --tls, http otherwise
    """
    addr = config.http_addr.strip().rstrip("/")

    if addr.startswith("http://"):
        if config.http_ssl:
            log.warning(
                "address (%s) indicates http transport, but CONSUL_HTTP_SSL=true, "
                "using ssl transport", config.http_addr,
            )
            return "https://" + addr[len("http://"):], True
        return addr, False
    if addr.startswith("https://"):
        return addr, True
    if addr.startswith("unix:"):
        raise UnixSocketUnsupported(config.http_addr)
    if config.http_ssl:
        return "https://" + addr, True
    return "http://" + addr, False


# ─── Trust material ──────────────────────────────────────────────

@dataclass(frozen=True)
class ClientIdentity:
    cert_path: str
    key_path: str
    certificate: x509.Certificate = field(repr=False)


@dataclass(frozen=True)
class TrustMaterial:
    """
    Either insecure (no certificate validation) or verified against the
    default roots plus any configured CA certificates. A client identity
    may be presented in both modes.
    """

    insecure: bool = False
    ca_certificates: Tuple[x509.Certificate, ...] = field(default=(), repr=False)
    client_identity: Optional[ClientIdentity] = None

    def ssl_context(self):
        """Build the client-side SSLContext for this material."""
        if self.insecure:
            log.warning("skipping certificate verification (unsafe!)")
            ctx = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
            ctx.check_hostname = False
            ctx.verify_mode = ssl.CERT_NONE
        else:
            ctx = ssl.create_default_context(cafile=certifi.where())
            for cert in self.ca_certificates:
                pem = cert.public_bytes(serialization.Encoding.PEM).decode("ascii")
                try:
                    ctx.load_verify_locations(cadata=pem)
                except ssl.SSLError as e:
                    raise AddCaCert(e) from e

        if self.client_identity is not None:
            log.debug(
                "presenting client certificate %s",
                self.client_identity.certificate.subject.rfc4514_string(),
            )
            try:
                ctx.load_cert_chain(
                    certfile=self.client_identity.cert_path,
                    keyfile=self.client_identity.key_path,
                )
            except (ssl.SSLError, OSError) as e:
                raise AddClientCert(e) from e
        return ctx


def _read_bytes(path, error_cls):
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise error_cls(path, e) from e


def load_ca_certificates(path):
    """Read and parse every PEM certificate in the CA file."""
    data = _read_bytes(path, ReadCaCert)
    try:
        certs = x509.load_pem_x509_certificates(data)
    except ValueError as e:
        raise ParseCaCert(path, e) from e
    log.info("read ca cert from: %s (%d certificate(s))", path, len(certs))
    return tuple(certs)


def load_client_cert(path):
    data = _read_bytes(path, ReadClientCert)
    try:
        return x509.load_pem_x509_certificate(data)
    except ValueError as e:
        raise ParseClientCert(path, e) from e


def load_client_key(path):
    """Parse an unencrypted PEM private key. Only validated, never kept."""
    data = _read_bytes(path, ReadClientKey)
    try:
        return serialization.load_pem_private_key(data, password=None)
    except (ValueError, TypeError) as e:
        raise ParseClientKey(path, e) from e


def check_client_pair(config):
    """Both or neither of client_cert / client_key must be configured."""
    if config.client_cert and not config.client_key:
        raise MissingClientKey()
    if config.client_key and not config.client_cert:
        raise MissingClientCert()


def load_client_identity(config):
    """Returns a ClientIdentity, or None when no client pair is configured."""
    check_client_pair(config)
    if not config.client_cert:
        return None

    certificate = load_client_cert(config.client_cert)
    load_client_key(config.client_key)
    log.info("using client certificate: %s", config.client_cert)
    return ClientIdentity(
        cert_path=config.client_cert,
        key_path=config.client_key,
        certificate=certificate,
    )


def build_trust_material(config):
    """Assemble TrustMaterial from config. Raises InitializationError."""
    if config.skip_verify:
        log.warning("add custom verifier: server certificates will NOT be verified")
        if config.ca_cert:
            log.info("ca cert %s ignored because verification is skipped", config.ca_cert)
        return TrustMaterial(
            insecure=True,
            client_identity=load_client_identity(config),
        )

    ca_certificates = load_ca_certificates(config.ca_cert) if config.ca_cert else ()
    return TrustMaterial(
        insecure=False,
        ca_certificates=ca_certificates,
        client_identity=load_client_identity(config),
    )
