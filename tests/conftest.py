import ipaddress
from datetime import datetime, timedelta, timezone

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import ExtendedKeyUsageOID, NameOID

from consul_online.state import Outcome


def _key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


def _key_pem(key) -> bytes:
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    )


def _cert(subject_cn, key, issuer_cn=None, issuer_key=None, ca=False, san=None, usage=None):
    now = datetime.now(timezone.utc)
    signer = issuer_key or key
    builder = (
        x509.CertificateBuilder()
        .subject_name(x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, subject_cn)]))
        .issuer_name(x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, issuer_cn or subject_cn)]))
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(minutes=5))
        .not_valid_after(now + timedelta(days=1))
        .add_extension(x509.BasicConstraints(ca=ca, path_length=None), critical=True)
        .add_extension(x509.SubjectKeyIdentifier.from_public_key(key.public_key()), critical=False)
        .add_extension(
            x509.AuthorityKeyIdentifier.from_issuer_public_key(signer.public_key()), critical=False,
        )
        .add_extension(
            x509.KeyUsage(
                digital_signature=not ca, content_commitment=False, key_encipherment=not ca,
                data_encipherment=False, key_agreement=False, key_cert_sign=ca, crl_sign=ca,
                encipher_only=False, decipher_only=False,
            ),
            critical=True,
        )
    )
    if usage is not None:
        builder = builder.add_extension(x509.ExtendedKeyUsage([usage]), critical=False)
    if san is not None:
        builder = builder.add_extension(x509.SubjectAlternativeName(san), critical=False)
    return builder.sign(private_key=signer, algorithm=hashes.SHA256())


@pytest.fixture(scope="session")
def pki():
    """A throwaway CA plus a server and a client certificate it signed."""
    ca_key = _key()
    ca_cert = _cert("consul-online-test-ca", ca_key, ca=True)
    client_key = _key()
    client_cert = _cert(
        "client.consul", client_key, issuer_cn="consul-online-test-ca", issuer_key=ca_key,
        usage=ExtendedKeyUsageOID.CLIENT_AUTH,
    )
    server_key = _key()
    server_cert = _cert(
        "server.consul", server_key, issuer_cn="consul-online-test-ca", issuer_key=ca_key,
        usage=ExtendedKeyUsageOID.SERVER_AUTH,
        san=[x509.IPAddress(ipaddress.ip_address("127.0.0.1")), x509.DNSName("localhost")],
    )
    return {
        "ca_cert": ca_cert.public_bytes(serialization.Encoding.PEM),
        "client_cert": client_cert.public_bytes(serialization.Encoding.PEM),
        "client_key": _key_pem(client_key),
        "server_cert": server_cert.public_bytes(serialization.Encoding.PEM),
        "server_key": _key_pem(server_key),
        "other_key": _key_pem(_key()),
    }


@pytest.fixture
def pki_files(tmp_path, pki):
    paths = {}
    for name, data in pki.items():
        path = tmp_path / f"{name}.pem"
        path.write_bytes(data)
        paths[name] = str(path)
    garbage = tmp_path / "garbage.pem"
    garbage.write_text("this is not a pem file\n")
    paths["garbage"] = str(garbage)
    paths["missing"] = str(tmp_path / "does-not-exist.pem")
    return paths


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start=1000.0):
        self.now = start
        self.sleeps = []

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


class ScriptedTransport:
    """
    Stands in for http_client.Transport. Each entry of ``script`` is a
    status code or an exception instance; ``duration`` is how long each
    request takes on the fake clock.
    """

    url = "http://consul.test:8500/v1/operator/raft/configuration"

    def __init__(self, clock, script, duration=0.1, repeat_last=False):
        self.clock = clock
        self.script = list(script)
        self.duration = duration
        self.repeat_last = repeat_last
        self.timeouts = []
        self.headers = []
        self.closed = False

    def get_status(self, timeout, header=None):
        self.timeouts.append(timeout)
        self.headers.append(header.apply({}) if header is not None else None)
        if self.repeat_last and len(self.script) == 1:
            step = self.script[0]
        else:
            step = self.script.pop(0)
        self.clock.advance(self.duration)
        if isinstance(step, BaseException):
            return Outcome.transport_failure(step)
        return Outcome.from_status(step)

    def close(self):
        self.closed = True


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scripted(clock):
    def factory(script, **kwargs):
        return ScriptedTransport(clock, script, **kwargs)
    return factory
