"""
HTTP session with TLS trust injection, and the single bounded GET.

The poll loop owns every retry, so the adapter is mounted with a zero-retry
urllib3 strategy and a one-connection pool. For https targets the
SSLContext built from TrustMaterial is passed straight into urllib3's pool
managers; requests' own CA bundle handling only ever adds to it.
"""

import threading
from dataclasses import dataclass

import requests
import urllib3
from requests.adapters import HTTPAdapter
from urllib3.exceptions import InsecureRequestWarning
from urllib3.util.retry import Retry

from .config import log
from .constants import HEALTH_PATH, MIN_REQUEST_TIMEOUT_SEC
from .state import Outcome
from .trust import resolve_base_url, build_trust_material, check_client_pair

_retry_strategy = Retry(
    total=0,                 # One attempt per call, the poll loop retries
    connect=0,
    read=0,
    redirect=0,
    status=0,
    raise_on_status=False,
)


class TlsAdapter(HTTPAdapter):
    """HTTPAdapter that hands a prebuilt SSLContext to urllib3."""

    def __init__(self, ssl_context, **kwargs):
        # Set before super().__init__(), which calls init_poolmanager()
        self.ssl_context = ssl_context
        super().__init__(**kwargs)

    def init_poolmanager(self, connections, maxsize, block=False, **pool_kwargs):
        pool_kwargs["ssl_context"] = self.ssl_context
        return super().init_poolmanager(connections, maxsize, block=block, **pool_kwargs)

    def proxy_manager_for(self, proxy, **proxy_kwargs):
        proxy_kwargs["ssl_context"] = self.ssl_context
        return super().proxy_manager_for(proxy, **proxy_kwargs)


def create_session(material=None):
    """
    Create a requests.Session for one run.

    material=None gives a plain-http session. Otherwise only https:// is
    mounted with the TLS adapter and plain http:// is refused.
    """
    session = requests.Session()
    session.trust_env = False

    if material is None:
        adapter = HTTPAdapter(pool_connections=1, pool_maxsize=1, max_retries=_retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        return session

    adapter = TlsAdapter(
        material.ssl_context(),
        pool_connections=1,
        pool_maxsize=1,
        max_retries=_retry_strategy,
    )
    session.mount("https://", adapter)
    session.mount("http://", _HttpsOnlyAdapter())
    if material.insecure:
        session.verify = False
        urllib3.disable_warnings(InsecureRequestWarning)
    return session


class _HttpsOnlyAdapter(HTTPAdapter):
    def send(self, request, **kwargs):
        raise requests.exceptions.InvalidSchema(
            f"refusing plain http request on a tls transport: {request.url}"
        )


# ─── Transport ───────────────────────────────────────────────────

@dataclass
class Transport:
    session: requests.Session
    url: str
    insecure: bool = False

    def get_status(self, timeout, header=None):
        """
        Issue one GET and classify the reply.

        Every HTTP status comes back as an Outcome; only transport-level
        failures (refused, TLS handshake, timeout, ...) become
        TRANSPORT_FAILURE. The timeout bounds the whole call: requests'
        own timeout only limits each socket read, so the call runs on a
        daemon thread and is abandoned once the deadline passes.
        """
        if self.insecure:
            log.warning("assuming server certificate is ok (unsafe!)")
        headers = header.apply({}) if header is not None else {}
        deadline = max(timeout, MIN_REQUEST_TIMEOUT_SEC)
        result = {}
        done = threading.Event()

        def call():
            try:
                resp = self.session.get(
                    self.url,
                    headers=headers,
                    timeout=deadline,
                    allow_redirects=False,
                )
                resp.close()
                result["outcome"] = Outcome.from_status(resp.status_code)
            except requests.RequestException as e:
                result["outcome"] = Outcome.transport_failure(e)
            except Exception as e:
                result["error"] = e
            finally:
                done.set()

        threading.Thread(target=call, name="consul-online-request", daemon=True).start()

        if not done.wait(deadline):
            log.debug("request exceeded %d millis, dropping connection", int(deadline * 1000))
            # Drops pooled connections; the stuck one is closed when its thread returns
            self.session.close()
            return Outcome.transport_failure(
                requests.Timeout(f"no complete response within {deadline:.3f}s")
            )
        if "error" in result:
            raise result["error"]
        return result["outcome"]

    def close(self):
        self.session.close()


def build_transport(config):
    """
    Resolve the health URL and build the matching session.

    Trust material is only assembled for https targets. A lone client
    certificate or key is still rejected for plain http addresses.
    """
    base_url, use_tls = resolve_base_url(config)
    url = base_url + HEALTH_PATH

    if not use_tls:
        check_client_pair(config)
        log.info("polling %s (plain http)", url)
        return Transport(session=create_session(), url=url)

    material = build_trust_material(config)
    log.info("polling %s (tls%s)", url, ", unverified" if material.insecure else "")
    return Transport(session=create_session(material), url=url, insecure=material.insecure)
