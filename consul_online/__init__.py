"""
consul_online — block until a Consul agent is online
====================================================
Polls /v1/operator/raft/configuration until it answers 200, the global
timeout runs out, or a non-retryable failure occurs.

  constants.py    → Version, endpoint, defaults, exit codes, env names
  errors.py       → Exception taxonomy (init / request / timeout)
  config.py       → Logging setup, Config snapshot, env + CLI merge
  trust.py        → http/https selection, TrustMaterial, SSLContext
  headers.py      → X-Consul-Token resolution
  http_client.py  → requests Session with TLS adapter, single GET
  state.py        → DeadlineState, Outcome, Decision
  poll.py         → Timeout arithmetic and the retry loop
  runner.py       → click CLI + exit codes
"""

from .constants import VERSION as __version__
from .config import Config, resolve_config
from .errors import ConsulOnlineError, InitializationError, RequestFailed, WaitTimeout
from .poll import wait

__all__ = [
    "Config",
    "resolve_config",
    "wait",
    "ConsulOnlineError",
    "InitializationError",
    "RequestFailed",
    "WaitTimeout",
]
