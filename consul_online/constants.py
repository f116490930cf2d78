"""
Version, fixed endpoint, defaults, exit codes and environment variable names.
"""

VERSION = "0.2.0"

# ─── Endpoint ────────────────────────────────────────────────────
HEALTH_PATH = "/v1/operator/raft/configuration"
TOKEN_HEADER = "X-Consul-Token"
DEFAULT_HTTP_ADDR = "localhost:8500"

# ─── Timing ──────────────────────────────────────────────────────
DEFAULT_INTERVAL_SEC = 10      # Poll interval when none is given
TIMEOUT_FLOOR_SEC = 10         # Minimum per-attempt timeout without --reconnect
MIN_REQUEST_TIMEOUT_SEC = 0.001  # urllib3 refuses timeouts <= 0

# ─── Status codes ────────────────────────────────────────────────
STATUS_ONLINE = 200
STATUS_NOT_READY = 500         # No raft leader yet, always retried

# ─── Exit codes ──────────────────────────────────────────────────
EXIT_OK = 0
EXIT_INIT_ERROR = 1
EXIT_TIMEOUT = 2
EXIT_REQUEST_FAILED = 3

# ─── Environment ─────────────────────────────────────────────────
ENV_HTTP_ADDR = "CONSUL_HTTP_ADDR"
ENV_HTTP_SSL = "CONSUL_HTTP_SSL"
ENV_HTTP_SSL_VERIFY = "CONSUL_HTTP_SSL_VERIFY"
ENV_CACERT = "CONSUL_CACERT"
ENV_CLIENT_CERT = "CONSUL_CLIENT_CERT"
ENV_CLIENT_KEY = "CONSUL_CLIENT_KEY"
ENV_HTTP_TOKEN = "CONSUL_HTTP_TOKEN"
ENV_HTTP_TOKEN_FILE = "CONSUL_HTTP_TOKEN_FILE"
ENV_LOG_LEVEL = "CONSUL_ONLINE_LOG"
