"""
Logging setup and the immutable Config snapshot.

This is the only module that reads the process environment. Command-line
values take precedence over CONSUL_* variables; the result is a frozen
Config handed to the rest of the package.
"""

import os
import sys
import logging
from dataclasses import dataclass
from typing import Optional

from .constants import (
    DEFAULT_HTTP_ADDR,
    ENV_HTTP_ADDR, ENV_HTTP_SSL, ENV_HTTP_SSL_VERIFY, ENV_CACERT,
    ENV_CLIENT_CERT, ENV_CLIENT_KEY, ENV_HTTP_TOKEN, ENV_HTTP_TOKEN_FILE,
    ENV_LOG_LEVEL,
)
from .errors import InvalidBool


# ─── Logging ─────────────────────────────────────────────────────

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

LOG_LEVELS = {
    "off": logging.CRITICAL + 10,
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
    "trace": logging.DEBUG,     # stdlib logging has no trace level
}

log = logging.getLogger("consul_online")


def log_level_from(name, environ=None):
    """
    Map a level name to a logging level.

    An explicit name wins, then CONSUL_ONLINE_LOG, then WARNING.
    Unknown names fall back to WARNING.
    """
    environ = os.environ if environ is None else environ
    name = name or environ.get(ENV_LOG_LEVEL) or "warn"
    return LOG_LEVELS.get(name.strip().lower(), logging.WARNING)


_handler = None


def setup_logging(level=logging.WARNING):
    """Send log records to stderr. Safe to call more than once."""
    global _handler
    log.setLevel(level)
    if _handler is not None:
        log.removeHandler(_handler)

    _handler = logging.StreamHandler(sys.stderr)
    _handler.setLevel(level)
    _handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT))
    log.addHandler(_handler)
    return log


# ─── Config snapshot ─────────────────────────────────────────────

@dataclass(frozen=True)
class Config:
    http_addr: str = DEFAULT_HTTP_ADDR
    http_ssl: bool = False
    timeout: Optional[int] = None          # Global budget, seconds
    interval: Optional[int] = None         # Poll interval, seconds
    reconnect: bool = False
    skip_verify: bool = False
    ca_cert: Optional[str] = None
    client_cert: Optional[str] = None
    client_key: Optional[str] = None
    http_token: Optional[str] = None
    http_token_file: Optional[str] = None


def bool_env(name, environ=None):
    """
    Read a boolean environment variable.

    Returns None when unset. Only the literals "true" and "false" are
    accepted; anything else raises InvalidBool.
    """
    environ = os.environ if environ is None else environ
    value = environ.get(name)
    if value is None:
        return None
    if value == "true":
        return True
    if value == "false":
        return False
    raise InvalidBool(name, value)


def resolve_config(
    address=None,
    tls=False,
    timeout=None,
    interval=None,
    reconnect=False,
    skip_verify=False,
    ca_cert=None,
    client_cert=None,
    client_key=None,
    http_token=None,
    http_token_file=None,
    environ=None,
):
    """Merge command-line values with CONSUL_* environment variables."""
    environ = os.environ if environ is None else environ

    ssl_env = bool_env(ENV_HTTP_SSL, environ)
    # CONSUL_HTTP_SSL_VERIFY=false turns verification off, like the consul CLI
    verify_env = bool_env(ENV_HTTP_SSL_VERIFY, environ)

    config = Config(
        http_addr=address or environ.get(ENV_HTTP_ADDR) or DEFAULT_HTTP_ADDR,
        http_ssl=bool(tls) or bool(ssl_env),
        timeout=timeout,
        interval=interval,
        reconnect=bool(reconnect),
        skip_verify=bool(skip_verify) or verify_env is False,
        ca_cert=ca_cert or environ.get(ENV_CACERT),
        client_cert=client_cert or environ.get(ENV_CLIENT_CERT),
        client_key=client_key or environ.get(ENV_CLIENT_KEY),
        http_token=http_token or environ.get(ENV_HTTP_TOKEN),
        http_token_file=http_token_file or environ.get(ENV_HTTP_TOKEN_FILE),
    )
    log.debug(
        "Config: addr=%s tls=%s timeout=%s interval=%s reconnect=%s skip_verify=%s",
        config.http_addr, config.http_ssl, config.timeout, config.interval,
        config.reconnect, config.skip_verify,
    )
    return config
