"""
ACL token resolution for the X-Consul-Token header.
"""

from .config import log
from .constants import TOKEN_HEADER
from .errors import ReadTokenFile


class TokenHeader:
    """Resolved once before polling; applied identically to every request."""

    def __init__(self, token=None):
        self._token = token

    @classmethod
    def from_config(cls, config):
        """A literal token wins over a token file. Neither → no header."""
        if config.http_token:
            return cls(config.http_token)
        if config.http_token_file:
            try:
                with open(config.http_token_file, "r", encoding="utf-8") as f:
                    token = f.read().strip()
            except OSError as e:
                raise ReadTokenFile(config.http_token_file, e) from e
            log.info("read token from: %s", config.http_token_file)
            return cls(token)
        return cls(None)

    def apply(self, headers):
        """Add the token header to a headers dict in place and return it."""
        if self._token is not None:
            headers[TOKEN_HEADER] = self._token
        return headers

    def __repr__(self):
        return f"TokenHeader({'set' if self._token is not None else 'none'})"
