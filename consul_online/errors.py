"""
Exception taxonomy.

InitializationError subclasses abort before the first request (exit 1).
RequestFailed ends the loop on a non-retryable outcome (exit 3) and
WaitTimeout when the global budget is spent (exit 2).
"""


class ConsulOnlineError(RuntimeError):
    """Base exception for everything this tool raises."""


# ─── Initialization ──────────────────────────────────────────────

class InitializationError(ConsulOnlineError):
    """Configuration or trust material could not be assembled."""


class UnixSocketUnsupported(InitializationError):
    def __init__(self, address):
        super().__init__(f"unix sockets are not supported at the moment: {address}")
        self.address = address


class InvalidBool(InitializationError):
    def __init__(self, name, value):
        super().__init__(f"environment variable {name} could not be parsed as boolean: {value}")
        self.name = name
        self.value = value


class ReadCaCert(InitializationError):
    def __init__(self, path, exc):
        super().__init__(f"could not read the ca certificate {path}: {exc}")


class ParseCaCert(InitializationError):
    def __init__(self, path, exc):
        super().__init__(f"could not parse the provided ca certificate {path}: {exc}")


class AddCaCert(InitializationError):
    def __init__(self, exc):
        super().__init__(f"invalid ca certificate: {exc}")


class AddClientCert(InitializationError):
    def __init__(self, exc):
        super().__init__(f"invalid client certificate: {exc}")


class MissingClientKey(InitializationError):
    def __init__(self):
        super().__init__("missing client key option")


class MissingClientCert(InitializationError):
    def __init__(self):
        super().__init__("missing client cert option")


class ReadClientKey(InitializationError):
    def __init__(self, path, exc):
        super().__init__(f"failed to read client key {path}: {exc}")


class ParseClientKey(InitializationError):
    def __init__(self, path, exc):
        super().__init__(f"failed to parse client key {path}: {exc}")


class ReadClientCert(InitializationError):
    def __init__(self, path, exc):
        super().__init__(f"failed to read client cert {path}: {exc}")


class ParseClientCert(InitializationError):
    def __init__(self, path, exc):
        super().__init__(f"failed to parse client cert {path}: {exc}")


class ReadTokenFile(InitializationError):
    def __init__(self, path, exc):
        super().__init__(f"failed to read token file {path}: {exc}")


# ─── Runtime ─────────────────────────────────────────────────────

class RequestFailed(ConsulOnlineError):
    """A request outcome that is not retried under the current settings."""

    def __init__(self, status=None, cause=None):
        if status is not None:
            message = f"request failed: HTTP {status}"
        else:
            message = f"request failed: {cause}"
        super().__init__(message)
        self.status = status
        self.cause = cause


class Cancelled(RequestFailed):
    """The wait was interrupted (Ctrl+C) during a request or sleep."""

    def __init__(self):
        super().__init__(cause="cancelled")


class WaitTimeout(ConsulOnlineError):
    """The global timeout elapsed before the agent came online."""

    def __init__(self, elapsed):
        super().__init__(f"timed out after {int(elapsed)} seconds")
        self.elapsed = elapsed
