"""
Command-line entry point and exit-code mapping.

  0  consul is online
  1  initialization failed (bad options, certificates, token file)
  2  global timeout exceeded
  3  request failed and --reconnect was not given (or interrupted)
"""

import sys

import click

from .constants import (
    VERSION, EXIT_OK, EXIT_INIT_ERROR, EXIT_TIMEOUT, EXIT_REQUEST_FAILED,
)
from .config import log, log_level_from, resolve_config, setup_logging, LOG_LEVELS
from .errors import InitializationError, RequestFailed, WaitTimeout
from .poll import wait


def run(config):
    """Poll until done and return the process exit code."""
    try:
        wait(config)
    except RequestFailed as e:
        log.error("failed: %s", e)
        return EXIT_REQUEST_FAILED
    except WaitTimeout as e:
        log.error("timed out after %d seconds", int(e.elapsed))
        return EXIT_TIMEOUT
    except InitializationError as e:
        log.error("initialization failed: %s", e)
        return EXIT_INIT_ERROR
    except KeyboardInterrupt:
        # Ctrl+C before the loop started (certificate loading, token file)
        log.error("failed: cancelled")
        return EXIT_REQUEST_FAILED
    log.info("consul is online!")
    return EXIT_OK


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("address", required=False)
@click.option("--log-level", "-l", type=click.Choice(sorted(LOG_LEVELS), case_sensitive=False),
              default=None, help="Application log level  [default: warn, or CONSUL_ONLINE_LOG]")
@click.option("--tls", is_flag=True, help="Force TLS connection.")
@click.option("--timeout", "-t", type=click.IntRange(min=0),
              help="Global timeout in seconds. Might be exceeded by up to 10s "
                   "unless --reconnect is given.")
@click.option("--interval", "-i", type=click.IntRange(min=0), help="Polling interval in seconds  [default: 10]")
@click.option("--reconnect", "-r", is_flag=True, help="Do not treat connection failures as exit conditions.")
@click.option("--skip-verify", is_flag=True,
              help="Skip server certificate validation. Dangerous, prefer --ca-cert.")
@click.option("--ca-cert", help="Consul CA certificate (or CONSUL_CACERT).")
@click.option("--client-cert", help="Consul client certificate (or CONSUL_CLIENT_CERT).")
@click.option("--client-key", help="Consul client key (or CONSUL_CLIENT_KEY).")
@click.option("--http-token", help="Consul ACL token with operator:read (or CONSUL_HTTP_TOKEN).")
@click.option("--http-token-file",
              help="File holding a Consul ACL token with operator:read (or CONSUL_HTTP_TOKEN_FILE).")
@click.version_option(VERSION, prog_name="consul-online")
def cli(address, log_level, tls, timeout, interval, reconnect, skip_verify,
        ca_cert, client_cert, client_key, http_token, http_token_file):
    """
    Is consul online? Polls the agent until it has a raft configuration.

    ADDRESS examples: 127.0.0.1:8500, http://127.0.0.1:8500,
    https://localhost:8501 (default: CONSUL_HTTP_ADDR or localhost:8500).
    """
    setup_logging(log_level_from(log_level))

    try:
        config = resolve_config(
            address=address,
            tls=tls,
            timeout=timeout,
            interval=interval,
            reconnect=reconnect,
            skip_verify=skip_verify,
            ca_cert=ca_cert,
            client_cert=client_cert,
            client_key=client_key,
            http_token=http_token,
            http_token_file=http_token_file,
        )
    except InitializationError as e:
        log.error("initialization failed: %s", e)
        sys.exit(EXIT_INIT_ERROR)

    sys.exit(run(config))


def main():
    cli(prog_name="consul-online")


if __name__ == "__main__":
    main()
