"""
The poll loop: wait until the consul agent reports a raft configuration.

Each iteration computes a per-attempt timeout from the global budget and
the interval, issues one request, classifies the outcome and either stops
or sleeps out the rest of the interval. The start time is captured once
and never reset.

Without --reconnect the per-attempt timeout never drops below
TIMEOUT_FLOOR_SEC, so the global budget can be overrun by up to that much.
The budget is checked after each attempt, never mid-request.
"""

import time

from .config import log
from .constants import DEFAULT_INTERVAL_SEC, TIMEOUT_FLOOR_SEC
from .errors import RequestFailed, Cancelled, WaitTimeout
from .headers import TokenHeader
from .http_client import build_transport
from .state import DeadlineState, Decision, OutcomeKind


def attempt_timeout(deadline, now, interval, reconnect):
    """max(min(remaining budget, interval), floor); floor is 0 with reconnect."""
    remaining = deadline.remaining(now)
    bounded = interval if remaining is None else min(remaining, interval)
    floor = 0 if reconnect else TIMEOUT_FLOOR_SEC
    return max(bounded, floor)


def decide(outcome, reconnect, deadline=None, now=None):
    """
    Map one attempt's Outcome to the next step.

    500 is always retried; any other non-200 status or a transport failure
    only with reconnect. A retryable outcome after the budget is spent
    becomes TERMINATE_TIMED_OUT.
    """
    if outcome.kind is OutcomeKind.SUCCESS:
        return Decision.TERMINATE_SUCCESS
    if outcome.kind is not OutcomeKind.NOT_READY and not reconnect:
        return Decision.TERMINATE_FATAL
    if deadline is not None and deadline.expired(now):
        return Decision.TERMINATE_TIMED_OUT
    return Decision.CONTINUE


def wait(config, transport=None, header=None, clock=time.monotonic, sleep=time.sleep):
    """
    Block until the agent is online.

    Returns the number of attempts made. Raises InitializationError before
    the first request, RequestFailed on a non-retryable outcome and
    WaitTimeout when the global budget is spent.
    """
    owns_transport = transport is None
    if owns_transport:
        transport = build_transport(config)
    try:
        if header is None:
            header = TokenHeader.from_config(config)
        return _poll(config, transport, header, clock, sleep)
    finally:
        if owns_transport:
            transport.close()


def _poll(config, transport, header, clock, sleep):
    interval = config.interval if config.interval is not None else DEFAULT_INTERVAL_SEC
    deadline = DeadlineState(start=clock(), global_timeout=config.timeout)
    attempts = 0

    while True:
        timeout = attempt_timeout(deadline, clock(), interval, config.reconnect)
        request_start = clock()
        log.debug("request %s ...", transport.url)
        log.info("will timeout after %d millis", int(timeout * 1000))

        try:
            outcome = transport.get_status(timeout, header)
        except KeyboardInterrupt:
            raise Cancelled() from None
        attempts += 1

        now = clock()
        decision = decide(outcome, config.reconnect, deadline, now)
        if decision is Decision.TERMINATE_SUCCESS:
            log.info("online after %d attempt(s)", attempts)
            return attempts
        if decision is Decision.TERMINATE_FATAL:
            raise RequestFailed(status=outcome.status, cause=outcome.cause)

        if outcome.kind is OutcomeKind.NOT_READY:
            log.info("not ready yet: %s", outcome.describe())
        else:
            log.info("request failed: %s", outcome.describe())

        if decision is Decision.TERMINATE_TIMED_OUT:
            raise WaitTimeout(deadline.elapsed(now))

        pause = timeout - (clock() - request_start)
        if pause > 0:
            log.debug("sleep %d millis", int(pause * 1000))
            try:
                sleep(pause)
            except KeyboardInterrupt:
                raise Cancelled() from None
