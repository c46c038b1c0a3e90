"""
Module: transport/retry.py
Description: Retry policies for signed actions and message sends.

Both policies are bounded tenacity loops keyed on a classification
function, so attempt counting lives in tenacity's retry state rather
than in exception handlers.
"""

import logging

from tenacity import (
    Retrying,
    after_log,
    before_log,
    retry_if_exception,
    retry_if_exception_type,
    stop_after_attempt,
)

from queuelink.errors import ActionError, MessageDigestMismatch

# tenacity's log hooks need a stdlib logger
logger = logging.getLogger(__name__)

DEFAULT_ACTION_ATTEMPTS = 3
SEND_MESSAGE_ATTEMPTS = 2


def is_retryable(error: BaseException) -> bool:
    """Only server-side (HTTP 5xx) action failures are retried."""
    return isinstance(error, ActionError) and error.is_retryable


def action_retrying(max_attempts: int = DEFAULT_ACTION_ATTEMPTS) -> Retrying:
    """Retry loop for action(): 5xx failures, max_attempts calls in total."""
    return Retrying(
        stop=stop_after_attempt(max_attempts),
        retry=retry_if_exception(is_retryable),
        before=before_log(logger, logging.DEBUG),
        after=after_log(logger, logging.INFO),
        reraise=True,
    )


def send_message_retrying() -> Retrying:
    """Retry loop for send_message(): one extra attempt on a digest mismatch."""
    return Retrying(
        stop=stop_after_attempt(SEND_MESSAGE_ATTEMPTS),
        retry=retry_if_exception_type(MessageDigestMismatch),
        after=after_log(logger, logging.WARNING),
        reraise=True,
    )
