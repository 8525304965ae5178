"""
Clock skew detection for queue backend errors.

The relay signs each request with a timestamp. When the local clock drifts
too far from the backend's, receives fail with an error whose text contains
"Signature expired". The backend exposes no structured code for this, so the
match is a substring check kept behind is_clock_skew_error().
"""

from typing import Optional
import logging

from .notifier import Notifier
from .types import CLOCK_SKEW_MARKERS, TransportConfig

logger = logging.getLogger("pairlink.skew")

_RED = "\x1b[0;31m"
_YELLOW = "\x1b[0;33m"
_RESET = "\x1b[0m"


def red(text: str) -> str:
    """Wrap text in ANSI red."""
    return _RED + text + _RESET


def yellow(text: str) -> str:
    """Wrap text in ANSI yellow."""
    return _YELLOW + text + _RESET


def is_clock_skew_error(
    error: Optional[BaseException],
    markers: tuple[str, ...] = CLOCK_SKEW_MARKERS,
) -> bool:
    """Whether an error's description signals a signature rejected for clock skew."""
    if error is None:
        return False
    description = str(error)
    return any(marker in description for marker in markers)


def clock_skew_message(config: Optional[TransportConfig] = None) -> bytes:
    """Build the diagnostic telling the user to resynchronize their clock."""
    config = config or TransportConfig()

    text = (
        red(
            f"{config.diagnostic_prefix} Your system time is out of sync! "
            "Messages cannot be received until you have synchronized your system time. "
            "Please run "
        )
        + yellow(config.clock_sync_command)
        + red(" and try again.")
        + "\r\n"
    )
    return text.encode("utf-8")


def notify_if_clock_skew(
    error: Optional[BaseException],
    notifier: Optional[Notifier],
    config: Optional[TransportConfig] = None,
) -> bool:
    """
    Emit the clock skew diagnostic if the error calls for it.

    Does nothing without both an error and a notifier. The error itself is
    left untouched for the caller to propagate, even when the notifier fails.

    Returns:
        True if a diagnostic was delivered
    """
    if error is None or notifier is None:
        return False

    markers = config.clock_skew_markers if config is not None else CLOCK_SKEW_MARKERS
    if not is_clock_skew_error(error, markers):
        return False

    logger.warning("Queue backend rejected request signature, local clock is likely skewed")
    try:
        notifier.notify(clock_skew_message(config))
    except Exception as e:
        logger.error("Failed to deliver clock skew diagnostic: %s", e)
        return False
    return True
