"""
Operator interaction hooks.

Services never prompt or print on their own. The CLI hands them a
``confirm`` callable (yes/no question, False means decline) and a
``notify`` callable (one line of operator-facing output); tests hand
them scripted ones.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)

Confirm = Callable[[str], bool]
Notify = Callable[[str], None]


def decline_all(question: str) -> bool:
    """A Confirm that answers no to everything."""
    logger.debug("Declined (non-interactive): %s", question)
    return False


def log_notify(message: str) -> None:
    """A Notify that only logs."""
    logger.info(message)
