"""Retry helpers for storage calls."""

from __future__ import annotations

import functools
import random
import time
from collections.abc import Callable
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

RETRY_EXCEPTIONS = (BotoCoreError, ClientError, OSError)


def with_retry(func: Callable[..., Any], *, attempts: int = 3, base_delay: float = 1.0):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        delay = base_delay
        for attempt in range(attempts):
            try:
                return func(*args, **kwargs)
            except RETRY_EXCEPTIONS:
                if attempt == attempts - 1:
                    raise
                if delay:
                    time.sleep(delay + random.random() * delay)
                delay *= 2
    return wrapper
