"""Response id generation."""

import random
from typing import Optional


class ResponseIdGenerator:
    """Produces ``chatcmpl-<n>`` correlation ids from an owned random source.

    The ids are for display and correlation only, so a small range is fine.
    Pass a seed for reproducible sequences.
    """

    def __init__(self, seed: Optional[int] = None, prefix: str = "chatcmpl-", upper: int = 999) -> None:
        self._rng = random.Random(seed)
        self._prefix = prefix
        self._upper = upper

    def __call__(self) -> str:
        return f"{self._prefix}{self._rng.randrange(self._upper)}"
