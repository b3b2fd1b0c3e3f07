"""Keys for Portable Text array items

Keys are random by default. Inside `seeded_keys(seed)` they come from a
generator seeded with `seed`, so converting the same post twice yields the
same keys and a re-import writes byte-identical content.
"""

import random
import secrets
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator


_rng: ContextVar[random.Random | None] = ContextVar("_rng", default=None)


def generate_key() -> str:
    """Return a 12-char hex key; every block and span in a document needs one."""
    rng = _rng.get()
    if rng is None:
        return secrets.token_hex(6)
    return f"{rng.getrandbits(48):012x}"


@contextmanager
def seeded_keys(seed: str) -> Iterator[None]:
    token = _rng.set(random.Random(seed))
    try:
        yield
    finally:
        _rng.reset(token)
