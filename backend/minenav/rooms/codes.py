from __future__ import annotations

import random
from typing import Callable

CODE_MIN = 1000
CODE_MAX = 9999


class CodeAllocator:
    """Draws 4-digit room codes, re-drawing while a code is still taken.

    There is no retry limit: with all 9000 codes in use ``allocate`` never
    returns.
    """

    def __init__(self, is_taken: Callable[[str], bool], rng: random.Random | None = None) -> None:
        self._is_taken = is_taken
        self._rng = rng or random.Random()

    def allocate(self) -> str:
        code = str(self._rng.randint(CODE_MIN, CODE_MAX))
        while self._is_taken(code):
            code = str(self._rng.randint(CODE_MIN, CODE_MAX))
        return code


def is_valid_code(value: object) -> bool:
    return isinstance(value, str) and len(value) == 4 and value.isascii() and value.isdigit()
