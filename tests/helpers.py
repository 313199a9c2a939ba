"""Test doubles shared by several test modules."""
import random
from datetime import timedelta


class SequenceRandom:
    """Returns the queued values from randint() first, then falls back to a seeded draw."""

    def __init__(self, *values):
        self._queued = list(values)
        self._fallback = random.Random(1234)

    def randint(self, a, b):
        if self._queued:
            return self._queued.pop(0)
        return self._fallback.randint(a, b)


class FakeClock:
    def __init__(self, start):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, ms=1):
        self.now = self.now + timedelta(milliseconds=ms)
