import datetime
import random

import pytest

from hashpals.constants import HOUR_MS
from hashpals.database import MemoryStore
from hashpals.pet_entity import Pet

# Local noon, so a few hours either way stays on the same calendar day
NOON = int(datetime.datetime(2024, 5, 15, 12, 0).timestamp() * 1000)
DAY_MS = 24 * HOUR_MS


class FakeClock:
    def __init__(self, now=NOON):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms


class StubRandom:
    """Rolls fixed values so coin rewards are predictable."""
    def __init__(self, roll=0.0, amount=3):
        self.roll = roll
        self.amount = amount

    def random(self):
        return self.roll

    def randint(self, lo, hi):
        return max(lo, min(hi, self.amount))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def pet(clock, store):
    return Pet(store=store, clock=clock, rng=random.Random(1234))
