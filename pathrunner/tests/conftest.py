# pathrunner/tests/conftest.py
import random
import pytest


class AlwaysRng(random.Random):
    """random() always 0.0: every probability trial succeeds, uniform(a, b) == a,
    choice() picks the first element."""
    def random(self):
        return 0.0


@pytest.fixture
def always_rng():
    return AlwaysRng(0)
