import pytest

from secret_child.main import Participant


class ScriptedRandom:
    """Stands in for random.Random, replaying fixed randint draws."""

    def __init__(self, draws):
        self.draws = list(draws)
        self.calls = 0

    def randint(self, a, b):
        self.calls += 1
        value = self.draws.pop(0) if self.draws else a
        assert a <= value <= b
        return value


@pytest.fixture
def abc():
    return [
        Participant("Alice", "alice@example.com"),
        Participant("Bob", "bob@example.com"),
        Participant("Carol", "carol@example.com"),
    ]


@pytest.fixture
def office():
    names = ["Ana", "Ben", "Cho", "Dev", "Eli", "Fay", "Gus", "Hal", "Ivy", "Jo"]
    return [Participant(n, f"{n.lower()}@corp.example") for n in names]


@pytest.fixture
def scripted():
    return ScriptedRandom
