"""Pytest fixtures for simulator tests."""

from collections.abc import Callable

import pytest

from gitgud.models import RepositoryState
from gitgud.simulator import GitSimulator


class FakeClock:
    """Deterministic millisecond clock that advances one second per reading."""

    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        self.now += 1000
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sim(clock: FakeClock) -> GitSimulator:
    """POSIX simulator with an initialized repository."""
    simulator = GitSimulator("posix", clock=clock)
    simulator.execute("git init")
    return simulator


@pytest.fixture
def dos_sim(clock: FakeClock) -> GitSimulator:
    """DOS simulator with an initialized repository."""
    simulator = GitSimulator("dos", clock=clock)
    simulator.execute("git init")
    return simulator


@pytest.fixture
def run() -> Callable[..., str]:
    """Run several command lines and return the output of the last one."""

    def _run(simulator: GitSimulator, *lines: str) -> str:
        output = ""
        for line in lines:
            output = simulator.execute(line).output
        return output

    return _run


def tip(state: RepositoryState, branch: str | None = None):
    """Commit at the tip of branch (HEAD's branch by default)."""
    return state.commits[state.branches[branch or state.HEAD]]
