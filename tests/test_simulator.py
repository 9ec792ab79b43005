"""Tests for the dispatcher and the state boundary."""

from collections.abc import Callable

from gitgud.models import FileState, RepositoryState
from gitgud.shell import Dialect
from gitgud.simulator import GitSimulator

from conftest import FakeClock, tip


class TestDispatch:
    def test_empty_input(self, sim: GitSimulator) -> None:
        result = sim.execute("   ")
        assert result.output == ""
        assert result.action is None

    def test_bare_git(self, sim: GitSimulator) -> None:
        assert sim.execute("git").output == "usage: git <command> [<args>]"

    def test_result_carries_state(self, sim: GitSimulator) -> None:
        result = sim.execute("echo x > a.txt")
        assert "a.txt" in result.updatedState.workingDirectory

    def test_prompt_per_dialect(self, clock: FakeClock) -> None:
        assert GitSimulator("posix", clock=clock).prompt == "$ "
        assert GitSimulator(Dialect.DOS, clock=clock).prompt == "C:\\Users\\Student\\git-gud>"


class TestChaining:
    def test_runs_left_to_right(self, sim: GitSimulator) -> None:
        result = sim.execute('echo x > a.txt && git add a.txt && git commit -m "chained"')
        head = tip(result.updatedState)
        assert result.output == f"[main {head.id}] chained"

    def test_outputs_joined(self, sim: GitSimulator) -> None:
        assert sim.execute("echo one && echo two").output == "one\ntwo"

    def test_stops_at_first_failure(self, sim: GitSimulator) -> None:
        result = sim.execute("cat nope && echo x > a.txt")
        assert result.output == "cat: nope: No such file or directory"
        assert "a.txt" not in result.updatedState.workingDirectory

    def test_clear_discards_earlier_output(self, sim: GitSimulator) -> None:
        result = sim.execute("echo one && clear && echo two")
        assert result.output == "two"
        assert result.action == "clear"


class TestStateBoundary:
    def test_get_state_returns_copy(self, sim: GitSimulator) -> None:
        sim.execute("echo x > a.txt")
        state = sim.get_state()
        state.workingDirectory.clear()
        state.directories.add("bogus")
        fresh = sim.get_state()
        assert "a.txt" in fresh.workingDirectory
        assert "bogus" not in fresh.directories

    def test_set_state_copies_input(self, sim: GitSimulator) -> None:
        state = sim.get_state()
        state.workingDirectory["a.txt"] = FileState(content="x", timestamp=1)
        sim.set_state(state)
        state.workingDirectory.clear()
        assert "a.txt" in sim.get_state().workingDirectory

    def test_set_state_from_plain_data(self, sim: GitSimulator, run: Callable[..., str], clock: FakeClock) -> None:
        run(sim, "echo x > a.txt", "git add a.txt", "git commit -m add", "echo y > b.txt", "git add b.txt")
        dumped = sim.get_state().model_dump(mode="json")

        restored = GitSimulator(clock=clock)
        restored.set_state(dumped)
        assert restored.get_state() == sim.get_state()
        assert restored.execute("git status").output.startswith("On branch main\n\nChanges to be committed:")

    def test_commits_survive_later_edits(self, sim: GitSimulator, run: Callable[..., str]) -> None:
        run(sim, "echo v1 > a.txt", "git add a.txt", "git commit -m add")
        commit_id = sim.get_state().branches["main"]
        run(sim, "echo v2 > a.txt", "git add a.txt", "rm a.txt")
        assert sim.get_state().commits[commit_id].files["a.txt"].content == "v1\n"

    def test_empty_repository_state(self) -> None:
        assert GitSimulator().get_state() == RepositoryState()
