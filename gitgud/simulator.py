"""The command dispatcher callers drive the simulator through."""

import logging
from typing import Any, Callable

from .commands import map_command
from .errors import GitGudError
from .file_helpers import MonotonicClock
from .merging import has_conflict_markers
from .models import CommandResult, RepositoryState
from .path_utils import normalize_path
from .repo_utils import Context
from .shell import CONTENT_WRITERS, DOS_CWD, Dialect, ScreenAction, ShellResult, run_shell

logger = logging.getLogger(__name__)

CHAIN_OPERATOR = "&&"


class GitSimulator:
    """One simulated terminal session.

    The simulator owns its repository state outright. Callers only ever see
    deep copies, and state handed in through set_state is copied before use.
    The dialect is fixed for the lifetime of the instance; to switch, build a
    new simulator.
    """

    def __init__(self, dialect: Dialect | str = Dialect.POSIX, clock: Callable[[], int] | None = None) -> None:
        self.dialect = Dialect(dialect)
        self._ctx = Context(repo=RepositoryState(), clock=clock or MonotonicClock())

    @property
    def prompt(self) -> str:
        return f"{DOS_CWD}>" if self.dialect is Dialect.DOS else "$ "

    def get_state(self) -> RepositoryState:
        return self._ctx.repo.snapshot()

    def set_state(self, state: RepositoryState | dict[str, Any]) -> None:
        if isinstance(state, RepositoryState):
            self._ctx.repo = state.snapshot()
        else:
            self._ctx.repo = RepositoryState.model_validate(state)

    def execute(self, command: str) -> CommandResult:
        """Run one input line, which may chain several commands with &&.

        A failing command stops the chain. Failures never raise; their
        message becomes the output.
        """
        outputs: list[str] = []
        action = None
        for tokens in self._split_chain(command.split()):
            try:
                result = self._dispatch(tokens)
            except GitGudError as e:
                logger.debug("rejected %r: %s", " ".join(tokens), e.message)
                outputs.append(e.message)
                break
            if result is ScreenAction.CLEAR:
                outputs = []
                action = "clear"
            elif result:
                outputs.append(result)
        return CommandResult(output="\n".join(outputs), updatedState=self.get_state(), action=action)

    @staticmethod
    def _split_chain(tokens: list[str]) -> list[list[str]]:
        segments: list[list[str]] = [[]]
        for token in tokens:
            if token == CHAIN_OPERATOR:
                segments.append([])
            else:
                segments[-1].append(token)
        return segments

    def _dispatch(self, tokens: list[str]) -> ShellResult:
        if not tokens:
            return ""
        verb, *args = tokens

        if verb == "git":
            if not args:
                return "usage: git <command> [<args>]"
            logger.debug("git %s %s", args[0], args[1:])
            return map_command(args[0])(self._ctx, args[1:])

        result = run_shell(self._ctx, self.dialect, verb, args)
        if verb.lower() in CONTENT_WRITERS and args:
            self._mark_resolved(normalize_path(args[-1], self.dialect is Dialect.DOS))
        return result

    def _mark_resolved(self, path: str) -> None:
        # simulated resolution: the edited file no longer carries conflict markers
        merge_state = self._ctx.repo.mergeInProgress
        if merge_state is None or path not in merge_state.conflictingFiles:
            return
        file = self._ctx.repo.workingDirectory.get(path)
        if file is not None and not has_conflict_markers(file.content):
            merge_state.resolve(path)
            logger.debug("conflict in %s resolved", path)
