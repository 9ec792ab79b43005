from typing import Iterator
from .commit_helpers import ROOT_COMMIT, create_commit
from .errors import GitError
from .models import Commit, RepositoryState
from .repo_utils import Context

def first_parent_history(repo: RepositoryState, commit_hash: str) -> Iterator[Commit]:
    """Yield commits from commit_hash back along parents[0], stopping before root."""
    while commit_hash and commit_hash != ROOT_COMMIT:
        commit = repo.commits.get(commit_hash)
        if commit is None:
            return
        yield commit
        commit_hash = commit.parents[0] if commit.parents else ""

def commits_to_replay(repo: RepositoryState, tip: str, onto: str) -> list[Commit]:
    """Commits on tip's first-parent line that onto's line does not share, oldest first.

    Both lines are walked along parents[0] only; no general merge-base search
    is attempted.
    """
    # stops at any commit on onto's first-parent line, not only at a child of onto
    shared = {ROOT_COMMIT, onto} | {c.id for c in first_parent_history(repo, onto)}
    replay: list[Commit] = []
    for commit in first_parent_history(repo, tip):
        if commit.id in shared:
            break
        replay.append(commit)
    replay.reverse()
    return replay

def replay_commits(ctx: Context, commits: list[Commit], onto: str) -> str:
    base = onto
    for commit in commits:
        new_files = {**ctx.repo.commits[base].files, **commit.files}
        base = create_commit(ctx, commit.message, [base], new_files).id
    return base

def find_commit_by_prefix(repo: RepositoryState, prefix: str) -> Commit:
    for commit in repo.commits.values():
        if commit.id.startswith(prefix):
            return commit
    raise GitError(f"fatal: bad object {prefix}")

def tags_for(repo: RepositoryState, commit_hash: str) -> list[str]:
    return [name for name, target in repo.tags.items() if target == commit_hash]
