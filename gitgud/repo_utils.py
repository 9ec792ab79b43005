from dataclasses import dataclass
from typing import Callable
from .errors import NotARepositoryError
from .models import RepositoryState

@dataclass
class Context:
    """The repository a command runs against, plus the clock it stamps writes with."""
    repo: RepositoryState
    clock: Callable[[], int]

def require_repo(ctx: Context) -> RepositoryState:
    if not ctx.repo.commits or not ctx.repo.HEAD:
        raise NotARepositoryError()
    return ctx.repo

def get_current_branch(repo: RepositoryState) -> str:
    return repo.HEAD

def update_head(repo: RepositoryState, branch_name: str) -> None:
    repo.HEAD = branch_name

def is_file(repo: RepositoryState, path: str) -> bool:
    return path in repo.workingDirectory

def is_directory(repo: RepositoryState, path: str) -> bool:
    return path in repo.directories

def path_exists(repo: RepositoryState, path: str) -> bool:
    return is_file(repo, path) or is_directory(repo, path)
