import logging
from .errors import GitError
from .repo_utils import Context, get_current_branch, update_head
from .commit_helpers import current_commit_hash
from .models import BranchInfo, RepositoryState
from .recreatedirectory import recreate_directory

logger = logging.getLogger(__name__)

def get_branch_heads(repo: RepositoryState) -> BranchInfo:
    return repo.branches

def update_branch_head(repo: RepositoryState, branch_name: str, new_commit_hash: str) -> None:
    repo.branches[branch_name] = new_commit_hash

def switch_branch(ctx: Context, branch_name: str) -> None:
    branch_heads = get_branch_heads(ctx.repo)
    if branch_name not in branch_heads:
        raise GitError(f"error: pathspec '{branch_name}' did not match any file(s) known to git")
    recreate_directory(ctx.repo, branch_heads[branch_name])
    update_head(ctx.repo, branch_name)
    logger.debug("switched to branch %s", branch_name)

def create_branch(repo: RepositoryState, branch_name: str, start_commit: str | None = None) -> None:
    if start_commit is None:
        start_commit = current_commit_hash(repo)
    if branch_name in get_branch_heads(repo):
        raise GitError(f"fatal: A branch named '{branch_name}' already exists.")
    update_branch_head(repo, branch_name, start_commit)

def delete_branch(repo: RepositoryState, branch_name: str) -> str:
    branch_heads = get_branch_heads(repo)
    if branch_name not in branch_heads:
        raise GitError(f"error: branch '{branch_name}' not found.")
    if get_current_branch(repo) == branch_name:
        raise GitError(f"error: Cannot delete branch '{branch_name}' checked out")
    return branch_heads.pop(branch_name)
