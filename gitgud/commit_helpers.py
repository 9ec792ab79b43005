import json
import logging
from .errors import GitError
from .file_helpers import copy_files
from .models import Commit, FileSnapshot, RepositoryState, StagedDeletion, StagingInfo
from .repo_utils import Context

logger = logging.getLogger(__name__)

ROOT_COMMIT = "root"

def simple_hash(text: str) -> str:
    """Rolling hash over UTF-16 code units, as a zero-padded 7-digit hex id.

    Stable for identical input and good enough to keep ids apart within one
    teaching session. Not a cryptographic digest.
    """
    value = 0
    data = text.encode("utf-16-le")
    for i in range(0, len(data), 2):
        value = (value * 31 + (data[i] | data[i + 1] << 8)) & 0xFFFFFFFF
    return f"{value:07x}"[-7:]

def current_commit_hash(repo: RepositoryState) -> str:
    return repo.branches[repo.HEAD]

def get_commit_info(repo: RepositoryState, commit_hash: str) -> Commit:
    if commit_hash not in repo.commits:
        raise GitError(f"fatal: bad object {commit_hash}")
    return repo.commits[commit_hash]

def head_commit(repo: RepositoryState) -> Commit:
    return get_commit_info(repo, current_commit_hash(repo))

def parent_files(repo: RepositoryState, commit: Commit) -> FileSnapshot:
    if not commit.parents or commit.parents[0] not in repo.commits:
        return {}
    return repo.commits[commit.parents[0]].files

def overlay_staging(files: FileSnapshot, staging: StagingInfo) -> FileSnapshot:
    new_files = copy_files(files)
    for path, entry in staging.items():
        if isinstance(entry, StagedDeletion):
            new_files.pop(path, None)
        else:
            new_files[path] = entry.file.model_copy()
    return new_files

def get_new_commit_hash(message: str, parents: list[str], files: FileSnapshot, timestamp: int) -> str:
    serialized = json.dumps(
        {path: file.model_dump() for path, file in files.items()},
        separators=(",", ":"),
        ensure_ascii=False,
    )
    return simple_hash(f"{message}{','.join(parents)}{serialized}{timestamp}")

def create_commit(ctx: Context, message: str, parents: list[str], files: FileSnapshot) -> Commit:
    timestamp = ctx.clock()
    commit = Commit(
        id=get_new_commit_hash(message, parents, files, timestamp),
        message=message,
        parents=list(parents),
        files=copy_files(files),
        timestamp=timestamp,
    )
    ctx.repo.commits[commit.id] = commit
    logger.debug("created commit %s with parents %s", commit.id, commit.parents)
    return commit

def commit_from_ref(repo: RepositoryState, ref: str) -> str:
    """Resolve a branch name, tag name or commit-id prefix to a commit id."""
    if ref in repo.branches:
        return repo.branches[ref]
    if ref in repo.tags:
        return repo.tags[ref]
    for commit_id in repo.commits:
        if commit_id.startswith(ref):
            return commit_id
    raise GitError(f"fatal: '{ref}' is not a commit and a branch cannot be created from it")

def changed_files(repo: RepositoryState, commit: Commit) -> FileSnapshot:
    """Paths a commit added or changed relative to its first parent."""
    base = parent_files(repo, commit)
    return {
        path: file for path, file in commit.files.items()
        if path not in base or base[path].content != file.content
    }
