import logging
from .branching import get_branch_heads
from .commit_helpers import get_commit_info, head_commit
from .errors import GitError
from .file_helpers import write_file
from .models import FileSnapshot, MergeState
from .path_utils import ancestor_dirs
from .repo_utils import Context
from .staging_helpers import stage_file

logger = logging.getLogger(__name__)

CONFLICT_START = "<<<<<<<"
CONFLICT_END = ">>>>>>>"

def conflict_text(ours: str, theirs: str, branch_name: str) -> str:
    return f"{CONFLICT_START} HEAD\n{ours}\n=======\n{theirs}\n{CONFLICT_END} {branch_name}"

def has_conflict_markers(content: str) -> bool:
    return CONFLICT_START in content or CONFLICT_END in content

def find_conflicts(ours: FileSnapshot, theirs: FileSnapshot) -> list[str]:
    return [
        path for path, file in theirs.items()
        if path in ours and ours[path].content != file.content
    ]

def merge_branches(ctx: Context, branch_name: str) -> list[str]:
    """Merge branch_name into the working tree.

    Returns the conflicting paths. When there are none, the other branch's new
    files are written and staged and merge state is recorded with an empty
    conflict list, ready for the caller to commit with two parents.
    """
    repo = ctx.repo
    target_commit_hash = get_branch_heads(repo).get(branch_name)
    if target_commit_hash is None:
        raise GitError(f"fatal: '{branch_name}' does not point to a commit")

    ours = head_commit(repo).files
    theirs = get_commit_info(repo, target_commit_hash).files
    conflicting_files = find_conflicts(ours, theirs)

    if conflicting_files:
        for path in conflicting_files:
            write_file(ctx, path, conflict_text(ours[path].content, theirs[path].content, branch_name))
            repo.directories.update(ancestor_dirs(path))
        repo.mergeInProgress = MergeState(branchToMerge=branch_name, conflictingFiles=conflicting_files)
        logger.info("merge of %s stopped on conflicts in %s", branch_name, conflicting_files)
        return conflicting_files

    repo.mergeInProgress = MergeState(branchToMerge=branch_name, conflictingFiles=[])
    for path, file in theirs.items():
        if path not in ours:
            repo.workingDirectory[path] = file.model_copy()
            repo.directories.update(ancestor_dirs(path))
            stage_file(repo, path, file)
    return []
