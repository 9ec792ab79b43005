from .errors import GitError
from .models import FileState, RepositoryState, StagedDeletion, StagedFile, StagingEntry
from .path_utils import is_within

def staged_file(entry: StagingEntry | None) -> FileState | None:
    if isinstance(entry, StagedFile):
        return entry.file
    return None

def stage_file(repo: RepositoryState, path: str, file: FileState) -> None:
    repo.stagingArea[path] = StagedFile(file=file.model_copy())
    if repo.mergeInProgress is not None:
        repo.mergeInProgress.resolve(path)

def stage_deletion(repo: RepositoryState, path: str) -> None:
    repo.stagingArea[path] = StagedDeletion()
    if repo.mergeInProgress is not None:
        repo.mergeInProgress.resolve(path)

def clear_staging(repo: RepositoryState) -> None:
    repo.stagingArea = {}

def tracked_paths(repo: RepositoryState, committed: dict[str, FileState]) -> set[str]:
    return set(committed) | {p for p, e in repo.stagingArea.items() if isinstance(e, StagedFile)}

def resolve_pathspec(repo: RepositoryState, pathspec: str, committed: dict[str, FileState]) -> tuple[list[str], list[str]]:
    """Split a pathspec into (paths to stage, tracked paths to stage as deleted)."""
    tracked = tracked_paths(repo, committed)
    if pathspec in (".", "*"):
        def matches(path: str) -> bool:
            return True
    elif pathspec in repo.workingDirectory or pathspec in tracked:
        def matches(path: str) -> bool:
            return path == pathspec
    elif pathspec in repo.directories or any(is_within(p, pathspec) for p in tracked):
        def matches(path: str) -> bool:
            return path.startswith(pathspec + "/")
    else:
        raise GitError(f"fatal: pathspec '{pathspec}' did not match any files")

    to_add = [p for p in repo.workingDirectory if matches(p)]
    to_delete = sorted(p for p in tracked if matches(p) and p not in repo.workingDirectory)
    if not to_add and not to_delete and pathspec not in repo.workingDirectory:
        raise GitError(f"fatal: pathspec '{pathspec}' did not match any files")
    return to_add, to_delete
