from .file_helpers import copy_files
from .models import FileSnapshot, RepositoryState
from .path_utils import ancestor_dirs
from .staging_helpers import clear_staging

GIT_DIR = ".git"

def directories_for(files: FileSnapshot) -> set[str]:
    dirs = {GIT_DIR}
    for path in files:
        dirs.update(ancestor_dirs(path))
    return dirs

def recreate_directory(repo: RepositoryState, commit_hash: str) -> None:
    # uncommitted edits are discarded, not carried over
    files = repo.commits[commit_hash].files
    repo.workingDirectory = copy_files(files)
    repo.directories = directories_for(files)
    clear_staging(repo)
