"""Slash-delimited path helpers for the simulated working tree."""


def get_parent_path(path: str) -> str:
    """Return everything before the last slash, or "" for top-level paths."""
    if "/" not in path:
        return ""
    return path[: path.rindex("/")]


def get_base_name(path: str) -> str:
    if "/" not in path:
        return path
    return path[path.rindex("/") + 1 :]


def ancestor_dirs(path: str) -> list[str]:
    """List the directories enclosing path, nearest first."""
    ancestors: list[str] = []
    parent = get_parent_path(path)
    while parent:
        ancestors.append(parent)
        parent = get_parent_path(parent)
    return ancestors


def normalize_path(path: str, dos: bool = False) -> str:
    """Clean up a user-typed path: backslashes (DOS), leading ./ and trailing /."""
    if dos:
        path = path.replace("\\", "/")
    while path.startswith("./"):
        path = path[2:]
    if len(path) > 1:
        path = path.rstrip("/")
    return path


def is_within(path: str, root: str) -> bool:
    """True if path is root itself or lies underneath it."""
    return path == root or path.startswith(root + "/")


def rebase_path(path: str, old_root: str, new_root: str) -> str:
    """Move path from under old_root to under new_root."""
    return new_root + path[len(old_root) :]
