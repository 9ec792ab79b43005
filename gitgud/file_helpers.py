import time
from .models import FileSnapshot, FileState
from .repo_utils import Context

class MonotonicClock:
    """Millisecond wall clock that never returns the same value twice."""

    def __init__(self) -> None:
        self._last = 0

    def __call__(self) -> int:
        now = time.time_ns() // 1_000_000
        self._last = max(now, self._last + 1)
        return self._last

def copy_files(files: FileSnapshot) -> FileSnapshot:
    return {path: file.model_copy() for path, file in files.items()}

def write_file(ctx: Context, path: str, content: str, append: bool = False) -> None:
    existing = ctx.repo.workingDirectory.get(path)
    if append and existing is not None:
        content = existing.content + content
    ctx.repo.workingDirectory[path] = FileState(content=content, timestamp=ctx.clock())

def touch_file(ctx: Context, path: str) -> None:
    existing = ctx.repo.workingDirectory.get(path)
    ctx.repo.workingDirectory[path] = FileState(
        content=existing.content if existing else "",
        timestamp=ctx.clock(),
    )

def files_differ(a: FileState | None, b: FileState | None) -> bool:
    if a is None or b is None:
        return a is not b
    return a.content != b.content
