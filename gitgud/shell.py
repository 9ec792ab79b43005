"""Shell verbs for the simulated terminal.

Two dialect tables share one set of primitives. POSIX verbs follow bash and
coreutils wording; DOS verbs wrap the same primitives and translate their
failures into cmd.exe wording. Every handler touches only the working
directory, the directory set and (when files disappear) the staging area.
"""

import logging
from datetime import datetime
from enum import StrEnum
from typing import Callable, TypeAlias

from .errors import ShellError
from .file_helpers import touch_file, write_file
from .models import FileState, RepositoryState
from .path_utils import (
    ancestor_dirs,
    get_base_name,
    get_parent_path,
    is_within,
    normalize_path,
    rebase_path,
)
from .repo_utils import Context, is_directory, is_file, path_exists

logger = logging.getLogger(__name__)


class Dialect(StrEnum):
    POSIX = "posix"
    DOS = "dos"


class ScreenAction(StrEnum):
    CLEAR = "clear"


ShellResult: TypeAlias = str | ScreenAction
ShellCommand: TypeAlias = Callable[[Context, list[str]], ShellResult]

POSIX_CWD = "/home/student/git-gud"
DOS_CWD = "C:\\Users\\Student\\git-gud"
DOS_SYNTAX_ERROR = "The syntax of the command is incorrect."
DOS_NOT_FOUND = "The system cannot find the file specified."
DOS_NO_PATH = "The system cannot find the path specified."

# verbs whose redirected output can rewrite a conflicted file
CONTENT_WRITERS = frozenset({"echo", "echo."})


def _short_flags(args: list[str]) -> set[str]:
    flags: set[str] = set()
    for arg in args:
        if arg.startswith("-") and not arg.startswith("--"):
            flags.update(arg[1:])
    return flags


def _operands(args: list[str], dos: bool = False) -> list[str]:
    prefix = "/" if dos else "-"
    return [normalize_path(arg, dos) for arg in args if not arg.startswith(prefix)]


def _dos_switches(args: list[str]) -> set[str]:
    return {arg[1:].lower() for arg in args if arg.startswith("/")}


def _copy_file(ctx: Context, source: str, dest: str) -> None:
    ctx.repo.workingDirectory[dest] = FileState(
        content=ctx.repo.workingDirectory[source].content,
        timestamp=ctx.clock(),
    )


def _remove_tree(repo: RepositoryState, path: str) -> None:
    """Drop path and everything beneath it from files, directories and the index."""
    for file_path in [f for f in repo.workingDirectory if is_within(f, path)]:
        del repo.workingDirectory[file_path]
    repo.directories = {d for d in repo.directories if not is_within(d, path)}
    for staged_path in [p for p in repo.stagingArea if is_within(p, path)]:
        del repo.stagingArea[staged_path]


def _check_writable(repo: RepositoryState, path: str, dos: bool) -> None:
    if is_directory(repo, path):
        raise ShellError("Access is denied." if dos else f"bash: {path}: Is a directory")
    parent = get_parent_path(path)
    if parent and not is_directory(repo, parent):
        raise ShellError(DOS_NO_PATH if dos else f"bash: {path}: No such file or directory")


def _timestamp(ms: int) -> datetime:
    return datetime.fromtimestamp(ms / 1000) if ms else datetime.now()


def _children(repo: RepositoryState, directory: str, show_hidden: bool) -> list[tuple[str, bool]]:
    """Immediate (path, is_dir) entries of directory; "" is the top level."""
    entries = [(f, False) for f in repo.workingDirectory if get_parent_path(f) == directory]
    entries += [(d, True) for d in repo.directories if get_parent_path(d) == directory]
    if not show_hidden:
        entries = [(p, d) for p, d in entries if not get_base_name(p).startswith(".")]
    return entries


# --- shared primitives ---

def echo(ctx: Context, args: list[str], dos: bool = False, blank_line: bool = False) -> ShellResult:
    redirect_index = next((i for i, arg in enumerate(args) if arg in (">", ">>")), -1)

    if redirect_index > -1:
        content_parts = args[:redirect_index]
        is_append = args[redirect_index] == ">>"
        if redirect_index + 1 >= len(args):
            raise ShellError(DOS_SYNTAX_ERROR if dos else "bash: syntax error near unexpected token `newline'")
        target = normalize_path(args[redirect_index + 1], dos)
        _check_writable(ctx.repo, target, dos)

        content = "" if blank_line else " ".join(content_parts).replace('"', "")
        if not dos and not blank_line:
            content += "\n"
        write_file(ctx, target, content, append=is_append)
        return ""

    if blank_line:
        return ""
    text = " ".join(args)
    return text if dos else text.replace('"', "")


def make_directory(ctx: Context, path: str, parents: bool = False, dos: bool = False) -> None:
    repo = ctx.repo
    if path_exists(repo, path):
        if parents and is_directory(repo, path):
            return
        raise ShellError(
            f"A subdirectory or file {path} already exists."
            if dos else f"mkdir: cannot create directory ‘{path}’: File exists"
        )

    missing = [d for d in ancestor_dirs(path) if not is_directory(repo, d)]
    if any(is_file(repo, d) for d in missing):
        raise ShellError(DOS_NO_PATH if dos else f"mkdir: cannot create directory ‘{path}’: Not a directory")
    if missing and not parents:
        raise ShellError(DOS_NO_PATH if dos else f"mkdir: cannot create directory ‘{path}’: No such file or directory")

    repo.directories.update(missing)
    repo.directories.add(path)


def remove(ctx: Context, args: list[str]) -> ShellResult:
    repo = ctx.repo
    flags = _short_flags(args)
    recursive = "r" in flags or "R" in flags
    force = "f" in flags
    paths = _operands(args)
    if not paths:
        raise ShellError("rm: missing operand")

    for path in paths:
        if not path_exists(repo, path):
            if force:
                continue
            raise ShellError(f"rm: cannot remove '{path}': No such file or directory")
        if is_directory(repo, path) and not recursive:
            raise ShellError(f"rm: cannot remove '{path}': Is a directory")

    for path in paths:
        _remove_tree(repo, path)
    return ""


def copy(ctx: Context, args: list[str]) -> ShellResult:
    repo = ctx.repo
    recursive = bool({"r", "R"} & _short_flags(args))
    paths = _operands(args)
    if len(paths) != 2:
        raise ShellError("cp: missing destination file operand")
    source, dest = paths

    if not path_exists(repo, source):
        raise ShellError(f"cp: cannot stat '{source}': No such file or directory")

    if is_file(repo, source):
        dest_path = f"{dest}/{get_base_name(source)}" if is_directory(repo, dest) else dest
        if dest_path == source:
            raise ShellError(f"cp: '{source}' and '{dest_path}' are the same file")
        parent = get_parent_path(dest_path)
        if parent and not is_directory(repo, parent):
            raise ShellError(f"cp: cannot create regular file '{dest_path}': No such file or directory")
        _copy_file(ctx, source, dest_path)
        return ""

    if not recursive:
        raise ShellError(f"cp: -r not specified; omitting directory '{source}'")
    if is_file(repo, dest):
        raise ShellError(f"cp: cannot overwrite non-directory '{dest}' with directory '{source}'")
    if is_within(dest, source):
        raise ShellError(f"cp: cannot copy a directory, '{source}', into itself, '{dest}'")
    parent = get_parent_path(dest)
    if not is_directory(repo, dest) and parent and not is_directory(repo, parent):
        raise ShellError(f"cp: cannot create directory '{dest}': No such file or directory")

    repo.directories.add(dest)
    for directory in [d for d in repo.directories if d.startswith(source + "/")]:
        repo.directories.add(rebase_path(directory, source, dest))
    for file_path in [f for f in repo.workingDirectory if f.startswith(source + "/")]:
        _copy_file(ctx, file_path, rebase_path(file_path, source, dest))
    return ""


def move(ctx: Context, args: list[str]) -> ShellResult:
    paths = _operands(args)
    if len(paths) != 2:
        raise ShellError("mv: missing destination file operand")
    source, dest = paths
    if not path_exists(ctx.repo, source):
        raise ShellError(f"mv: cannot stat '{source}': No such file or directory")
    if source == dest:
        raise ShellError(f"mv: '{source}' and '{dest}' are the same file")

    copy(ctx, ["-r", source, dest])
    _remove_tree(ctx.repo, source)
    return ""


# --- POSIX ---

def touch(ctx: Context, args: list[str]) -> ShellResult:
    paths = _operands(args)
    if not paths:
        raise ShellError("touch: missing file operand")
    for path in paths:
        parent = get_parent_path(path)
        if parent and not is_directory(ctx.repo, parent):
            raise ShellError(f"touch: cannot touch '{path}': No such file or directory")
    for path in paths:
        if not is_directory(ctx.repo, path):
            touch_file(ctx, path)
    return ""


def cat(ctx: Context, args: list[str]) -> ShellResult:
    paths = _operands(args)
    if not paths:
        raise ShellError("cat: missing file operand")
    contents: list[str] = []
    for path in paths:
        if is_directory(ctx.repo, path):
            raise ShellError(f"cat: {path}: Is a directory")
        file = ctx.repo.workingDirectory.get(path)
        if file is None:
            raise ShellError(f"cat: {path}: No such file or directory")
        contents.append(file.content)
    return "".join(contents)


def mkdir(ctx: Context, args: list[str]) -> ShellResult:
    paths = _operands(args)
    if not paths:
        raise ShellError("mkdir: missing operand")
    parents = "p" in _short_flags(args)
    for path in paths:
        make_directory(ctx, path, parents=parents)
    return ""


def ls(ctx: Context, args: list[str]) -> ShellResult:
    repo = ctx.repo
    flags = _short_flags(args)
    targets = _operands(args)
    target = targets[0] if targets else ""
    if target == ".":
        target = ""

    if target and is_file(repo, target):
        entries = [(target, False)]
    elif target and not is_directory(repo, target):
        raise ShellError(f"ls: cannot access '{target}': No such file or directory")
    else:
        entries = _children(repo, target, show_hidden="a" in flags)

    def timestamp(entry: tuple[str, bool]) -> int:
        path, is_dir = entry
        return 0 if is_dir else repo.workingDirectory[path].timestamp

    if "t" in flags:
        entries.sort(key=timestamp, reverse=True)
    else:
        entries.sort(key=lambda entry: entry[0].lower())

    if "l" not in flags:
        return "\t".join(get_base_name(path) for path, _ in entries)

    lines: list[str] = []
    for path, is_dir in entries:
        perms = "drwxr-xr-x" if is_dir else "-rw-r--r--"
        size = 4096 if is_dir else len(repo.workingDirectory[path].content)
        when = _timestamp(timestamp((path, is_dir)))
        lines.append(
            f"{perms} 1 student student {size:>5} {when:%b} {when.day}, {when:%H:%M} {get_base_name(path)}"
        )
    return "\n".join(lines)


def pwd(ctx: Context, args: list[str]) -> ShellResult:
    return POSIX_CWD


def clear(ctx: Context, args: list[str]) -> ShellResult:
    return ScreenAction.CLEAR


# --- DOS ---

def _dos_date(when: datetime) -> str:
    return f"{when.month}/{when.day}/{when.year}  {when.hour % 12 or 12}:{when:%M:%S %p}"


def dos_echo(ctx: Context, args: list[str]) -> ShellResult:
    return echo(ctx, args, dos=True)


def dos_echo_blank(ctx: Context, args: list[str]) -> ShellResult:
    return echo(ctx, args, dos=True, blank_line=True)


def dir_listing(ctx: Context, args: list[str]) -> ShellResult:
    repo = ctx.repo
    targets = _operands(args, dos=True)
    target = targets[0] if targets and targets[0] != "." else ""
    location = DOS_CWD + ("\\" + target.replace("/", "\\") if target else "")
    header = (
        " Volume in drive C has no label.\n"
        " Volume Serial Number is BEEF-CAFE\n\n"
        f" Directory of {location}\n\n"
    )
    if target and not is_directory(repo, target):
        return header + "File Not Found"

    entries = sorted(_children(repo, target, show_hidden="a" in _dos_switches(args)))
    if not entries:
        return header + "File Not Found"

    dir_lines = [
        f"{_dos_date(datetime.now())}    <DIR>          {get_base_name(path)}"
        for path, is_dir in entries if is_dir
    ]
    file_lines = []
    for path, is_dir in entries:
        if is_dir:
            continue
        file = repo.workingDirectory[path]
        file_lines.append(f"{_dos_date(_timestamp(file.timestamp))}    {len(file.content):>14} {get_base_name(path)}")
    return header + "".join(line + "\n" for line in dir_lines) + "\n".join(file_lines)


def type_file(ctx: Context, args: list[str]) -> ShellResult:
    if len(args) >= 3 and args[0].upper() == "NUL" and args[1] == ">":
        target = normalize_path(args[2], dos=True)
        _check_writable(ctx.repo, target, dos=True)
        write_file(ctx, target, "")
        return ""
    paths = _operands(args, dos=True)
    if not paths:
        raise ShellError(DOS_SYNTAX_ERROR)
    if is_directory(ctx.repo, paths[0]):
        raise ShellError("Access is denied.")
    file = ctx.repo.workingDirectory.get(paths[0])
    if file is None:
        raise ShellError(DOS_NOT_FOUND)
    return file.content


def dos_mkdir(ctx: Context, args: list[str]) -> ShellResult:
    paths = _operands(args, dos=True)
    if not paths:
        raise ShellError(DOS_SYNTAX_ERROR)
    for path in paths:
        make_directory(ctx, path, dos=True)
    return ""


def delete(ctx: Context, args: list[str]) -> ShellResult:
    paths = _operands(args, dos=True)
    if not paths:
        raise ShellError(DOS_SYNTAX_ERROR)
    path = paths[0]
    if not is_file(ctx.repo, path):
        windows_path = path.replace("/", "\\")
        raise ShellError(f"Could Not Find {DOS_CWD}\\{windows_path}")
    _remove_tree(ctx.repo, path)
    return ""


def remove_directory(ctx: Context, args: list[str]) -> ShellResult:
    repo = ctx.repo
    recursive = "s" in _dos_switches(args)
    paths = _operands(args, dos=True)
    if not paths:
        raise ShellError(DOS_SYNTAX_ERROR)
    path = paths[0]
    if not is_directory(repo, path):
        raise ShellError(DOS_NOT_FOUND)
    has_contents = any(f.startswith(path + "/") for f in repo.workingDirectory) or any(
        d.startswith(path + "/") for d in repo.directories
    )
    if has_contents and not recursive:
        raise ShellError("The directory is not empty.")
    _remove_tree(repo, path)
    return ""


def dos_copy(ctx: Context, args: list[str]) -> ShellResult:
    paths = _operands(args, dos=True)
    if len(paths) != 2:
        raise ShellError(DOS_SYNTAX_ERROR)
    try:
        copy(ctx, paths)
    except ShellError:
        raise ShellError(DOS_NOT_FOUND)
    return "        1 file(s) copied."


def xcopy(ctx: Context, args: list[str]) -> ShellResult:
    if "s" not in _dos_switches(args):
        return "0 File(s) copied"
    paths = _operands(args, dos=True)
    try:
        copy(ctx, ["-r", *paths])
    except ShellError:
        raise ShellError("Invalid path")
    source = paths[0]
    copied = 1 if is_file(ctx.repo, source) else sum(1 for f in ctx.repo.workingDirectory if f.startswith(source + "/"))
    return f"{copied} File(s) copied"


def dos_move(ctx: Context, args: list[str]) -> ShellResult:
    paths = _operands(args, dos=True)
    if len(paths) != 2:
        raise ShellError(DOS_SYNTAX_ERROR)
    was_directory = is_directory(ctx.repo, paths[0])
    try:
        move(ctx, paths)
    except ShellError:
        raise ShellError(DOS_NOT_FOUND)
    return "        1 dir(s) moved." if was_directory else "        1 file(s) moved."


def rename(ctx: Context, args: list[str]) -> ShellResult:
    paths = _operands(args, dos=True)
    if len(paths) != 2:
        raise ShellError(DOS_SYNTAX_ERROR)
    source, new_name = paths
    parent = get_parent_path(source)
    if parent and "/" not in new_name:
        new_name = f"{parent}/{new_name}"
    try:
        move(ctx, [source, new_name])
    except ShellError:
        raise ShellError(DOS_NOT_FOUND)
    return ""


POSIX_COMMANDS: dict[str, ShellCommand] = {
    "ls": ls,
    "touch": touch,
    "echo": echo,
    "cat": cat,
    "mkdir": mkdir,
    "rm": remove,
    "cp": copy,
    "mv": move,
    "pwd": pwd,
    "clear": clear,
}

DOS_COMMANDS: dict[str, ShellCommand] = {
    "dir": dir_listing,
    "echo": dos_echo,
    "echo.": dos_echo_blank,
    "type": type_file,
    "md": dos_mkdir,
    "mkdir": dos_mkdir,
    "del": delete,
    "erase": delete,
    "rd": remove_directory,
    "rmdir": remove_directory,
    "copy": dos_copy,
    "xcopy": xcopy,
    "move": dos_move,
    "ren": rename,
    "rename": rename,
    "cls": clear,
}


def run_shell(ctx: Context, dialect: Dialect, verb: str, args: list[str]) -> ShellResult:
    if dialect is Dialect.DOS:
        handler = DOS_COMMANDS.get(verb.lower())
        if handler is None:
            raise ShellError(
                f"'{verb}' is not recognized as an internal or external command,\n"
                "operable program or batch file."
            )
    else:
        handler = POSIX_COMMANDS.get(verb)
        if handler is None:
            raise ShellError(f"bash: command not found: {verb}")
    logger.debug("shell %s %s", verb, args)
    return handler(ctx, args)
