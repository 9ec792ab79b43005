import logging
import time
from typing import Callable, TypeAlias
from .errors import GitError
from .repo_utils import (
    Context,
    require_repo,
    update_head,
)
from .file_helpers import (
    copy_files,
    files_differ,
)
from .staging_helpers import (
    clear_staging,
    resolve_pathspec,
    stage_deletion,
    stage_file,
    staged_file,
    tracked_paths,
)
from .commit_helpers import (
    ROOT_COMMIT,
    changed_files,
    commit_from_ref,
    create_commit,
    current_commit_hash,
    head_commit,
    overlay_staging,
    parent_files,
)
from .branching import (
    switch_branch,
    create_branch,
    update_branch_head,
    get_branch_heads,
    delete_branch,
)
from .graph_utils import (
    find_commit_by_prefix,
    first_parent_history,
    commits_to_replay,
    replay_commits,
    tags_for,
)
from .merging import merge_branches
from .models import Commit, RepositoryState, StagedDeletion, StashEntry
from .path_utils import ancestor_dirs, normalize_path
from .recreatedirectory import GIT_DIR, directories_for, recreate_directory

logger = logging.getLogger(__name__)

GitCommand: TypeAlias = Callable[[Context, list[str]], str]

AUTHOR_LINE = "Author: Git Gud <git.gud@example.com>"
COMMIT_FLAGS = ("--amend", "--no-edit")

def map_command(command: str) -> GitCommand:
    commandsMap: dict[str, GitCommand] = {
        "init": init,
        "add": add,
        "rm": rm,
        "commit": commit,
        "branch": branch,
        "checkout": checkout,
        "switch": switch,
        "log": log,
        "status": status,
        "merge": merge,
        "stash": stash,
        "revert": revert,
        "tag": tag,
        "clean": clean,
        "rebase": rebase,
        "cherry-pick": cherry_pick,
    }
    if command not in commandsMap:
        raise GitError(f"git: '{command}' is not a git command. See 'git --help'.")
    if command == "init":
        return init
    return _requires_repo(commandsMap[command])

def _requires_repo(command: GitCommand) -> GitCommand:
    def run(ctx: Context, args: list[str]) -> str:
        require_repo(ctx)
        return command(ctx, args)
    return run

def _refuse_during_merge(repo: RepositoryState, action: str) -> None:
    if repo.mergeInProgress is not None:
        raise GitError(f"error: {action} is not possible because you have unmerged files.")

def init(ctx: Context, args: list[str]) -> str:
    ctx.repo = RepositoryState()
    root = Commit(
        id=ROOT_COMMIT,
        message="Initial empty commit",
        parents=[],
        files={},
        timestamp=ctx.clock(),
    )
    ctx.repo.commits[ROOT_COMMIT] = root
    update_branch_head(ctx.repo, "main", ROOT_COMMIT)
    update_head(ctx.repo, "main")
    ctx.repo.directories.add(GIT_DIR)
    logger.info("initialized empty repository")
    return "Initialized empty Git repository in /home/student/git-gud/.git/"


def add(ctx: Context, args: list[str]) -> str:
    repo = ctx.repo
    pathspecs = [normalize_path(arg) for arg in args if not arg.startswith("-")]
    if not pathspecs:
        return "Nothing specified, nothing added."

    committed = head_commit(repo).files
    to_add: list[str] = []
    to_delete: list[str] = []
    for pathspec in pathspecs:
        added, deleted = resolve_pathspec(repo, pathspec, committed)
        to_add.extend(added)
        to_delete.extend(deleted)

    for path in to_add:
        stage_file(repo, path, repo.workingDirectory[path])
    for path in to_delete:
        stage_deletion(repo, path)
    return ""


def rm(ctx: Context, args: list[str]) -> str:
    repo = ctx.repo
    cached = "--cached" in args
    paths = [normalize_path(arg) for arg in args if not arg.startswith("-")]
    if not paths:
        raise GitError("usage: git rm [--cached] <file>...")

    committed = head_commit(repo).files
    tracked = tracked_paths(repo, committed)
    for path in paths:
        if path not in tracked:
            raise GitError(f"fatal: pathspec '{path}' did not match any files")

    for path in paths:
        if path in committed:
            stage_deletion(repo, path)
        else:
            repo.stagingArea.pop(path, None)
        if not cached:
            repo.workingDirectory.pop(path, None)
    return "\n".join(f"rm '{path}'" for path in paths)


def parse_commit_message(args: list[str]) -> str | None:
    if "-m" not in args:
        return None
    message_parts: list[str] = []
    for arg in args[args.index("-m") + 1:]:
        if arg in COMMIT_FLAGS:
            break
        message_parts.append(arg)
    if not message_parts:
        return None
    return " ".join(message_parts).replace('"', "")

def commit_staged(ctx: Context, message: str | None, amend: bool = False) -> str:
    repo = ctx.repo
    merge_state = repo.mergeInProgress
    if merge_state is not None and not merge_state.resolved:
        raise GitError("error: you need to resolve your current index first")
    if not repo.stagingArea and merge_state is None:
        return (
            f"On branch {repo.HEAD}\n"
            f"Your branch is up to date with 'origin/{repo.HEAD}'.\n\n"
            "nothing to commit, working tree clean"
        )

    current_commit = head_commit(repo)
    if amend:
        parents = list(current_commit.parents)
        base_files = parent_files(repo, current_commit)
        if message is None:
            message = current_commit.message
    elif merge_state is not None:
        merging_commit = get_branch_heads(repo).get(merge_state.branchToMerge)
        parents = [current_commit.id] + ([merging_commit] if merging_commit else [])
        base_files = current_commit.files
        if message is None:
            message = f"Merge branch '{merge_state.branchToMerge}' into {repo.HEAD}"
    else:
        parents = [current_commit.id]
        base_files = current_commit.files
    if message is None:
        message = "Unnamed commit"

    new_files = overlay_staging(base_files, repo.stagingArea)
    new_commit = create_commit(ctx, message, parents, new_files)
    update_branch_head(repo, repo.HEAD, new_commit.id)
    clear_staging(repo)
    repo.mergeInProgress = None
    return f"[{repo.HEAD} {new_commit.id}] {message}"

def commit(ctx: Context, args: list[str]) -> str:
    return commit_staged(ctx, parse_commit_message(args), amend="--amend" in args)


def branch(ctx: Context, args: list[str]) -> str:
    repo = ctx.repo
    if not args:
        return "\n".join(
            f"{'* ' if name == repo.HEAD else '  '}{name}" for name in get_branch_heads(repo)
        )
    if args[0] in ("-d", "-D", "--delete"):
        if len(args) < 2:
            raise GitError("fatal: branch name required")
        old_commit = delete_branch(repo, args[1])
        return f"Deleted branch {args[1]} (was {old_commit})."

    branch_name = args[0]
    start_commit = commit_from_ref(repo, args[1]) if len(args) > 1 else None
    create_branch(repo, branch_name, start_commit)
    return ""


def _switch_or_create(ctx: Context, args: list[str], create_flag: str) -> str:
    repo = ctx.repo
    if not args:
        raise GitError("fatal: missing branch name")

    if create_flag in args:
        rest = args[args.index(create_flag) + 1:]
        if not rest:
            raise GitError("fatal: missing branch name")
        branch_name = rest[0]
        if branch_name in get_branch_heads(repo):
            raise GitError(f"fatal: A branch named '{branch_name}' already exists.")
        start_commit = commit_from_ref(repo, rest[1]) if len(rest) > 1 else current_commit_hash(repo)
        refresh = start_commit != current_commit_hash(repo)
        create_branch(repo, branch_name, start_commit)
        update_head(repo, branch_name)
        if refresh:
            recreate_directory(repo, start_commit)
        return f"Switched to a new branch '{branch_name}'"

    switch_branch(ctx, args[0])
    return f"Switched to branch '{args[0]}'"

def checkout(ctx: Context, args: list[str]) -> str:
    return _switch_or_create(ctx, args, "-b")

def switch(ctx: Context, args: list[str]) -> str:
    return _switch_or_create(ctx, args, "-c")


def _parse_count(value: str) -> int:
    if not value.isdigit():
        raise GitError(f"fatal: '{value}': not an integer")
    return int(value)

def log(ctx: Context, args: list[str]) -> str:
    repo = ctx.repo
    branch_to_log = repo.HEAD
    oneline = False
    limit: int | None = None

    remaining = list(args)
    while remaining:
        arg = remaining.pop(0)
        if arg == "--oneline":
            oneline = True
        elif arg == "-n":
            if not remaining:
                raise GitError("fatal: switch 'n' requires a value")
            limit = _parse_count(remaining.pop(0))
        elif arg.startswith("-n") and len(arg) > 2:
            limit = _parse_count(arg[2:])
        elif arg.startswith("-") and arg[1:].isdigit():
            limit = int(arg[1:])
        elif arg.startswith("-"):
            continue
        elif arg in repo.branches or arg in repo.tags:
            branch_to_log = arg
        else:
            raise GitError(
                f"fatal: ambiguous argument '{arg}': unknown revision or path not in the working tree."
            )

    start = repo.branches.get(branch_to_log) or repo.tags[branch_to_log]
    entries: list[str] = []
    for commit_info in first_parent_history(repo, start):
        if limit is not None and len(entries) >= limit:
            break
        tags = ", ".join(f"tag: {name}" for name in tags_for(repo, commit_info.id))
        if oneline:
            decoration = f" ({tags})" if tags else ""
            entries.append(f"{commit_info.id}{decoration} {commit_info.message}")
            continue
        lines = [f"commit {commit_info.id}"]
        if tags:
            lines.append(tags)
        lines.append(AUTHOR_LINE)
        lines.append(f"Date:   {time.ctime(commit_info.timestamp / 1000)}")
        lines.append("")
        lines.append(f"    {commit_info.message}")
        lines.append("")
        entries.append("\n".join(lines))
    return "\n".join(entries).strip()


def status_text(repo: RepositoryState) -> str:
    if repo.mergeInProgress is not None:
        output = (
            f"On branch {repo.HEAD}\nYou have unmerged paths.\n"
            '  (fix conflicts and run "git commit")\n\n'
            'Unmerged paths:\n  (use "git add <file>..." to mark resolution)\n'
        )
        return output + "\n".join(f"\tboth modified: {f}" for f in repo.mergeInProgress.conflictingFiles)

    committed = head_commit(repo).files
    staged = repo.stagingArea
    working = repo.workingDirectory

    staged_changes: list[str] = []
    not_staged_changes: list[str] = []
    untracked: list[str] = []

    for path, entry in staged.items():
        if isinstance(entry, StagedDeletion):
            if path in committed:
                staged_changes.append(f"\tdeleted:    {path}")
        elif path not in committed:
            staged_changes.append(f"\tnew file:   {path}")
        elif committed[path].content != entry.file.content:
            staged_changes.append(f"\tmodified:   {path}")

    tracked = tracked_paths(repo, committed)
    for path, file in working.items():
        if path not in tracked or isinstance(staged.get(path), StagedDeletion):
            untracked.append(f"\t{path}")
            continue
        baseline = staged_file(staged.get(path)) or committed.get(path)
        if files_differ(baseline, file):
            not_staged_changes.append(f"\tmodified:   {path}")
    for path in sorted(tracked - set(working)):
        if isinstance(staged.get(path), StagedDeletion):
            continue
        not_staged_changes.append(f"\tdeleted:    {path}")

    output = f"On branch {repo.HEAD}\n"
    if not staged_changes and not not_staged_changes and not untracked:
        return output + "\nnothing to commit, working tree clean"

    if staged_changes:
        output += "\nChanges to be committed:\n"
        output += '  (use "git restore --staged <file>..." to unstage)\n'
        output += "\n".join(staged_changes) + "\n"
    if not_staged_changes:
        output += "\nChanges not staged for commit:\n"
        output += '  (use "git add <file>..." to update what will be committed)\n'
        output += '  (use "git restore <file>..." to discard changes in working directory)\n'
        output += "\n".join(not_staged_changes) + "\n"
    if untracked:
        output += "\nUntracked files:\n"
        output += '  (use "git add <file>..." to include in what will be committed)\n'
        output += "\n".join(untracked) + "\n"
    return output.strip()

def status(ctx: Context, args: list[str]) -> str:
    return status_text(ctx.repo)


def merge(ctx: Context, args: list[str]) -> str:
    repo = ctx.repo
    if not args:
        raise GitError("fatal: No branch specified.")
    if repo.mergeInProgress is not None:
        raise GitError("fatal: You have not concluded your merge (MERGE_HEAD exists).")
    branch_name = args[0]
    if branch_name not in get_branch_heads(repo):
        raise GitError(f"fatal: '{branch_name}' does not point to a commit")
    if branch_name == repo.HEAD:
        return "Already up to date."

    conflicting_files = merge_branches(ctx, branch_name)
    if conflicting_files:
        joined = " ".join(conflicting_files)
        return (
            f"Auto-merging {joined}\n"
            f"CONFLICT (content): Merge conflict in {joined}\n"
            "Automatic merge failed; fix conflicts and then commit the result."
        )
    logger.info("merged %s into %s", branch_name, repo.HEAD)
    return commit_staged(ctx, f"Merge branch '{branch_name}'")


def stash(ctx: Context, args: list[str]) -> str:
    repo = ctx.repo
    subcommand = args[0] if args else "push"

    if subcommand == "push":
        current_commit = head_commit(repo)
        modified_files = {
            path: file.model_copy()
            for path, file in repo.workingDirectory.items()
            if files_differ(file, current_commit.files.get(path))
        }
        if not modified_files:
            return "No local changes to save"
        message = f"WIP on {repo.HEAD}"
        repo.stash.append(StashEntry(message=message, files=modified_files))
        repo.workingDirectory = copy_files(current_commit.files)
        repo.directories |= directories_for(current_commit.files)
        clear_staging(repo)
        return f"Saved working directory and index state {message}"

    if subcommand == "list":
        return "\n".join(
            f"stash@{{{i}}}: {entry.message}" for i, entry in enumerate(reversed(repo.stash))
        )

    if subcommand in ("pop", "apply", "drop"):
        if not repo.stash:
            return "No stash entries found."
        if subcommand == "drop":
            repo.stash.pop()
            return "Dropped refs/stash@{0}"
        entry = repo.stash[-1]
        # last write wins, no conflict detection
        for path, file in entry.files.items():
            repo.workingDirectory[path] = file.model_copy()
            repo.directories.update(ancestor_dirs(path))
        output = status_text(repo)
        if subcommand == "pop":
            repo.stash.pop()
            output += "\nDropped refs/stash@{0}"
        return output

    raise GitError(f"git: '{subcommand}' is not a git command.")


def revert(ctx: Context, args: list[str]) -> str:
    repo = ctx.repo
    ref = args[0] if args else "HEAD"
    if ref != "HEAD":
        raise GitError(f'fatal: Invalid revision range "{ref}"')
    _refuse_during_merge(repo, "revert")

    current_commit = head_commit(repo)
    if not current_commit.parents:
        raise GitError("fatal: bad revision 'HEAD'")
    parent_commit = repo.commits[current_commit.parents[0]]

    recreate_directory(repo, current_commit.id)
    for path, file in parent_commit.files.items():
        stage_file(repo, path, file)
    for path in current_commit.files:
        if path not in parent_commit.files:
            stage_deletion(repo, path)

    output = commit_staged(ctx, f'Revert "{current_commit.message}"')
    recreate_directory(repo, current_commit_hash(repo))
    return output


def tag(ctx: Context, args: list[str]) -> str:
    repo = ctx.repo
    if not args:
        return "\n".join(repo.tags)
    repo.tags[args[0]] = current_commit_hash(repo)
    return ""


def clean(ctx: Context, args: list[str]) -> str:
    repo = ctx.repo
    flags = "".join(arg[1:] for arg in args if arg.startswith("-") and not arg.startswith("--"))
    dry_run = "n" in flags or "--dry-run" in args
    force = "f" in flags or "--force" in args
    if not dry_run and not force:
        raise GitError("fatal: -f, --force required")

    committed = head_commit(repo).files
    untracked = sorted(path for path in repo.workingDirectory if path not in committed)
    if dry_run:
        return "\n".join(f"Would remove {path}" for path in untracked)
    for path in untracked:
        del repo.workingDirectory[path]
    return "\n".join(f"Removing {path}" for path in untracked)


def rebase(ctx: Context, args: list[str]) -> str:
    repo = ctx.repo
    if not args:
        raise GitError("fatal: needed a single revision")
    base_branch = args[0]
    if base_branch not in get_branch_heads(repo):
        raise GitError(f"fatal: invalid upstream '{base_branch}'")
    _refuse_during_merge(repo, "rebase")

    current_branch = repo.HEAD
    onto = repo.branches[base_branch]
    tip = current_commit_hash(repo)
    if onto in (tip, ROOT_COMMIT) or any(c.id == onto for c in first_parent_history(repo, tip)):
        return f"Current branch {current_branch} is up to date."

    new_tip = replay_commits(ctx, commits_to_replay(repo, tip, onto), onto)
    update_branch_head(repo, current_branch, new_tip)
    recreate_directory(repo, new_tip)
    logger.info("rebased %s onto %s", current_branch, base_branch)
    return f"Successfully rebased and updated refs/heads/{current_branch}."


def cherry_pick(ctx: Context, args: list[str]) -> str:
    repo = ctx.repo
    if not args:
        raise GitError("fatal: empty commit set passed")
    commit_to_pick = find_commit_by_prefix(repo, args[0])
    _refuse_during_merge(repo, "cherry-pick")

    for path, file in changed_files(repo, commit_to_pick).items():
        stage_file(repo, path, file)
        repo.workingDirectory[path] = file.model_copy()
        repo.directories.update(ancestor_dirs(path))
    return commit_staged(ctx, commit_to_pick.message)
