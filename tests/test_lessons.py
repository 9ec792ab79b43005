"""Walk the teaching course end to end in both dialects.

Each exercise runs its command steps in order and then checks the goal
predicate a lesson evaluator would apply to the repository state.
"""

from collections.abc import Callable

import pytest

from gitgud.models import RepositoryState
from gitgud.simulator import GitSimulator

from conftest import FakeClock

VERBS = {
    "posix": {"list": "ls", "show": "cat", "touch": "touch temp.log"},
    "dos": {"list": "dir", "show": "type", "touch": "echo. > temp.log"},
}


def head(repo: RepositoryState):
    return repo.commits[repo.branches[repo.HEAD]]


def in_history(repo: RepositoryState, ancestor: str, commit_id: str) -> bool:
    while commit_id:
        if commit_id == ancestor:
            return True
        parents = repo.commits[commit_id].parents
        commit_id = parents[0] if parents else ""
    return False


Exercise = tuple[str, list[str], Callable[[RepositoryState], bool]]

COURSE: list[Exercise] = [
    (
        "init",
        ["git init"],
        lambda repo: len(repo.commits) > 0 and "main" in repo.branches,
    ),
    (
        "first-commit",
        [
            'echo "Hello Git" > README.md',
            "git status",
            "git add README.md",
            "git status",
            'git commit -m "Initial commit"',
            "git log",
        ],
        lambda repo: head(repo).message == "Initial commit" and "README.md" in head(repo).files,
    ),
    (
        "create-branch",
        ["git branch feature/new-login", "git branch", "git checkout feature/new-login", "git branch"],
        lambda repo: "feature/new-login" in repo.branches and repo.HEAD == "feature/new-login",
    ),
    (
        "branch-work",
        [
            'echo "// Login form" > login.js',
            "git add login.js",
            'git commit -m "Add login feature skeleton"',
            "git checkout main",
            "{list}",
        ],
        lambda repo: (
            repo.HEAD == "main"
            and repo.commits[repo.branches["feature/new-login"]].message == "Add login feature skeleton"
            and "login.js" not in repo.commits[repo.branches["main"]].files
        ),
    ),
    (
        "merge",
        ["git checkout main", "git merge feature/new-login", "{list}", "git log --graph --oneline"],
        lambda repo: repo.HEAD == "main" and len(head(repo).parents) > 1 and "login.js" in head(repo).files,
    ),
    (
        "stash",
        ["echo \"console.log('hello')\" >> login.js", "git status", "git stash", "git status"],
        lambda repo: (
            len(repo.stash) > 0
            and repo.workingDirectory["login.js"].content.strip() != ""
            and "hello" not in repo.workingDirectory["login.js"].content
        ),
    ),
    (
        "stash-pop",
        ["git stash list", "git stash pop", "{show} login.js"],
        lambda repo: not repo.stash and "hello" in repo.workingDirectory["login.js"].content,
    ),
    (
        "make-mistake",
        [
            'echo "This is a mistake" > mistake.txt',
            "git add mistake.txt",
            'git commit -m "feat: Add a file with a mistake"',
            "git log -n 1",
        ],
        lambda repo: "mistake.txt" in head(repo).files,
    ),
    (
        "revert",
        ["git revert HEAD", "{list}", "git log -n 2"],
        lambda repo: head(repo).message.startswith("Revert") and "mistake.txt" not in head(repo).files,
    ),
    (
        "amend",
        [
            'echo "forgotten file" > new-file.txt',
            "git add new-file.txt",
            "git commit --amend --no-edit",
            "git log -1 --stat",
        ],
        lambda repo: "new-file.txt" in head(repo).files,
    ),
    (
        "tag",
        ["git tag v1.0", "git tag", "git log -1"],
        lambda repo: repo.tags["v1.0"] == repo.branches[repo.HEAD],
    ),
    (
        "clean",
        ["{touch}", "git status", "git clean -n", "git clean -f", "git status"],
        lambda repo: "temp.log" not in repo.workingDirectory,
    ),
    (
        "rebase-setup",
        [
            "git checkout -b feature/rebase-me main",
            'echo "feature" > feature.txt',
            'git add . && git commit -m "feat: start rebase feature"',
            "git checkout main",
            'echo "update" >> README.md',
            'git add . && git commit -m "docs: update readme on main"',
            "git log --graph --oneline --all",
        ],
        lambda repo: (
            not in_history(repo, repo.branches["main"], repo.branches["feature/rebase-me"])
            and not in_history(repo, repo.branches["feature/rebase-me"], repo.branches["main"])
        ),
    ),
    (
        "rebase",
        ["git checkout feature/rebase-me", "git rebase main", "git log --graph --oneline --all"],
        lambda repo: repo.commits[repo.branches["feature/rebase-me"]].parents[0] == repo.branches["main"],
    ),
    (
        "cherry-pick-setup",
        [
            "git checkout -b feature/hotfix",
            'echo "critical fix" > hotfix.js',
            'git add . && git commit -m "fix: critical hotfix"',
            "git checkout main",
        ],
        lambda repo: repo.HEAD == "main" and "feature/hotfix" in repo.branches,
    ),
    (
        "cherry-pick",
        ["git log feature/hotfix", "git cherry-pick {hotfix}", "{list}"],
        lambda repo: repo.commits[repo.branches["main"]].message == "fix: critical hotfix",
    ),
    (
        "conflict-setup",
        [
            "git checkout -b feature/conflicting-change",
            'echo "Feature change for README" > README.md',
            'git add . && git commit -m "feat: change readme"',
            "git checkout main",
            'echo "Important update on main" > README.md',
            'git add . && git commit -m "docs: change readme on main"',
        ],
        lambda repo: (
            "feature/conflicting-change" in repo.branches
            and "Important update" in repo.workingDirectory["README.md"].content
        ),
    ),
    (
        "conflict-resolve",
        [
            "git merge feature/conflicting-change",
            "git status",
            "{show} README.md",
            'echo "Resolved: Important update and feature change" > README.md',
            "git add README.md",
            "git commit --no-edit",
        ],
        lambda repo: (
            repo.mergeInProgress is None
            and len(head(repo).parents) == 2
            and head(repo).files["README.md"].content.startswith("Resolved: Important update")
        ),
    ),
]


@pytest.mark.parametrize("dialect", ["posix", "dos"])
def test_course_walkthrough(dialect: str, clock: FakeClock) -> None:
    simulator = GitSimulator(dialect, clock=clock)
    for name, steps, goal in COURSE:
        for step in steps:
            state = simulator.get_state()
            hotfix = state.branches.get("feature/hotfix", "")
            simulator.execute(step.format(hotfix=hotfix, **VERBS[dialect]))
        assert goal(simulator.get_state()), f"exercise {name!r} not completed"


class TestCourseOutputs:
    """Spot checks of what a student sees along the way."""

    def test_branch_work_hides_feature_files_on_main(self, sim: GitSimulator, run: Callable[..., str]) -> None:
        run(
            sim,
            'echo "Hello Git" > README.md',
            "git add README.md",
            'git commit -m "Initial commit"',
            "git checkout -b feature/new-login",
            'echo "// Login form" > login.js',
            "git add login.js",
            'git commit -m "Add login feature skeleton"',
            "git checkout main",
        )
        assert sim.execute("ls").output == "README.md"
        sim.execute("git merge feature/new-login")
        assert sim.execute("ls").output == "login.js\tREADME.md"
        assert "Merge branch 'feature/new-login'" in sim.execute("git log --graph --oneline").output

    def test_conflicted_file_shows_markers(self, dos_sim: GitSimulator, run: Callable[..., str]) -> None:
        run(
            dos_sim,
            "echo Hello Git > README.md",
            "git add . && git commit -m base",
            "git checkout -b other",
            "echo theirs > README.md",
            "git add . && git commit -m theirs",
            "git checkout main",
            "echo ours > README.md",
            "git add . && git commit -m ours",
            "git merge other",
        )
        assert dos_sim.execute("type README.md").output == "<<<<<<< HEAD\nours\n=======\ntheirs\n>>>>>>> other"
