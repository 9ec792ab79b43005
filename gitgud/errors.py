class GitGudError(Exception):
    """A command failed; the message is what the terminal shows."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class GitError(GitGudError):
    pass


class NotARepositoryError(GitError):
    def __init__(self, message: str = "fatal: not a git repository (or any of the parent directories): .git"):
        super().__init__(message)


class ShellError(GitGudError):
    pass
