from pydantic import BaseModel, ConfigDict, Field
from typing import Annotated, Literal, TypeAlias

class FileState(BaseModel):
    model_config = ConfigDict(frozen=True)

    content: str
    timestamp: int

class Commit(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    message: str
    parents: list[str]
    files: dict[str, FileState]
    timestamp: int

class StagedFile(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["present"] = "present"
    file: FileState

class StagedDeletion(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["deleted"] = "deleted"

StagingEntry = Annotated[StagedFile | StagedDeletion, Field(discriminator="kind")]
FileSnapshot: TypeAlias = dict[str, FileState]
BranchInfo: TypeAlias = dict[str, str]
StagingInfo = dict[str, StagingEntry]

class StashEntry(BaseModel):
    message: str
    files: FileSnapshot

class MergeState(BaseModel):
    branchToMerge: str
    conflictingFiles: list[str]

    @property
    def resolved(self) -> bool:
        return not self.conflictingFiles

    def resolve(self, path: str) -> None:
        self.conflictingFiles = [f for f in self.conflictingFiles if f != path]

class RepositoryState(BaseModel):
    commits: dict[str, Commit] = Field(default_factory=dict)
    branches: BranchInfo = Field(default_factory=dict)
    HEAD: str = "" # current branch name
    stagingArea: StagingInfo = Field(default_factory=dict)
    workingDirectory: FileSnapshot = Field(default_factory=dict)
    directories: set[str] = Field(default_factory=set)
    stash: list[StashEntry] = Field(default_factory=list)
    tags: BranchInfo = Field(default_factory=dict)
    mergeInProgress: MergeState | None = None

    def snapshot(self) -> "RepositoryState":
        return self.model_copy(deep=True)

class CommandResult(BaseModel):
    output: str
    updatedState: RepositoryState
    action: Literal["clear"] | None = None

class HistoryEntry(BaseModel):
    input: str
    output: str

class SessionEnvelope(BaseModel):
    dialectMode: Literal["posix", "dos"] = "posix"
    repositoryState: RepositoryState = Field(default_factory=RepositoryState)
    commandHistory: list[HistoryEntry] = Field(default_factory=list)
