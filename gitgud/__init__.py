from .models import CommandResult, RepositoryState
from .shell import Dialect
from .simulator import GitSimulator

__all__ = ["CommandResult", "Dialect", "GitSimulator", "RepositoryState"]
