"""Saving and restoring a terminal session as a single JSON blob."""

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from .errors import GitGudError
from .models import HistoryEntry, SessionEnvelope
from .simulator import GitSimulator

logger = logging.getLogger(__name__)

SESSION_KEY = "gitGudSession"


class SessionStore:
    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> SessionEnvelope | None:
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text())
            raw = data.get(SESSION_KEY)
            return SessionEnvelope.model_validate(raw) if raw is not None else None
        except (json.JSONDecodeError, ValidationError, AttributeError) as e:
            raise GitGudError(f"failed to read session file {self.path}: {e}")

    def save(self, envelope: SessionEnvelope) -> None:
        self.path.write_text(json.dumps({SESSION_KEY: envelope.model_dump(mode="json")}, indent=4))
        logger.debug("saved session to %s", self.path)

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


def envelope_for(simulator: GitSimulator, history: list[HistoryEntry]) -> SessionEnvelope:
    return SessionEnvelope(
        dialectMode=simulator.dialect.value,
        repositoryState=simulator.get_state(),
        commandHistory=[entry.model_copy() for entry in history],
    )


def simulator_from(envelope: SessionEnvelope) -> tuple[GitSimulator, list[HistoryEntry]]:
    simulator = GitSimulator(envelope.dialectMode)
    simulator.set_state(envelope.repositoryState)
    return simulator, [entry.model_copy() for entry in envelope.commandHistory]
