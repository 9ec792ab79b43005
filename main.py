import logging
from pathlib import Path

import argparse
from gitgud.config import get_settings
from gitgud.errors import GitGudError
from gitgud.models import HistoryEntry
from gitgud.session import SessionStore, envelope_for, simulator_from
from gitgud.shell import Dialect
from gitgud.simulator import GitSimulator

CLEAR_SCREEN = "\033[2J\033[H"
EXIT_WORDS = ("exit", "quit")

def main():
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Git Gud terminal simulator")
    parser.add_argument("--dialect", choices=[d.value for d in Dialect], default=settings.DIALECT, help="Shell vocabulary and prompt to use")
    parser.add_argument("--session", default=settings.SESSION_FILE, help="JSON file the session is loaded from and saved to")
    parser.add_argument("--reset", action="store_true", help="Ignore any saved session and start fresh")
    parser.add_argument("--log-level", default=settings.LOG_LEVEL, help="Logging level")
    parser.add_argument("command", nargs=argparse.REMAINDER, help="Run a single command line and exit")

    args = parser.parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    store = SessionStore(Path(args.session)) if args.session else None
    simulator = GitSimulator(args.dialect)
    history: list[HistoryEntry] = []
    if store is not None and not args.reset:
        try:
            envelope = store.load()
        except GitGudError as e:
            print(e.message)
            envelope = None
        # a saved session in the other dialect is discarded, not migrated
        if envelope is not None and envelope.dialectMode == args.dialect:
            simulator, history = simulator_from(envelope)

    def run_line(line: str) -> None:
        result = simulator.execute(line)
        if result.action == "clear":
            history.clear()
            print(CLEAR_SCREEN, end="")
        else:
            history.append(HistoryEntry(input=line, output=result.output))
            if result.output:
                print(result.output)
        if store is not None:
            store.save(envelope_for(simulator, history))

    if args.command:
        run_line(" ".join(args.command))
        return

    while True:
        try:
            line = input(simulator.prompt)
        except (EOFError, KeyboardInterrupt):
            print()
            break
        if line.strip() in EXIT_WORDS:
            break
        run_line(line)


if __name__ == "__main__":
    main()
