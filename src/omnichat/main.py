#!/usr/bin/env python3
"""Replay a recorded event log through the combined feed and print it.

Each line of the log is a JSON object: {"event": "message" | "history" |
"privmsg", "source": "<source>", "payload": ...}.
"""

import json
import logging
import sys
from pathlib import Path

from PySide6.QtCore import QCoreApplication

from .chat.combos import ComboEntry
from .chat.session import ChatSession
from .core.models import RecordSource
from .core.settings import FeedSettings

logger = logging.getLogger(__name__)


def setup_logging() -> None:
    """Set up logging configuration."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )


def replay(session: ChatSession, lines) -> int:
    """Feed event log lines into `session`; returns how many were applied."""
    applied = 0
    for n, line in enumerate(lines, 1):
        line = line.strip()
        if not line:
            continue
        try:
            event = json.loads(line)
            source = RecordSource(event.get("source", RecordSource.PRIMARY.value))
        except (ValueError, AttributeError) as e:
            logger.warning(f"Skipping line {n}: {e}")
            continue
        kind = event.get("event", "message")
        if kind == "message":
            applied += session.handle_message(source, event.get("payload"))
        elif kind == "history":
            applied += bool(session.handle_history(source, event.get("payload")))
        elif kind == "privmsg":
            session.handle_privmsg(event.get("payload"))
            applied += 1
        else:
            logger.warning(f"Skipping line {n}: unknown event {kind!r}")
    return applied


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    setup_logging()
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        logging.error("Usage: omnichat-replay <events.jsonl>")
        return 1

    app = QCoreApplication.instance() or QCoreApplication([])  # noqa: F841
    session = ChatSession(FeedSettings(max_messages=5000))
    try:
        with open(Path(argv[0]), encoding="utf-8") as f:
            applied = replay(session, f)
    except OSError as e:
        logging.error(f"Failed to read event log: {e}")
        return 1

    for entry in session.render_entries():
        record = entry.record
        if isinstance(entry, ComboEntry):
            print(f"[{record.source.value}] {record.body.strip()} x{entry.count}")
        elif record.author:
            print(f"[{record.source.value}] {record.author}: {record.body}")
        else:
            print(f"[{record.source.value}] {record.body}")
    logger.info(f"Applied {applied} events, {session.unread.total_unread()} unread whispers")
    return 0


if __name__ == "__main__":
    sys.exit(main())
