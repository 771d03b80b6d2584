"""Application entry point for the QuizPortal candidate client."""

from __future__ import annotations

import argparse
import asyncio
from datetime import timezone
import logging
from pathlib import Path
import sys
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from PySide6 import QtAsyncio
from PySide6.QtWidgets import QApplication

from quiz_portal.client.scoring_client import ScoringClient
from quiz_portal.constants.about import APP_NAME, APP_VERSION
from quiz_portal.constants.network_constants import (
    API_PREFIX,
    DEFAULT_API_BASE_URL,
    DEFAULT_HOST,
    DEFAULT_PORT,
)
from quiz_portal.core.errors import ScoringServiceError
from quiz_portal.core.models import AuthContext
from quiz_portal.server.api_server import start_api_server
from quiz_portal.server.quiz_importer import QuizImportError, load_quiz_from_file
from quiz_portal.server.quiz_store import QuizStore
from quiz_portal.ui.candidate_quiz_window import CandidateQuizWindow
from quiz_portal.utils.logging_config import configure_logging

SAMPLE_QUIZ_PATH = Path(__file__).resolve().parent / "quiz_portal" / "data" / "sample_quiz.txt"


def _timezone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ValueError, ZoneInfoNotFoundError) as exc:
        raise argparse.ArgumentTypeError(f"unknown time zone: {name}") from exc


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="quiz-portal", description=f"{APP_NAME} {APP_VERSION}")
    parser.add_argument("--api-url", default=None, help=f"Quiz service base URL (default {DEFAULT_API_BASE_URL})")
    parser.add_argument("--token", default="candidate-token", help="Bearer token of the candidate")
    parser.add_argument("--name", default="Candidate", help="Display name of the candidate")
    parser.add_argument("--quiz-id", type=int, default=None, help="Quiz to take (default: first active quiz)")
    parser.add_argument(
        "--serve",
        nargs="?",
        const=SAMPLE_QUIZ_PATH,
        type=Path,
        default=None,
        metavar="QUIZ_FILE",
        help="Start the bundled scoring service seeded with QUIZ_FILE",
    )
    parser.add_argument(
        "--server-tz",
        type=_timezone,
        default=timezone.utc,
        metavar="ZONE",
        help="IANA zone of timestamps the service sends without an offset (default UTC)",
    )
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="Port for --serve")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def _serve(quiz_file: Path, token: str, name: str, port: int) -> str:
    """Start the bundled scoring service and return its base URL."""
    store = QuizStore()
    store.add_quiz(load_quiz_from_file(quiz_file).quiz)
    store.register_candidate(token, name)
    start_api_server(store, host=DEFAULT_HOST, port=port)
    return f"http://{DEFAULT_HOST}:{port}{API_PREFIX}"


async def _resolve_quiz_id(client: ScoringClient, auth: AuthContext, quiz_id: int | None) -> int:
    if quiz_id is not None:
        return quiz_id
    quizzes = await client.list_quizzes(auth)
    if not quizzes:
        raise ScoringServiceError("No active quizzes are available.")
    return quizzes[0].id


async def _run_candidate(args: argparse.Namespace, base_url: str) -> None:
    logger = logging.getLogger("quiz_portal")
    auth = AuthContext(token=args.token, display_name=args.name)
    async with ScoringClient(base_url, server_tz=args.server_tz) as client:
        try:
            quiz_id = await _resolve_quiz_id(client, auth, args.quiz_id)
        except ScoringServiceError as exc:
            logger.error("Cannot choose a quiz: %s", exc)
            return

        window = CandidateQuizWindow(service=client, auth=auth, quiz_id=quiz_id)
        closed = asyncio.get_running_loop().create_future()
        window.closed.connect(lambda: closed.done() or closed.set_result(None))
        window.show()
        window.begin()
        await closed


def main() -> None:
    """Initialize logging, optionally start the scoring service, and launch the Qt UI."""
    args = _parse_args(sys.argv[1:])
    logger = configure_logging(args.verbose)
    logger.info("Starting %s %s", APP_NAME, APP_VERSION)

    base_url = args.api_url or DEFAULT_API_BASE_URL
    if args.serve is not None:
        try:
            base_url = _serve(args.serve, args.token, args.name, args.port)
        except (OSError, QuizImportError, ValueError) as exc:
            logger.error("Failed to load quiz file %s: %s", args.serve, exc)
            sys.exit(1)

    app = QApplication(sys.argv)
    app.setApplicationName(APP_NAME)
    QtAsyncio.run(_run_candidate(args, base_url), keep_running=False, quit_qapp=True)


if __name__ == "__main__":
    main()
