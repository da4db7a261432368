"""
content-reviewer-submit: send a file or text to a running relay, wait for the
review to finish and print where to read it.

Exit codes: 0 completed (or submitted with --no-wait), 1 rejected or failed,
2 still running when polling gave up.
"""
from __future__ import annotations

import argparse
import logging
import mimetypes
import sys
from pathlib import Path
from typing import List, Optional

from content_reviewer.client.conversations import ConversationService
from content_reviewer.client.form_state import MutualExclusionController
from content_reviewer.client.poller import PollState, PollStep, StatusPoller
from content_reviewer.client.submission import RelayClient, SubmissionClient
from content_reviewer.config.ini_config import AppSettings, IniConfig
from content_reviewer.domain.errors import ReviewNotFound
from content_reviewer.domain.models import SubmissionFile
from content_reviewer.logging_setup import setup_logging
from content_reviewer.repositories.conversation_repository import ConversationRepository
from content_reviewer.services.validation import InputValidator

logger = logging.getLogger(__name__)


def _load_settings() -> AppSettings:
    try:
        return IniConfig.from_env_or_default().load_settings()
    except FileNotFoundError:
        return AppSettings()


def build_parser(settings: AppSettings) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="content-reviewer-submit", description="Submit content for a compliance review.")
    source = p.add_mutually_exclusive_group(required=True)
    source.add_argument("--file", type=Path, help="PDF or Word document to review")
    source.add_argument("--text", help="Text content to review")
    source.add_argument("--text-file", type=Path, help="Read the text to review from this file")

    p.add_argument("--relay-url", default=f"http://{settings.flask_host}:{settings.flask_port}")
    p.add_argument("--interval", type=float, default=settings.poll_interval_seconds, help="Seconds between status polls")
    p.add_argument("--max-attempts", type=int, default=settings.poll_max_attempts)
    p.add_argument("--no-wait", action="store_true", help="Print the review id and exit without polling")
    p.add_argument("--history", type=Path, help="Record the exchange in this conversation history file")
    return p


def _fill_form(form: MutualExclusionController, args: argparse.Namespace) -> None:
    if args.file is not None:
        mime_type, _ = mimetypes.guess_type(args.file.name)
        form.select_file(SubmissionFile(filename=args.file.name, content=args.file.read_bytes(), mime_type=mime_type))
    elif args.text_file is not None:
        form.enter_text(args.text_file.read_text(encoding="utf-8"))
    else:
        form.enter_text(args.text or "")


def _record(history: Optional[ConversationService], content: str, role: str) -> None:
    if history is not None:
        history.add_message(content, role)


def main(argv: Optional[List[str]] = None) -> int:
    settings = _load_settings()
    setup_logging(settings)
    args = build_parser(settings).parse_args(argv)

    history = None
    if args.history is not None:
        history = ConversationService(ConversationRepository(args.history))
        history.initialize()

    form = MutualExclusionController()
    try:
        _fill_form(form, args)
    except OSError as e:
        print(f"Could not read input: {e}", file=sys.stderr)
        return 1

    relay = RelayClient(args.relay_url, timeout_seconds=settings.backend_timeout_seconds)
    _record(history, f"Submitted {form.file.filename if form.file else 'text content'} for review", "user")

    outcome = SubmissionClient(relay, form, InputValidator.from_settings(settings)).submit()
    if not outcome.success:
        print(outcome.message, file=sys.stderr)
        _record(history, outcome.message, "bot")
        return 1

    print(f"Review submitted: {outcome.review_id}")
    if args.no_wait:
        _record(history, f"Review {outcome.review_id} submitted", "bot")
        return 0

    def on_step(step: PollStep) -> None:
        if step.state is PollState.PROCESSING:
            progress = step.job.progress if step.job else 0
            logger.info("Review %s still processing (%d%%, attempt %d)", outcome.review_id, progress, step.attempts)

    poller = StatusPoller(relay.get_status, interval_seconds=args.interval, max_attempts=args.max_attempts)
    try:
        step = poller.run(outcome.review_id, on_step=on_step)
    except ReviewNotFound as e:
        print(e.message, file=sys.stderr)
        return 1

    results_url = f"{args.relay_url.rstrip('/')}/review/results/{outcome.review_id}"
    if step.state is PollState.COMPLETED:
        print(f"Review completed: {results_url}")
        _record(history, f"Review completed: {results_url}", "bot")
        return 0

    print(step.message, file=sys.stderr)
    _record(history, step.message or "", "bot")
    return 1 if step.state is PollState.FAILED else 2


if __name__ == "__main__":
    sys.exit(main())
