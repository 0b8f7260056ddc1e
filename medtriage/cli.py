"""
medtriage/cli.py
Command-line interface for the Message Analysis & Triage Engine.

USAGE:
  medtriage analyze "I'm experiencing chest pain and shortness of breath"
  medtriage analyze "I need to schedule a checkup" --user-id u1 --json
  medtriage analyze "My SSN is 123-45-6789, please help" --audit-db audit.db
  medtriage serve --port 8770

All processing is local. Message text is never written to the log.
"""

import argparse
import json
import logging
import random
import sys
import time
from dataclasses import asdict
from pathlib import Path
from typing import List, Optional

from medtriage.config import load_config
from medtriage.errors import TriageError
from medtriage.exporters.sqlite_exporter import export
from medtriage.models.record import UserProfile
from medtriage.pipeline import build_pipeline

logger = logging.getLogger(__name__)

# ANSI colors
GREEN  = '\033[92m'
YELLOW = '\033[93m'
RED    = '\033[91m'
CYAN   = '\033[96m'
RESET  = '\033[0m'
BOLD   = '\033[1m'

LEVEL_COLORS = {
    'emergency': RED,
    'urgent':    RED,
    'prompt':    YELLOW,
    'routine':   GREEN,
}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog        = 'medtriage',
        description = 'Message Analysis & Triage Engine — intent, PHI, sentiment and urgency',
        formatter_class = argparse.RawDescriptionHelpFormatter,
        epilog = """
CLINICAL NOTE:
  Triage levels are keyword heuristics, not a diagnosis.
  Any message flagged for review must be seen by a clinician.
        """
    )
    parser.add_argument(
        '--verbose', '-v',
        action  = 'store_true',
        help    = 'Enable debug logging',
    )
    parser.add_argument(
        '--config-dir',
        type    = Path,
        default = None,
        help    = 'Directory holding medtriage_config.json (default: cwd)',
    )
    sub = parser.add_subparsers(dest='command', required=True)

    analyze = sub.add_parser('analyze', help='Analyze one message and print the reply')
    analyze.add_argument('message', help='Patient message text')
    analyze.add_argument('--category', default=None,
                         help='Ticket category, used when no stronger signal applies')
    analyze.add_argument('--user-id', default='cli-user',
                         help='User id for the conversation context (default: cli-user)')
    analyze.add_argument('--language', default=None,
                         help='Preferred reply language (default: detected)')
    analyze.add_argument('--location', default=None,
                         help='Location for provider recommendations')
    analyze.add_argument('--seed', type=int, default=None,
                         help='Seed for reproducible template selection')
    analyze.add_argument('--json', action='store_true',
                         help='Print the full enhanced response as JSON')
    analyze.add_argument('--audit-db', type=Path, default=None,
                         help='Also write a redacted audit snapshot to this SQLite file')
    analyze.add_argument('--run-label', default='',
                         help='Label stored in the triage_meta table')
    analyze.add_argument('--verbose', '-v', action='store_true', default=argparse.SUPPRESS,
                         help='Enable debug logging')

    serve = sub.add_parser('serve', help='Run the HTTP API')
    serve.add_argument('--host', default='127.0.0.1', help='Host to bind')
    serve.add_argument('--port', type=int, default=8770, help='Port to bind (default: 8770)')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)

    # ── LOGGING SETUP ────────────────────────────────────────
    logging.basicConfig(
        level   = logging.DEBUG if args.verbose else logging.INFO,
        format  = '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt = '%H:%M:%S',
    )

    config = load_config(args.config_dir)
    if args.verbose:
        config['global']['debug_mode'] = True

    if args.command == 'serve':
        from medtriage.api import serve
        serve(host=args.host, port=args.port)
        return 0

    return _analyze(args, config)


def _analyze(args: argparse.Namespace, config: dict) -> int:
    rng      = random.Random(args.seed) if args.seed is not None else None
    pipeline = build_pipeline(config, rng=rng)
    profile  = UserProfile(
        user_id            = args.user_id,
        preferred_language = args.language,
        location           = args.location,
    )

    t0 = time.time()
    try:
        result = pipeline.respond_enhanced(args.message, args.category, args.user_id, profile)
    except TriageError as e:
        _print(f"{RED}Error: {e}{RESET}")
        return 1

    if args.json:
        data = asdict(result)
        if result.voice_response is not None:
            data['voice_response']['audio_data'] = None
        _print(json.dumps(data, indent=2))
    else:
        level = result.triage.urgency_level
        color = LEVEL_COLORS.get(level, CYAN)
        _print(f"\n{BOLD}Intent{RESET}    : {CYAN}{result.intent}{RESET}")
        _print(f"{BOLD}Urgency{RESET}   : {color}{level}{RESET} ({result.triage.timeframe})")
        _print(f"{BOLD}Sentiment{RESET} : {result.triage.sentiment.label} ({result.triage.sentiment.score:.2f})")
        if result.compliance.contains_phi:
            _print(f"{BOLD}PHI{RESET}       : {YELLOW}{', '.join(result.compliance.detected_phi)}{RESET}")
        if result.requires_human_review:
            _print(f"{YELLOW}⚠ Requires human review{RESET}")
        if result.priority_update:
            _print(f"{BOLD}Priority{RESET}  : → {result.priority_update}")
        _print(f"\n{result.text_response}\n")

    if args.audit_db:
        export(
            db_path   = args.audit_db,
            contexts  = pipeline.context_store.snapshot(),
            feedback  = pipeline.feedback_store.records(),
            run_label = args.run_label or 'cli-analyze',
        )
        _print(f"  {GREEN}✓{RESET} Audit snapshot → {args.audit_db} ({_elapsed(t0)})")

    return 0


# ── PRINT HELPERS ────────────────────────────────────────────

def _print(msg): print(msg)

def _elapsed(t0: float) -> str:
    s = time.time() - t0
    return f"{s:.1f}s" if s < 60 else f"{int(s//60)}m {int(s%60)}s"


if __name__ == '__main__':
    sys.exit(main())
