"""CLI entry point for the placement match engine."""

import argparse
import logging
import sqlite3
import sys

from src.core.config import Settings
from src.core.dataset import Dataset, import_dataset
from src.core.db import fetch_submissions, init_db
from src.pipeline.loader import PoolLoadError
from src.pipeline.orchestrator import MatchRun, add_to_pipeline, export_results_json, suggest_matches


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Placement match engine - rank talent against open positions",
    )
    parser.add_argument(
        "--config",
        default="config/settings.yaml",
        help="Path to settings YAML file (default: config/settings.yaml)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # --- import subcommand ---
    import_parser = subparsers.add_parser(
        "import",
        help="Load positions, candidates and submissions from a YAML dataset",
    )
    import_parser.add_argument("--file", required=True, help="Path to dataset YAML file")

    # --- match subcommand ---
    match_parser = subparsers.add_parser("match", help="Suggest candidates for a position")
    match_parser.add_argument("--position", required=True, help="Position ID")
    match_parser.add_argument(
        "--export",
        choices=["json"],
        help="Export results to format (json)",
    )

    # --- link subcommand ---
    link_parser = subparsers.add_parser("link", help="Add a candidate to a position's pipeline")
    link_parser.add_argument("--position", required=True, help="Position ID")
    link_parser.add_argument("--candidate", required=True, help="Candidate ID")
    link_parser.add_argument("--notes", default="", help="Submission notes")
    link_parser.add_argument("--by", default=None, help="ID of the submitting recruiter")

    # --- pipeline subcommand ---
    pipeline_parser = subparsers.add_parser("pipeline", help="List a position's pipeline")
    pipeline_parser.add_argument("--position", required=True, help="Position ID")

    return parser.parse_args(argv)


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def print_matches(run: MatchRun) -> None:
    """Print a ranked match list as recruiter-facing lines."""
    p = run.position
    print(f"\nTop matches for '{p.title or p.id}' ({p.id}): "
          f"{len(run.matches)} of {run.pool_count} eligible, "
          f"{run.excluded_count} already in pipeline")
    if not run.matches:
        print("  No matches found in active pool.")
        return
    for i, m in enumerate(run.matches, start=1):
        c = m.candidate
        overlap = len(m.breakdown.matched_skills)
        print(f"  {i:>2}. [{m.score:>3}] {c.name or c.id} ({c.id}) - "
              f"{c.role or 'No role specified'}, {overlap} skills overlap")


def cmd_import(conn: sqlite3.Connection, args: argparse.Namespace) -> None:
    """Handle import subcommand."""
    dataset = Dataset.from_yaml(args.file)
    counts = import_dataset(conn, dataset)
    print(f"Imported {counts['positions']} positions, {counts['candidates']} candidates, "
          f"{counts['submissions']} submissions from {args.file}")


def cmd_match(conn: sqlite3.Connection, settings: Settings, args: argparse.Namespace) -> None:
    """Handle match subcommand."""
    run = suggest_matches(conn, args.position, settings)
    if args.export == "json":
        print(export_results_json(run))
    else:
        print_matches(run)


def cmd_link(conn: sqlite3.Connection, settings: Settings, args: argparse.Namespace) -> None:
    """Handle link subcommand."""
    outcome = add_to_pipeline(
        conn, args.position, args.candidate, settings,
        notes=args.notes, submitted_by=args.by,
    )
    if outcome.linked:
        print(f"Added candidate '{args.candidate}' to the pipeline for '{args.position}'.")
    else:
        print(f"Notice: {outcome.notice} ({args.candidate}). Refreshed matches below.")
    print_matches(outcome.refreshed)


def cmd_pipeline(conn: sqlite3.Connection, args: argparse.Namespace) -> None:
    """Handle pipeline subcommand."""
    rows = fetch_submissions(conn, args.position)
    print(f"Pipeline for '{args.position}': {len(rows)} submissions")
    for row in rows:
        name = row["candidate_name"] or row["candidate_id"]
        print(f"  {name} ({row['candidate_id']}) - {row['stage']} [{row['status']}] "
              f"since {row['created_at'][:10]}")


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        settings = Settings.from_yaml(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    conn = init_db(settings.database.path)
    try:
        if args.command == "import":
            cmd_import(conn, args)
        elif args.command == "match":
            cmd_match(conn, settings, args)
        elif args.command == "link":
            cmd_link(conn, settings, args)
        else:
            cmd_pipeline(conn, args)
    except (FileNotFoundError, ValueError, PoolLoadError, sqlite3.Error) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        conn.close()


if __name__ == "__main__":
    main()
