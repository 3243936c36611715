"""CLI interface for Extenote - inspect a vault from the terminal."""

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from extenote.config import get_settings
from extenote.errors import ConfigError, SourceAccessError
from extenote.lint import lint_objects
from extenote.models import Severity, VaultIssue, VaultState
from extenote.vault import load_vault, summarize_vault

logger = logging.getLogger(__name__)


class Colors:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"
    CYAN = "\033[36m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    RED = "\033[31m"


SEVERITY_COLORS = {
    Severity.ERROR: Colors.RED,
    Severity.WARN: Colors.YELLOW,
    Severity.INFO: Colors.CYAN,
}


def setup_logging(level: str = "WARNING") -> None:
    """Configure logging for CLI."""
    logging.basicConfig(
        format="%(message)s",
        level=level,
    )


def format_issue(issue: VaultIssue) -> str:
    color = SEVERITY_COLORS.get(issue.severity, "")
    location = issue.file_path
    if issue.field:
        location = f"{location} [{issue.field}]"
    rule = f" ({issue.rule})" if issue.rule else ""
    return f"{color}{issue.severity.value:<5}{Colors.RESET} {location}: {issue.message}{rule}"


def print_status(vault: VaultState) -> None:
    summary = summarize_vault(vault.objects, vault.issues)

    print(f"{Colors.BOLD}Sources{Colors.RESET}")
    for source_summary in vault.summaries:
        synced = "never"
        if source_summary.last_synced is not None:
            synced = datetime.fromtimestamp(source_summary.last_synced).strftime("%Y-%m-%d %H:%M")
        print(
            f"  {source_summary.source.id}: {source_summary.object_count} objects, "
            f"{len(source_summary.issues)} issues {Colors.DIM}(last change {synced}){Colors.RESET}"
        )

    print(f"\n{Colors.BOLD}Projects{Colors.RESET}")
    for project, count in sorted(summary.project_counts.items()):
        print(f"  {project}: {count}")

    print(f"\n{Colors.BOLD}Types{Colors.RESET}")
    for type_name, count in sorted(summary.type_counts.items()):
        print(f"  {type_name}: {count}")

    counts = summary.issue_counts
    print(
        f"\n{summary.total_objects} objects | "
        f"{Colors.RED}{counts['error']} errors{Colors.RESET} | "
        f"{Colors.YELLOW}{counts['warn']} warnings{Colors.RESET} | "
        f"{counts['info']} info"
    )


def print_issues(issues: list[VaultIssue], severity: str | None = None) -> None:
    shown = [i for i in issues if severity is None or i.severity.value == severity]
    if not shown:
        print(f"{Colors.GREEN}No issues.{Colors.RESET}")
        return
    for issue in shown:
        print(format_issue(issue))


def print_objects(vault: VaultState, args: argparse.Namespace) -> None:
    objects = vault.filter_objects(
        project=args.project, type=args.type, visibility=args.visibility
    )
    if args.json:
        print(json.dumps([o.to_dict() for o in objects], indent=2, ensure_ascii=False, default=str))
        return
    for obj in objects:
        print(
            f"{obj.project:<20} {obj.type:<16} {obj.visibility:<9} "
            f"{obj.title} {Colors.DIM}{obj.relative_path}{Colors.RESET}"
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="extenote",
        description="Inspect a vault assembled from configured content sources.",
    )
    parser.add_argument("--cwd", type=Path, help="Project root (default: EXTENOTE_PROJECT_ROOT or .)")
    parser.add_argument("--config", type=str, help="Config directory or file, relative to the root")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show progress logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("status", help="Show per-source and vault summaries")

    issues_parser = subparsers.add_parser("issues", help="List issues in pipeline order")
    issues_parser.add_argument("--severity", choices=[s.value for s in Severity])

    list_parser = subparsers.add_parser("list", help="List objects")
    list_parser.add_argument("--project")
    list_parser.add_argument("--type")
    list_parser.add_argument("--visibility", choices=["public", "private", "unlisted"])
    list_parser.add_argument("--json", action="store_true", help="Print JSON records")

    lint_parser = subparsers.add_parser("lint", help="Run lint rules")
    lint_parser.add_argument("--fix", action="store_true", help="Apply fixable corrections")

    return parser


def cli(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings()
    except ValidationError as e:
        setup_logging()
        logger.error(f"{Colors.RED}Failed to load settings: {e}{Colors.RESET}")
        return 1

    setup_logging("INFO" if args.verbose else settings.log_level)

    cwd = args.cwd or settings.project_root
    config_path = args.config or settings.config_path

    try:
        vault = load_vault(cwd, config_path=config_path, max_workers=settings.max_workers)
    except (ConfigError, SourceAccessError) as e:
        logger.error(f"{Colors.RED}{e}{Colors.RESET}")
        return 1

    if args.command == "status":
        print_status(vault)
    elif args.command == "issues":
        print_issues(vault.issues, args.severity)
    elif args.command == "list":
        print_objects(vault, args)
    elif args.command == "lint":
        result = lint_objects(vault.objects, vault.config, fix=args.fix)
        print_issues(result.issues)
        for path in result.updated_files:
            print(f"{Colors.GREEN}✓ Updated {path}{Colors.RESET}")

    if vault.has_errors and args.command != "issues":
        print(
            f"\n{Colors.YELLOW}Vault has errors; run 'extenote issues' for details.{Colors.RESET}",
            file=sys.stderr,
        )
    return 0


def main() -> None:
    sys.exit(cli())


if __name__ == "__main__":
    main()
