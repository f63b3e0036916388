"""Revshare CLI — command-line interface for the revenue-share ledger.

Usage:
    revshare init --name "Star Drift" --description "A small space shooter"
    revshare add-member --name Alice --tier main --role "Lead programmer"
    revshare list-members
    revshare calculate --revenue 1000
    revshare commit --revenue 1000 --date 2026-03-01 --notes "Q1 store sales"
    revshare history
    revshare export-csv --output timeline.csv
    revshare check-policy

Locations default to config/ and data/ at the project root and can be
overridden with --config / --data-dir or the REVSHARE_CONFIG_DIR and
REVSHARE_DATA_DIR environment variables (a .env file is honoured).
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from datetime import date
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from revshare.errors import InvalidInputError, PolicyError, ProjectFileError
from revshare.export.credits import credits_filename
from revshare.export.report import report_filename
from revshare.export.timeline_csv import timeline_filename
from revshare.models.contributor import Tier
from revshare.policy.resolver import POLICY_FILENAME, PolicyResolver
from revshare.service import RevshareService, ServiceResult


ROOT = Path(__file__).resolve().parents[2]
DEFAULT_CONFIG = ROOT / "config"
DEFAULT_DATA = ROOT / "data"
PROJECT_FILENAME = "project.json"

logger = logging.getLogger(__name__)


def _make_resolver(config_dir: Path) -> PolicyResolver:
    if (config_dir / POLICY_FILENAME).exists():
        return PolicyResolver.from_config_dir(config_dir)
    logger.info("No %s in %s, using built-in policy", POLICY_FILENAME, config_dir)
    return PolicyResolver.defaults()


def _make_service(args: argparse.Namespace) -> RevshareService:
    """Create a RevshareService backed by the project file in data_dir."""
    data_dir: Path = args.data_dir
    data_dir.mkdir(parents=True, exist_ok=True)
    return RevshareService(
        _make_resolver(args.config),
        project_path=data_dir / PROJECT_FILENAME,
    )


def _report(result: ServiceResult, message: str) -> int:
    if result.success:
        print(message)
        return 0
    print(f"Failed: {'; '.join(result.errors)}", file=sys.stderr)
    return 1


def _write_output(content: str, output: Optional[Path], default_name: str) -> None:
    """Write to stdout, to a file, or to default_name inside a directory."""
    if output is None:
        sys.stdout.write(content)
        return
    if output.is_dir():
        output = output / default_name
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(content, encoding="utf-8")
    print(f"Wrote {output}")


def cmd_init(args: argparse.Namespace) -> int:
    service = _make_service(args)
    result = service.set_project_info(name=args.name, description=args.description)
    return _report(result, f"Project: {result.data.get('name') or '(unnamed)'}")


def cmd_status(args: argparse.Namespace) -> int:
    service = _make_service(args)
    print(json.dumps(service.status(), indent=2, ensure_ascii=False))
    return 0


def cmd_add_member(args: argparse.Namespace) -> int:
    service = _make_service(args)
    result = service.add_member(
        name=args.name,
        tier=args.tier,
        email=args.email or "",
        payment_address=args.payment or "",
        role=args.role or "",
    )
    return _report(
        result,
        f"Added member: {result.data.get('name')} ({result.data.get('member_id')})",
    )


def cmd_update_member(args: argparse.Namespace) -> int:
    service = _make_service(args)
    result = service.update_member(
        args.id,
        name=args.name,
        tier=args.tier,
        email=args.email,
        payment_address=args.payment,
        role=args.role,
    )
    return _report(result, f"Updated member: {result.data.get('name')}")


def cmd_remove_member(args: argparse.Namespace) -> int:
    service = _make_service(args)
    result = service.remove_member(args.id)
    return _report(result, f"Removed member: {args.id}")


def cmd_list_members(args: argparse.Namespace) -> int:
    service = _make_service(args)
    tiers = [Tier(args.tier)] if args.tier else list(Tier)
    for tier in tiers:
        members = service.store.members_in_tier(tier)
        print(f"{tier.label} ({len(members)})")
        for member in members:
            role = f" - {member.role}" if member.role else ""
            print(f"  {member.member_id}  {member.name}{role}")
    return 0


def cmd_calculate(args: argparse.Namespace) -> int:
    service = _make_service(args)
    result = service.calculate(args.revenue)
    if result.success:
        print(json.dumps(result.data, indent=2, ensure_ascii=False))
        return 0
    print(f"Failed: {'; '.join(result.errors)}", file=sys.stderr)
    return 1


def cmd_commit(args: argparse.Namespace) -> int:
    """Calculate and commit in one step."""
    service = _make_service(args)
    calculated = service.calculate(args.revenue)
    if not calculated.success:
        print(f"Failed: {'; '.join(calculated.errors)}", file=sys.stderr)
        return 1
    result = service.commit(payout_date=args.date, notes=args.notes or "")
    return _report(
        result,
        f"Committed payout {result.data.get('payout_id')} "
        f"({result.data.get('revenue')} on {result.data.get('date')})",
    )


def cmd_history(args: argparse.Namespace) -> int:
    service = _make_service(args)
    print(json.dumps(service.history(), indent=2, ensure_ascii=False))
    return 0


def cmd_remove_payout(args: argparse.Namespace) -> int:
    service = _make_service(args)
    result = service.remove_payout(args.id)
    return _report(result, f"Deleted payout: {args.id}")


def cmd_export_credits(args: argparse.Namespace) -> int:
    service = _make_service(args)
    _write_output(
        service.export_credits(), args.output,
        credits_filename(service.store.project_name),
    )
    return 0


def cmd_export_report(args: argparse.Namespace) -> int:
    service = _make_service(args)
    _write_output(
        service.export_full_report(), args.output,
        report_filename(service.store.project_name),
    )
    return 0


def cmd_export_csv(args: argparse.Namespace) -> int:
    service = _make_service(args)
    result = service.export_timeline_csv()
    if not result.success:
        print(f"Failed: {'; '.join(result.errors)}", file=sys.stderr)
        return 1
    _write_output(
        result.data["content"], args.output,
        timeline_filename(service.store.project_name),
    )
    return 0


def cmd_save_snapshot(args: argparse.Namespace) -> int:
    service = _make_service(args)
    result = service.save_snapshot(args.dir or args.data_dir)
    return _report(result, f"Project saved as {result.data.get('path')}")


def cmd_load(args: argparse.Namespace) -> int:
    service = _make_service(args)
    result = service.load_project_file(args.file)
    return _report(result, f"Project loaded: {args.file.name}")


def cmd_check_policy(args: argparse.Namespace) -> int:
    """Validate the payout policy config."""
    resolver = PolicyResolver.from_config_dir(args.config)
    policy = resolver.payout_policy()
    print(f"Policy OK: {resolver.source}")
    print(
        f"  weights main={policy.main_weight} assistant={policy.assistant_weight} "
        f"thanks={policy.thanks_weight} fan={policy.fan_weight}"
    )
    print(
        f"  fairness ratio>{policy.fairness_ratio_threshold} "
        f"floor={policy.main_tier_floor}"
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="revshare",
        description="Revenue-share ledger and payout calculator",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=Path(os.getenv("REVSHARE_CONFIG_DIR") or DEFAULT_CONFIG),
        help="Path to config directory (default: config/)",
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=Path(os.getenv("REVSHARE_DATA_DIR") or DEFAULT_DATA),
        help="Directory holding project.json (default: data/)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress")
    sub = parser.add_subparsers(dest="command")

    # init
    p_init = sub.add_parser("init", help="Set project name and description")
    p_init.add_argument("--name", help="Project name")
    p_init.add_argument("--description", help="Project description")

    # status
    sub.add_parser("status", help="Show project status")

    # add-member
    tier_choices = [t.value for t in Tier]
    p_add = sub.add_parser("add-member", help="Add a contributor")
    p_add.add_argument("--name", required=True, help="Display name")
    p_add.add_argument("--tier", required=True, choices=tier_choices)
    p_add.add_argument("--email", help="Contact email")
    p_add.add_argument("--payment", help="Payment address")
    p_add.add_argument("--role", help="Role description")

    # update-member
    p_upd = sub.add_parser("update-member", help="Update a contributor")
    p_upd.add_argument("--id", required=True, help="Member ID")
    p_upd.add_argument("--name", help="Display name")
    p_upd.add_argument("--tier", choices=tier_choices)
    p_upd.add_argument("--email", help="Contact email")
    p_upd.add_argument("--payment", help="Payment address")
    p_upd.add_argument("--role", help="Role description")

    # remove-member
    p_rm = sub.add_parser("remove-member", help="Remove a contributor")
    p_rm.add_argument("--id", required=True, help="Member ID")

    # list-members
    p_list = sub.add_parser("list-members", help="List contributors by tier")
    p_list.add_argument("--tier", choices=tier_choices)

    # calculate
    p_calc = sub.add_parser("calculate", help="Calculate a payout without committing")
    p_calc.add_argument("--revenue", required=True, help="Revenue amount (Decimal)")

    # commit
    p_commit = sub.add_parser("commit", help="Calculate and commit a payout")
    p_commit.add_argument("--revenue", required=True, help="Revenue amount (Decimal)")
    p_commit.add_argument(
        "--date", type=date.fromisoformat, help="Payout date YYYY-MM-DD (default: today)",
    )
    p_commit.add_argument("--notes", help="Free-text notes")

    # history
    sub.add_parser("history", help="Show committed payouts")

    # remove-payout
    p_rmp = sub.add_parser("remove-payout", help="Delete a committed payout")
    p_rmp.add_argument("--id", required=True, help="Payout ID")

    # exports
    for name, help_text in (
        ("export-credits", "Export credits as Markdown"),
        ("export-report", "Export the full report as Markdown"),
        ("export-csv", "Export the payout timeline as CSV"),
    ):
        p_exp = sub.add_parser(name, help=help_text)
        p_exp.add_argument("--output", type=Path, help="Write to a file, or to the default file name inside a directory")

    # save-snapshot
    p_snap = sub.add_parser("save-snapshot", help="Save a timestamped project copy")
    p_snap.add_argument("--dir", type=Path, help="Target directory (default: data dir)")

    # load
    p_load = sub.add_parser("load", help="Replace the project with a JSON file")
    p_load.add_argument("--file", type=Path, required=True, help="Project JSON file")

    # check-policy
    sub.add_parser("check-policy", help="Validate the payout policy config")

    return parser


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "init": cmd_init,
        "status": cmd_status,
        "add-member": cmd_add_member,
        "update-member": cmd_update_member,
        "remove-member": cmd_remove_member,
        "list-members": cmd_list_members,
        "calculate": cmd_calculate,
        "commit": cmd_commit,
        "history": cmd_history,
        "remove-payout": cmd_remove_payout,
        "export-credits": cmd_export_credits,
        "export-report": cmd_export_report,
        "export-csv": cmd_export_csv,
        "save-snapshot": cmd_save_snapshot,
        "load": cmd_load,
        "check-policy": cmd_check_policy,
    }

    handler = commands.get(args.command)
    if handler is None:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1

    try:
        return handler(args)
    except (InvalidInputError, PolicyError, ProjectFileError) as e:
        print(f"Failed: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
