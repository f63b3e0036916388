"""Revshare service — unified facade over the revenue-share ledger.

This is the primary interface for programmatic access. It orchestrates:
- Project info and roster management (add, update, remove members)
- Payout calculation (engine over the active roster snapshot)
- Commit of calculations into the immutable payout history
- Exports (credits, full report, CSV timeline)
- Persistence (project JSON file)

All mutating operations return a ServiceResult. When a project file is
wired, state is saved after every mutation; if the save fails, the
in-memory mutation is rolled back and the failure is reported rather
than leaving memory and disk out of step.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional

from revshare.errors import InvalidInputError, ProjectFileError
from revshare.export.credits import generate_credits_markdown
from revshare.export.formatting import format_amount, format_date
from revshare.export.report import generate_full_report
from revshare.export.timeline_csv import generate_timeline_csv
from revshare.models.contributor import Contributor, Tier
from revshare.models.payout import PayoutCalculation, PayoutRecord
from revshare.payout.engine import PayoutEngine
from revshare.payout.recommendation import recommend_cadence
from revshare.persistence.project_file import (
    load_project,
    save_project,
    snapshot_filename,
)
from revshare.policy.resolver import PolicyResolver
from revshare.roster.store import RosterStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceResult:
    """Result of a service operation."""
    success: bool
    errors: list[str] = field(default_factory=list)
    data: dict[str, Any] = field(default_factory=dict)


class RevshareService:
    """Revenue-share ledger facade.

    Usage:
        resolver = PolicyResolver.from_config_dir(config_dir)
        service = RevshareService(resolver, project_path=Path("data/project.json"))

        service.add_member("Alice", "main")
        result = service.calculate("1000")
        service.commit(payout_date=date(2026, 3, 1), notes="Q1 sales")

    Persistence (optional):
        Without project_path the service is purely in-memory. With it,
        an existing file is loaded on construction and every mutation
        is saved.
    """

    def __init__(
        self,
        resolver: Optional[PolicyResolver] = None,
        store: Optional[RosterStore] = None,
        project_path: Optional[Path] = None,
    ) -> None:
        self._resolver = resolver or PolicyResolver.defaults()
        self._engine = PayoutEngine(self._resolver)
        self._project_path = project_path
        self._pending: Optional[PayoutCalculation] = None

        if store is not None:
            self._store = store
        elif project_path is not None and project_path.exists():
            self._store = load_project(project_path)
        else:
            self._store = RosterStore()

    @property
    def store(self) -> RosterStore:
        return self._store

    @property
    def current_calculation(self) -> Optional[PayoutCalculation]:
        return self._pending

    # ------------------------------------------------------------------
    # Project info
    # ------------------------------------------------------------------

    def set_project_info(
        self,
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> ServiceResult:
        prev_name = self._store.project_name
        prev_description = self._store.project_description
        self._store.set_project_info(name=name, description=description)

        def _rollback() -> None:
            self._store.set_project_info(name=prev_name, description=prev_description)

        err = self._safe_persist(on_rollback=_rollback)
        if err:
            return ServiceResult(success=False, errors=[err])
        return ServiceResult(success=True, data={
            "name": self._store.project_name,
            "description": self._store.project_description,
        })

    # ------------------------------------------------------------------
    # Member management
    # ------------------------------------------------------------------

    def add_member(
        self,
        name: str,
        tier: object,
        email: str = "",
        payment_address: str = "",
        role: str = "",
    ) -> ServiceResult:
        """Register a new contributor."""
        try:
            member = Contributor.create(
                name=name,
                tier=tier,
                email=email,
                payment_address=payment_address,
                role=role,
            )
            self._store.add_member(member)
        except ValueError as e:
            return ServiceResult(success=False, errors=[str(e)])

        def _rollback() -> None:
            self._store.remove_member(member.member_id)

        err = self._safe_persist(on_rollback=_rollback)
        if err:
            return ServiceResult(success=False, errors=[err])
        logger.info("Added %s to the %s tier", member.name, member.tier.value)
        return ServiceResult(success=True, data={
            "member_id": member.member_id,
            "name": member.name,
            "tier": member.tier.value,
        })

    def update_member(
        self,
        member_id: str,
        name: Optional[str] = None,
        tier: object = None,
        email: Optional[str] = None,
        payment_address: Optional[str] = None,
        role: Optional[str] = None,
    ) -> ServiceResult:
        """Change a contributor's details. ID and join date never change."""
        current = self._store.get_member(member_id)
        if current is None:
            return ServiceResult(success=False, errors=[f"Member not found: {member_id}"])
        try:
            updated = current.with_changes(
                name=name,
                tier=tier,
                email=email,
                payment_address=payment_address,
                role=role,
            )
            previous = self._store.update_member(updated)
        except ValueError as e:
            return ServiceResult(success=False, errors=[str(e)])

        def _rollback() -> None:
            self._store.update_member(previous)

        err = self._safe_persist(on_rollback=_rollback)
        if err:
            return ServiceResult(success=False, errors=[err])
        logger.info("Updated member %s", updated.member_id)
        return ServiceResult(success=True, data={
            "member_id": updated.member_id,
            "name": updated.name,
            "tier": updated.tier.value,
        })

    def remove_member(self, member_id: str) -> ServiceResult:
        """Remove a contributor. Committed payouts keep their snapshot."""
        try:
            removed = self._store.remove_member(member_id)
        except KeyError:
            return ServiceResult(success=False, errors=[f"Member not found: {member_id}"])

        def _rollback() -> None:
            self._store.add_member(removed)

        err = self._safe_persist(on_rollback=_rollback)
        if err:
            return ServiceResult(success=False, errors=[err])
        logger.info("Removed %s from the team", removed.name)
        return ServiceResult(success=True, data={"member_id": removed.member_id})

    def get_member(self, member_id: str) -> Optional[Contributor]:
        return self._store.get_member(member_id)

    # ------------------------------------------------------------------
    # Payout calculation and history
    # ------------------------------------------------------------------

    def calculate(self, revenue_amount: object) -> ServiceResult:
        """Compute a payout over the active roster and hold it as pending.

        A failed calculation clears any previously pending one so that
        a stale result can never be committed by mistake.
        """
        try:
            calculation = self._engine.compute(
                revenue_amount, self._store.list_active_contributors(),
            )
        except InvalidInputError as e:
            self._pending = None
            return ServiceResult(success=False, errors=[str(e)])

        self._pending = calculation
        if calculation.fairness_adjusted:
            logger.info("Fairness adjustment applied: %s", calculation.fairness_explanation)
        return ServiceResult(success=True, data=self._calculation_summary(calculation))

    def clear_calculation(self) -> None:
        self._pending = None

    def commit(
        self,
        payout_date: Optional[date] = None,
        notes: str = "",
        committed_at: Optional[datetime] = None,
    ) -> ServiceResult:
        """Commit the pending calculation to the payout history.

        The payout date defaults to today (UTC); the commit timestamp to
        now. The pending calculation is cleared on success.
        """
        calculation = self._pending
        if calculation is None:
            return ServiceResult(
                success=False,
                errors=["No calculation to commit. Calculate a payout first."],
            )
        now = committed_at or datetime.now(timezone.utc)
        try:
            record = PayoutRecord.from_calculation(
                calculation,
                payout_id=uuid.uuid4().hex,
                payout_date=payout_date or now.date(),
                notes=notes,
                committed_at=now,
            )
            self._store.append_payout_record(record)
        except ValueError as e:
            return ServiceResult(success=False, errors=[str(e)])

        def _rollback() -> None:
            self._store.remove_payout_record(record.payout_id)

        err = self._safe_persist(on_rollback=_rollback)
        if err:
            return ServiceResult(success=False, errors=[err])

        self._pending = None
        logger.info(
            "Committed payout %s of %s on %s",
            record.payout_id, format_amount(record.revenue), record.date,
        )
        return ServiceResult(success=True, data={
            "payout_id": record.payout_id,
            "date": record.date.isoformat(),
            "revenue": format_amount(record.revenue),
            "adjustment_applied": record.adjustment_applied,
        })

    def remove_payout(self, payout_id: str) -> ServiceResult:
        """Delete a committed payout from the history."""
        try:
            removed = self._store.remove_payout_record(payout_id)
        except KeyError:
            return ServiceResult(success=False, errors=[f"Payout not found: {payout_id}"])

        def _rollback() -> None:
            self._store.append_payout_record(removed)

        err = self._safe_persist(on_rollback=_rollback)
        if err:
            return ServiceResult(success=False, errors=[err])
        logger.info("Deleted payout %s", removed.payout_id)
        return ServiceResult(success=True, data={"payout_id": removed.payout_id})

    def history(self) -> list[dict[str, Any]]:
        """Committed payouts, most recent first, rounded for display."""
        rows = []
        for record in reversed(self._store.list_payout_records()):
            rows.append({
                "payout_id": record.payout_id,
                "date": record.date.isoformat(),
                "revenue": format_amount(record.revenue),
                "main": f"{record.main_count} × {format_amount(record.main_share)}",
                "assistant": f"{record.assistant_count} × {format_amount(record.assistant_share)}",
                "thanks": f"{record.thanks_count} × {format_amount(record.thanks_share)}",
                "total_contributors": record.total_contributors,
                "adjustment_applied": record.adjustment_applied,
                "notes": record.notes,
                "members": [
                    {"name": m.name, "tier": m.tier.value, "amount": format_amount(m.amount)}
                    for m in record.members
                ],
            })
        return rows

    # ------------------------------------------------------------------
    # Exports
    # ------------------------------------------------------------------

    def export_credits(self) -> str:
        return generate_credits_markdown(self._store)

    def export_full_report(self, generated_at: Optional[datetime] = None) -> str:
        return generate_full_report(
            self._store,
            generated_at or datetime.now(timezone.utc),
            currency_symbol=self._resolver.currency_symbol(),
        )

    def export_timeline_csv(self) -> ServiceResult:
        try:
            content = generate_timeline_csv(self._store.list_payout_records())
        except InvalidInputError as e:
            return ServiceResult(success=False, errors=[str(e)])
        return ServiceResult(success=True, data={"content": content})

    # ------------------------------------------------------------------
    # Project files
    # ------------------------------------------------------------------

    def load_project_file(self, path: Path) -> ServiceResult:
        """Replace the current project with the contents of a file.

        On any failure the current project is left untouched.
        """
        try:
            loaded = load_project(path)
        except ProjectFileError as e:
            return ServiceResult(success=False, errors=[str(e)])
        except OSError as e:
            return ServiceResult(success=False, errors=[f"Error reading file: {e}"])

        previous = self._store
        self._store = loaded
        self._pending = None

        def _rollback() -> None:
            self._store = previous

        err = self._safe_persist(on_rollback=_rollback)
        if err:
            return ServiceResult(success=False, errors=[err])
        return ServiceResult(success=True, data={
            "project": loaded.project_name,
            "members": loaded.member_count,
            "payouts": loaded.payout_count,
        })

    def save_snapshot(
        self,
        directory: Path,
        now: Optional[datetime] = None,
    ) -> ServiceResult:
        """Write a timestamped copy of the project into a directory."""
        filename = snapshot_filename(
            self._store.project_name, now or datetime.now(timezone.utc),
        )
        path = Path(directory) / filename
        was_dirty = self._store.dirty
        try:
            save_project(self._store, path)
        except OSError as e:
            logger.warning("Snapshot save to %s failed: %s", path, e)
            return ServiceResult(success=False, errors=[f"Error saving file: {e}"])
        if was_dirty and self._project_path is not None:
            # A snapshot does not make the working project file current.
            self._store.mark_unsaved()
        return ServiceResult(success=True, data={"path": str(path)})

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def status(self) -> dict[str, Any]:
        counts = self._store.tier_counts()
        overview = self._store.history_overview()
        return {
            "project": {
                "name": self._store.project_name,
                "description": self._store.project_description,
            },
            "members": {tier.value: counts[tier] for tier in Tier},
            "history": {
                "total_revenue": format_amount(overview.total_revenue),
                "payouts": overview.payout_count,
                "average_payout": format_amount(overview.average_payout),
                "last_payout": format_date(overview.last_payout_date),
            },
            "unsaved_changes": self._store.dirty,
            "project_file": str(self._project_path) if self._project_path else None,
        }

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _calculation_summary(self, calculation: PayoutCalculation) -> dict[str, Any]:
        recommendation = recommend_cadence(calculation, self._resolver.payout_policy())
        return {
            "revenue": format_amount(calculation.revenue_amount),
            "counts": {
                "main": calculation.counts.main,
                "assistant": calculation.counts.assistant,
                "thanks": calculation.counts.thanks,
                "total": calculation.total_contributors,
            },
            "shares": {
                "main": format_amount(calculation.main_share),
                "assistant": format_amount(calculation.assistant_share),
                "thanks": format_amount(calculation.thanks_share),
            },
            "fairness_adjusted": calculation.fairness_adjusted,
            "fairness_explanation": calculation.fairness_explanation,
            "recommendation": {
                "cadence": recommendation.cadence.value,
                "per_member": format_amount(recommendation.per_member_amount),
                "message": recommendation.message,
            },
            "members": [
                {
                    "member_id": a.member_id,
                    "name": a.name,
                    "tier": a.tier.value,
                    "amount": format_amount(a.amount),
                }
                for a in calculation.allocations
            ],
        }

    def _safe_persist(
        self,
        on_rollback: Optional[Callable[[], None]] = None,
    ) -> Optional[str]:
        """Save the project file (if wired) with fail-closed handling.

        On OSError the rollback callback undoes the in-memory mutation
        and an error string is returned for the caller's ServiceResult.
        On success (or with no file wired) returns None.
        """
        if self._project_path is None:
            return None
        try:
            save_project(self._store, self._project_path)
            return None
        except OSError as e:
            logger.warning("Saving %s failed, rolling back: %s", self._project_path, e)
            if on_rollback is not None:
                on_rollback()
            return f"Persistence failure: {e}"
