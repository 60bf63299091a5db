from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..audit.model import advisory_from_dict
from ..core.enums import VerificationSource
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json, optional_float
from .model import NewProgressEvent, NewStage, ProgressEvent, Stage, Verification
from .repository import ProgressRepository

_STAGE_COLUMNS = """
    stage_id, project_id, package_id, name, stage_order, weight_percent,
    reported_progress_percent, verified_progress_percent, verification_source,
    last_reported_by, last_reported_at, last_verified_by, last_verified_at, created_at
"""

_EVENT_COLUMNS = """
    event_id, project_id, package_id, stage_id, created_by, created_at,
    reported_progress_percent, photo_urls, note, zone, je_comment, je_comment_updated_at,
    advisory, verified_percent, verified_by, verified_at, sdo_comment, verification_source
"""


class MySQLProgressRepository(ProgressRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_stage(self, project_id: str, package_id: str, stage_id: int) -> Optional[Stage]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_STAGE_COLUMNS} FROM stages WHERE project_id=%s AND package_id=%s AND stage_id=%s",
                (project_id, package_id, stage_id),
            )
            r = fetchone(cur)
            return self._to_stage(r) if r else None

    def list_stages(self, project_id: str, package_id: str) -> Sequence[Stage]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_STAGE_COLUMNS}
                FROM stages
                WHERE project_id=%s AND package_id=%s
                ORDER BY stage_order, stage_id
                """,
                (project_id, package_id),
            )
            return [self._to_stage(r) for r in fetchall(cur)]

    def total_weight(self, project_id: str, package_id: str) -> float:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COALESCE(SUM(weight_percent), 0) AS total FROM stages WHERE project_id=%s AND package_id=%s",
                (project_id, package_id),
            )
            r = fetchone(cur)
            return float(r["total"]) if r else 0.0

    def create_stage(self, stage: NewStage) -> Stage:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO stages(project_id, package_id, name, stage_order, weight_percent, created_at)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (stage.project_id, stage.package_id, stage.name, stage.order, stage.weight_percent, stage.created_at),
            )
            stage_id = int(cur.lastrowid)
        return Stage(
            stage_id=stage_id,
            project_id=stage.project_id,
            package_id=stage.package_id,
            name=stage.name,
            order=stage.order,
            weight_percent=stage.weight_percent,
            created_at=stage.created_at,
        )

    def previous_stage_names(self, project_id: str, package_id: str, before_order: int, limit: int) -> list[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT name
                FROM stages
                WHERE project_id=%s AND package_id=%s AND stage_order < %s
                ORDER BY stage_order DESC
                LIMIT %s
                """,
                (project_id, package_id, before_order, int(limit)),
            )
            return [str(r["name"]) for r in fetchall(cur)]

    def record_report(self, event: NewProgressEvent) -> Optional[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            # Compare-and-set: a lower value matches no row.
            cur.execute(
                """
                UPDATE stages
                SET reported_progress_percent=%s, last_reported_by=%s, last_reported_at=%s
                WHERE project_id=%s AND package_id=%s AND stage_id=%s AND reported_progress_percent <= %s
                """,
                (
                    event.reported_progress_percent,
                    event.created_by,
                    event.created_at,
                    event.project_id,
                    event.package_id,
                    event.stage_id,
                    event.reported_progress_percent,
                ),
            )
            if cur.rowcount == 0:
                # MySQL reports 0 affected rows for an identical rewrite too.
                cur.execute(
                    """
                    SELECT reported_progress_percent
                    FROM stages
                    WHERE project_id=%s AND package_id=%s AND stage_id=%s
                    FOR UPDATE
                    """,
                    (event.project_id, event.package_id, event.stage_id),
                )
                r = fetchone(cur)
                if not r or float(r["reported_progress_percent"]) > event.reported_progress_percent:
                    return None

            cur.execute(
                """
                INSERT INTO progress_events(
                    project_id, package_id, stage_id, created_by, created_at,
                    reported_progress_percent, photo_urls, note, zone, je_comment, advisory
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    event.project_id,
                    event.package_id,
                    event.stage_id,
                    event.created_by,
                    event.created_at,
                    event.reported_progress_percent,
                    dump_json(list(event.photo_urls)),
                    event.note,
                    event.zone,
                    event.je_comment,
                    dump_json(event.advisory.to_dict()) if event.advisory else None,
                ),
            )
            return int(cur.lastrowid)

    def get_event(self, event_id: int) -> Optional[ProgressEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_EVENT_COLUMNS} FROM progress_events WHERE event_id=%s", (event_id,))
            r = fetchone(cur)
            return self._to_event(r) if r else None

    def apply_verification(self, verification: Verification) -> None:
        v = verification
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE stages
                SET verified_progress_percent=%s, verification_source=%s, last_verified_by=%s, last_verified_at=%s
                WHERE stage_id=%s
                """,
                (v.percent, v.source.value, v.verified_by, v.verified_at, v.stage_id),
            )
            cur.execute(
                """
                UPDATE progress_events
                SET verified_percent=%s, verified_by=%s, verified_at=%s, sdo_comment=%s, verification_source=%s
                WHERE event_id=%s
                """,
                (v.percent, v.verified_by, v.verified_at, v.sdo_comment, v.source.value, v.event_id),
            )

    def update_je_comment(self, event_id: int, comment: str, at: datetime) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE progress_events SET je_comment=%s, je_comment_updated_at=%s WHERE event_id=%s",
                (comment, at, event_id),
            )

    @staticmethod
    def _to_stage(r: dict) -> Stage:
        return Stage(
            stage_id=int(r["stage_id"]),
            project_id=str(r["project_id"]),
            package_id=str(r["package_id"]),
            name=r["name"],
            order=int(r["stage_order"]),
            weight_percent=float(r["weight_percent"]),
            reported_progress_percent=float(r.get("reported_progress_percent") or 0),
            verified_progress_percent=optional_float(r.get("verified_progress_percent")),
            verification_source=VerificationSource(r.get("verification_source") or VerificationSource.UNKNOWN.value),
            last_reported_by=r.get("last_reported_by"),
            last_reported_at=r.get("last_reported_at"),
            last_verified_by=r.get("last_verified_by"),
            last_verified_at=r.get("last_verified_at"),
            created_at=r.get("created_at"),
        )

    @staticmethod
    def _to_event(r: dict) -> ProgressEvent:
        source = r.get("verification_source")
        return ProgressEvent(
            event_id=int(r["event_id"]),
            project_id=str(r["project_id"]),
            package_id=str(r["package_id"]),
            stage_id=int(r["stage_id"]),
            created_by=str(r["created_by"]),
            created_at=r["created_at"],
            reported_progress_percent=float(r["reported_progress_percent"]),
            photo_urls=tuple(load_json(r.get("photo_urls"), default=[])),
            note=r.get("note"),
            zone=r.get("zone"),
            je_comment=r.get("je_comment"),
            je_comment_updated_at=r.get("je_comment_updated_at"),
            advisory=advisory_from_dict(load_json(r.get("advisory"))),
            verified_percent=optional_float(r.get("verified_percent")),
            verified_by=r.get("verified_by"),
            verified_at=r.get("verified_at"),
            sdo_comment=r.get("sdo_comment"),
            verification_source=VerificationSource(source) if source else None,
        )
