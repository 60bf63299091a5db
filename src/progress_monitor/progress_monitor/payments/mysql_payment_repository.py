from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import NewPayment, Payment
from .repository import PaymentRepository


class MySQLPaymentRepository(PaymentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def add(self, payment: NewPayment) -> Payment:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO payments(project_id, package_id, bill_no, bill_date, amount, created_by, created_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    payment.project_id,
                    payment.package_id,
                    payment.bill_no,
                    payment.bill_date,
                    payment.amount,
                    payment.created_by,
                    payment.created_at,
                ),
            )
            payment_id = int(cur.lastrowid)
        return Payment(payment_id=payment_id, **{k: getattr(payment, k) for k in payment.__dataclass_fields__})

    def total_paid(self, project_id: str, package_id: Optional[str] = None) -> float:
        sql = "SELECT COALESCE(SUM(amount), 0) AS total FROM payments WHERE project_id=%s"
        params: tuple = (project_id,)
        if package_id is not None:
            sql += " AND package_id=%s"
            params = (project_id, package_id)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            r = fetchone(cur)
            return float(r["total"]) if r else 0.0
