from datetime import datetime

from src.progress_monitor.progress_monitor.progress.model import NewProgressEvent
from src.progress_monitor.progress_monitor.progress.mysql_progress_repository import MySQLProgressRepository


class StubCursor:
    def __init__(self, *, rowcount, stored=None, lastrowid=41):
        self.rowcount = rowcount
        self.stored = stored
        self.lastrowid = lastrowid
        self.statements: list[tuple[str, tuple]] = []

    def execute(self, sql, params=()):
        self.statements.append((" ".join(sql.split()), params))

    def fetchone(self):
        if self.stored is None:
            return None
        return {"reported_progress_percent": self.stored}

    def close(self):
        pass


class StubConnection:
    def __init__(self, cursor):
        self._cursor = cursor
        self.committed = False
        self.rolled_back = False

    def cursor(self, dictionary=True):
        return self._cursor

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        pass


class StubConnectionFactory:
    def __init__(self, cursor):
        self.conn = StubConnection(cursor)

    def connect(self):
        return self.conn


def report(percent):
    return NewProgressEvent(
        project_id="P1",
        package_id="PK1",
        stage_id=1,
        created_by="JE1",
        created_at=datetime(2026, 3, 2, 10, 0),
        reported_progress_percent=percent,
        photo_urls=("https://storage.test/a.jpg",),
    )


def verbs(cursor):
    return [sql.split()[0] for sql, _ in cursor.statements]


def test_raise_updates_stage_and_inserts_event_in_one_transaction():
    cur = StubCursor(rowcount=1)
    factory = StubConnectionFactory(cur)

    event_id = MySQLProgressRepository(factory).record_report(report(60))

    assert event_id == 41
    assert verbs(cur) == ["UPDATE", "INSERT"]
    update_sql, update_params = cur.statements[0]
    assert "reported_progress_percent <= %s" in update_sql
    assert update_params[0] == 60 and update_params[-1] == 60
    assert '["https://storage.test/a.jpg"]' in cur.statements[1][1]
    assert factory.conn.committed


def test_lower_value_matches_no_row_and_writes_no_event():
    cur = StubCursor(rowcount=0, stored=80)

    assert MySQLProgressRepository(StubConnectionFactory(cur)).record_report(report(50)) is None

    assert verbs(cur) == ["UPDATE", "SELECT"]
    assert cur.statements[1][0].endswith("FOR UPDATE")


def test_identical_value_still_records_event():
    cur = StubCursor(rowcount=0, stored=50)

    assert MySQLProgressRepository(StubConnectionFactory(cur)).record_report(report(50)) == 41

    assert verbs(cur) == ["UPDATE", "SELECT", "INSERT"]


def test_missing_stage_writes_nothing():
    cur = StubCursor(rowcount=0, stored=None)

    assert MySQLProgressRepository(StubConnectionFactory(cur)).record_report(report(50)) is None
    assert "INSERT" not in verbs(cur)
