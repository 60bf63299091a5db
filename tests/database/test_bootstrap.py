from pathlib import Path

from src.progress_monitor.progress_monitor.database.bootstrap import split_statements

SCHEMA = Path(__file__).resolve().parents[2] / "database" / "schema.sql"


def test_schema_file_splits_into_table_statements():
    statements = list(split_statements(SCHEMA.read_text(encoding="utf-8")))

    assert len(statements) == 8
    assert all(s.upper().startswith("CREATE TABLE IF NOT EXISTS") for s in statements)


def test_semicolons_inside_literals_do_not_split():
    sql = """
    -- seed
    USE whatever;
    INSERT INTO notes VALUES ('a;b', "c;d");
    INSERT INTO notes VALUES ('it\\'s');
    """

    assert list(split_statements(sql)) == [
        "INSERT INTO notes VALUES ('a;b', \"c;d\")",
        "INSERT INTO notes VALUES ('it\\'s')",
    ]
