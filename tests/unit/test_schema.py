"""
Unit tests for partnerdb/db/schema.py.
"""

from contextlib import contextmanager
from unittest.mock import MagicMock, patch

from partnerdb.db.schema import SCHEMA_STATEMENTS, init_schema


def test_init_schema_runs_every_statement_in_one_transaction():
    cur = MagicMock()
    opened = []

    @contextmanager
    def _mock_ctx():
        opened.append(True)
        yield cur

    with patch('partnerdb.db.schema.get_db_cursor', _mock_ctx):
        count = init_schema()

    assert count == len(SCHEMA_STATEMENTS)
    assert len(opened) == 1
    assert [c[0][0] for c in cur.execute.call_args_list] == SCHEMA_STATEMENTS


def test_schema_is_rerunnable():
    for statement in SCHEMA_STATEMENTS:
        assert 'IF NOT EXISTS' in statement


def test_schema_tables():
    joined = '\n'.join(SCHEMA_STATEMENTS)
    for table in ('contacts', 'vocabulary_entries', 'authorized_users', 'labor_claims'):
        assert f'CREATE TABLE IF NOT EXISTS {table}' in joined
    assert 'UNIQUE (vocabulary, value)' in joined
