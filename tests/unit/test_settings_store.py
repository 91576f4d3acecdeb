"""
Unit tests for the Settings Store (partnerdb/engine/settings.py).
Same strategy as the contact store tests: a MagicMock cursor stands in for PostgreSQL.
"""

import pytest
from contextlib import contextmanager
from unittest.mock import MagicMock, patch

from psycopg2 import errors as pg_errors

from partnerdb.errors import DuplicateValueError, ValidationError
from partnerdb.models import VocabularyType, DEFAULT_VOCABULARIES
from partnerdb.engine.settings import list_values, add_value, seed_defaults
from partnerdb.bus.events import EVENT_VOCABULARY_ADDED


def make_cursor(fetchall=None, rowcount=1):
    cur = MagicMock()
    cur.fetchall.return_value = fetchall if fetchall is not None else []
    cur.rowcount = rowcount
    return cur


def cursor_patch(cur):
    @contextmanager
    def _mock_ctx():
        yield cur

    return patch('partnerdb.engine.settings.get_db_cursor', _mock_ctx)


def rows(*values):
    return [{'value': v} for v in values]


# ---------------------------------------------------------------------------
# list_values
# ---------------------------------------------------------------------------

def test_list_values_in_insertion_order():
    cur = make_cursor(fetchall=rows('총무팀', '관리팀', '영업팀'))
    with cursor_patch(cur):
        values = list_values(VocabularyType.DEPARTMENT)
    sql, params = cur.execute.call_args[0]
    assert 'ORDER BY position ASC' in sql
    assert params == ('department',)
    assert values == ['총무팀', '관리팀', '영업팀']


def test_list_values_accepts_raw_enum_value():
    cur = make_cursor(fetchall=rows('크레인'))
    with cursor_patch(cur):
        assert list_values('outsource_type') == ['크레인']
    assert cur.execute.call_args[0][1] == ('outsource_type',)


def test_list_values_empty_vocabulary():
    cur = make_cursor(fetchall=[])
    with cursor_patch(cur):
        assert list_values(VocabularyType.INDUSTRY) == []


# ---------------------------------------------------------------------------
# add_value
# ---------------------------------------------------------------------------

def test_add_value_returns_full_list():
    cur = make_cursor(fetchall=rows('프랜차이즈', '기업', '카페'))
    with cursor_patch(cur):
        values = add_value(VocabularyType.INDUSTRY, '카페')
    insert_sql, insert_params = cur.execute.call_args_list[0][0]
    assert 'INSERT INTO vocabulary_entries' in insert_sql
    assert insert_params == ('industry', '카페')
    assert values == ['프랜차이즈', '기업', '카페']


@pytest.mark.parametrize('blank', ['', '   ', None])
def test_add_value_blank_rejected(blank):
    cur = make_cursor()
    with cursor_patch(cur):
        with pytest.raises(ValidationError):
            add_value(VocabularyType.DEPARTMENT, blank)
    cur.execute.assert_not_called()


def test_add_value_duplicate_raises():
    cur = make_cursor()
    cur.execute.side_effect = pg_errors.UniqueViolation()
    with cursor_patch(cur), patch('partnerdb.engine.settings.bus.emit') as mock_emit:
        with pytest.raises(DuplicateValueError, match='영업팀'):
            add_value(VocabularyType.DEPARTMENT, '영업팀')
    mock_emit.assert_not_called()


def test_add_value_emits_event():
    cur = make_cursor(fetchall=rows('시공일당', '크레인', '도장'))
    with cursor_patch(cur), patch('partnerdb.engine.settings.bus.emit') as mock_emit:
        add_value(VocabularyType.OUTSOURCE_TYPE, '도장')
    mock_emit.assert_called_once_with(EVENT_VOCABULARY_ADDED, {'vocabulary': 'outsource_type', 'value': '도장'})


# ---------------------------------------------------------------------------
# seed_defaults
# ---------------------------------------------------------------------------

def test_seed_defaults_inserts_every_default_value():
    cur = make_cursor(rowcount=1)
    with cursor_patch(cur):
        inserted = seed_defaults()
    expected = sum(len(values) for values in DEFAULT_VOCABULARIES.values())
    assert inserted == expected
    assert cur.execute.call_count == expected
    assert 'ON CONFLICT (vocabulary, value) DO NOTHING' in cur.execute.call_args[0][0]


def test_seed_defaults_is_idempotent():
    cur = make_cursor(rowcount=0)
    with cursor_patch(cur):
        assert seed_defaults() == 0
