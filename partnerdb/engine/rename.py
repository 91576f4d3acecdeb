"""
Rename Propagator
Renames a vocabulary value and rewrites every contact/staff field that refers to
the old value, inside a single transaction.

Contacts reference vocabulary values by text, not by key, so a rename is a
multi-row text substitution:

    department      → staff_list[*].department   (every contact)
    industry        → contacts.industry           (every contact)
    outsource_type  → contacts.sub_category       (OUTSOURCE contacts only)

The vocabulary row and every candidate contact row are locked (FOR UPDATE /
UPDATE row locks) for the duration of the transaction, so two renames, or a
rename and a contact update, on the same rows run one after the other.
"""

import copy
import logging
from typing import Any, Dict, List, Tuple

from psycopg2 import errors as pg_errors
from psycopg2.extras import Json

from partnerdb.db.connection import get_db_cursor
from partnerdb.errors import DuplicateValueError, NotFoundError, ValidationError
from partnerdb.models import CategoryType, VocabularyType
from partnerdb.bus.events import bus, EVENT_VOCABULARY_RENAMED

logger = logging.getLogger(__name__)


def rewrite_departments(
    staff_list: List[Dict[str, Any]], old_value: str, new_value: str
) -> Tuple[List[Dict[str, Any]], int]:
    """
    Pure helper: return a copy of staff_list with department == old_value
    replaced by new_value, plus the number of staff entries changed.
    """
    rewritten = copy.deepcopy(staff_list or [])
    changed = 0
    for staff in rewritten:
        if isinstance(staff, dict) and staff.get('department') == old_value:
            staff['department'] = new_value
            changed += 1
    return rewritten, changed


def _propagate_department(cur, old_value: str, new_value: str) -> int:
    cur.execute("""
        SELECT id, staff_list FROM contacts
        WHERE staff_list @> %s
        FOR UPDATE
    """, (Json([{'department': old_value}]),))

    touched = 0
    for row in cur.fetchall():
        staff_list, changed = rewrite_departments(row['staff_list'], old_value, new_value)
        if not changed:
            continue
        cur.execute("""
            UPDATE contacts
            SET staff_list = %s, updated_at = NOW()
            WHERE id = %s
        """, (Json(staff_list), row['id']))
        touched += changed
    return touched


def _propagate_industry(cur, old_value: str, new_value: str) -> int:
    cur.execute("""
        UPDATE contacts
        SET industry = %s, updated_at = NOW()
        WHERE industry = %s
    """, (new_value, old_value))
    return cur.rowcount


def _propagate_outsource_type(cur, old_value: str, new_value: str) -> int:
    cur.execute("""
        UPDATE contacts
        SET sub_category = %s, updated_at = NOW()
        WHERE sub_category = %s AND category = %s
    """, (new_value, old_value, CategoryType.OUTSOURCE.value))
    return cur.rowcount


_PROPAGATORS = {
    VocabularyType.DEPARTMENT: _propagate_department,
    VocabularyType.INDUSTRY: _propagate_industry,
    VocabularyType.OUTSOURCE_TYPE: _propagate_outsource_type,
}


def rename_value(vocabulary: VocabularyType, old_value: str, new_value: str) -> int:
    """
    Rename old_value to new_value in a vocabulary and in every record using it.

    Returns: number of records touched (staff entries for departments,
             contacts for industries and outsource types)
    Raises:
        ValidationError     new_value is blank
        DuplicateValueError new_value already exists in the vocabulary
        NotFoundError       old_value does not exist in the vocabulary
        StoreError          database failure; nothing is committed
    """
    vocabulary = VocabularyType(vocabulary)
    if not new_value or not new_value.strip():
        raise ValidationError(f"A new {vocabulary.value} name is required")

    with get_db_cursor() as cur:
        cur.execute("""
            SELECT value FROM vocabulary_entries
            WHERE vocabulary = %s AND value IN (%s, %s)
            FOR UPDATE
        """, (vocabulary.value, old_value, new_value))
        existing = {row['value'] for row in cur.fetchall()}

        if new_value in existing:
            raise DuplicateValueError(f"{vocabulary.value} '{new_value}' already exists")
        if old_value not in existing:
            raise NotFoundError(f"{vocabulary.value} '{old_value}' not found")

        try:
            cur.execute("""
                UPDATE vocabulary_entries
                SET value = %s
                WHERE vocabulary = %s AND value = %s
            """, (new_value, vocabulary.value, old_value))
        except pg_errors.UniqueViolation as e:
            raise DuplicateValueError(f"{vocabulary.value} '{new_value}' already exists") from e

        affected = _PROPAGATORS[vocabulary](cur, old_value, new_value)

    logger.info(f"Renamed {vocabulary.value} '{old_value}' → '{new_value}' ({affected} records)")
    bus.emit(EVENT_VOCABULARY_RENAMED, {
        'vocabulary': vocabulary.value,
        'old_value': old_value,
        'new_value': new_value,
        'affected': affected,
    })
    return affected
