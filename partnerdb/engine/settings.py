"""
Settings Store - Controlled Vocabularies
Departments, industries and outsource types. Values are unique per vocabulary
(exact, case-sensitive) and listed in insertion order. There is no remove
operation; values only change through rename (see engine/rename.py).
"""

import logging
from typing import List

from psycopg2 import errors as pg_errors

from partnerdb.db.connection import get_db_cursor
from partnerdb.errors import DuplicateValueError, ValidationError
from partnerdb.models import VocabularyType, DEFAULT_VOCABULARIES
from partnerdb.bus.events import bus, EVENT_VOCABULARY_ADDED

logger = logging.getLogger(__name__)


def _fetch_values(cur, vocabulary: VocabularyType) -> List[str]:
    cur.execute("""
        SELECT value FROM vocabulary_entries
        WHERE vocabulary = %s
        ORDER BY position ASC
    """, (vocabulary.value,))
    return [row['value'] for row in cur.fetchall()]


def list_values(vocabulary: VocabularyType) -> List[str]:
    """All values of one vocabulary, in insertion order."""
    vocabulary = VocabularyType(vocabulary)
    with get_db_cursor() as cur:
        values = _fetch_values(cur, vocabulary)
        logger.debug(f"list_values: {vocabulary.value} → {len(values)} values")
        return values


def add_value(vocabulary: VocabularyType, value: str) -> List[str]:
    """
    Append a value to a vocabulary.
    Returns: the full updated list
    Raises: ValidationError on a blank value, DuplicateValueError if already present
    """
    vocabulary = VocabularyType(vocabulary)
    if not value or not value.strip():
        raise ValidationError(f"A {vocabulary.value} name is required")

    with get_db_cursor() as cur:
        try:
            cur.execute("""
                INSERT INTO vocabulary_entries (vocabulary, value)
                VALUES (%s, %s)
            """, (vocabulary.value, value))
        except pg_errors.UniqueViolation as e:
            raise DuplicateValueError(f"{vocabulary.value} '{value}' already exists") from e

        values = _fetch_values(cur, vocabulary)
        logger.info(f"Added {vocabulary.value} value: {value}")
        bus.emit(EVENT_VOCABULARY_ADDED, {'vocabulary': vocabulary.value, 'value': value})
        return values


def seed_defaults() -> int:
    """
    Insert the default values of every vocabulary that are not present yet.
    Returns: number of values inserted
    """
    inserted = 0
    with get_db_cursor() as cur:
        for vocabulary, values in DEFAULT_VOCABULARIES.items():
            for value in values:
                cur.execute("""
                    INSERT INTO vocabulary_entries (vocabulary, value)
                    VALUES (%s, %s)
                    ON CONFLICT (vocabulary, value) DO NOTHING
                """, (vocabulary.value, value))
                inserted += cur.rowcount
    logger.info(f"seed_defaults: {inserted} vocabulary values inserted")
    return inserted
