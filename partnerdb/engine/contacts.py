"""
Contact Store - Contact and Staff Operations
Every contact lives in exactly one category partition; staff are embedded in
their contact row. Communicates outward via the event bus only.
"""

import logging
import uuid
from typing import List, Optional, Dict, Any

from psycopg2 import errors as pg_errors
from psycopg2.extras import Json

from partnerdb.db.connection import get_db_cursor
from partnerdb.errors import DuplicateKeyError, NotFoundError, ValidationError
from partnerdb.models import Contact, Staff, CategoryType
from partnerdb.bus.events import bus, EVENT_CONTACT_CREATED, EVENT_CONTACT_UPDATED, EVENT_CONTACT_DELETED

logger = logging.getLogger(__name__)

# Allowlist for dynamic UPDATE queries: column names never come from user input directly.
# No 'category': the partition is fixed at creation.
_CONTACT_COLUMNS = {
    'brand_name', 'industry', 'sub_category', 'address', 'phone', 'phone2', 'email',
    'homepage', 'bank_account', 'license_file', 'attachments', 'staff_list', 'memo',
}
_JSON_COLUMNS = {'license_file', 'attachments', 'staff_list'}


def _validate_columns(updates: Dict[str, Any], allowed: set, entity: str) -> None:
    """Raise ValidationError if any key in updates is not an allowed column name."""
    invalid = set(updates.keys()) - allowed
    if invalid:
        raise ValidationError(f"Invalid {entity} fields: {sorted(invalid)}")


def _prepare_staff(staff_list: List[Staff]) -> List[Dict[str, Any]]:
    """Check required staff fields, assign missing ids, return the JSONB payload."""
    payload = []
    for position, staff in enumerate(staff_list, start=1):
        if not (staff.name or '').strip():
            raise ValidationError(f"Staff #{position}: name is required")
        if not staff.id:
            staff.id = uuid.uuid4().hex
        payload.append(staff.to_json())
    return payload


def _db_value(column: str, value: Any) -> Any:
    if column == 'staff_list':
        return Json(_prepare_staff(value or []))
    if column == 'attachments':
        return Json(value or [])
    if column in _JSON_COLUMNS:
        return Json(value) if value is not None else None
    return value


# =============================================================================
# CONTACT OPERATIONS
# =============================================================================

def create_contact(contact: Contact) -> Contact:
    """
    Create a new contact.
    Returns: the stored contact (with server timestamps)
    Raises: DuplicateKeyError if the id is taken, ValidationError on bad staff
    """
    if not isinstance(contact.category, CategoryType):
        raise ValidationError(f"Invalid category: {contact.category!r}")
    if not contact.id:
        contact.id = uuid.uuid4().hex

    params = {'id': contact.id, 'category': contact.category.value}
    for column in _CONTACT_COLUMNS:
        params[column] = _db_value(column, getattr(contact, column))

    with get_db_cursor() as cur:
        try:
            cur.execute("""
                INSERT INTO contacts (
                    id, category, brand_name, industry, sub_category, address,
                    phone, phone2, email, homepage, bank_account, license_file,
                    attachments, staff_list, memo, created_at, updated_at
                ) VALUES (
                    %(id)s, %(category)s, %(brand_name)s, %(industry)s, %(sub_category)s,
                    %(address)s, %(phone)s, %(phone2)s, %(email)s, %(homepage)s,
                    %(bank_account)s, %(license_file)s, %(attachments)s, %(staff_list)s,
                    %(memo)s, NOW(), NOW()
                ) RETURNING *
            """, params)
        except pg_errors.UniqueViolation as e:
            raise DuplicateKeyError(f"Contact {contact.id} already exists") from e

        stored = Contact.from_row(cur.fetchone())
        logger.info(f"Created contact {stored.id} [{stored.category.value}]: {stored.brand_name}")

        bus.emit(EVENT_CONTACT_CREATED, {'contact_id': stored.id, 'category': stored.category.value})

        return stored


def get_contact(contact_id: str) -> Contact:
    """
    Get contact by ID.
    Raises: NotFoundError
    """
    with get_db_cursor() as cur:
        cur.execute("SELECT * FROM contacts WHERE id = %s", (contact_id,))

        row = cur.fetchone()
        if row:
            return Contact.from_row(row)
        logger.debug(f"get_contact: contact_id={contact_id} not found")
        raise NotFoundError(f"Contact {contact_id} not found")


def list_contacts(category: Optional[CategoryType] = None) -> List[Contact]:
    """
    List contacts, newest first.
    With a category only that partition is returned; without one, all partitions.
    """
    with get_db_cursor() as cur:
        if category is None:
            cur.execute("SELECT * FROM contacts ORDER BY created_at DESC")
        else:
            cur.execute("""
                SELECT * FROM contacts
                WHERE category = %s
                ORDER BY created_at DESC
            """, (CategoryType(category).value,))

        rows = cur.fetchall()
        logger.debug(f"list_contacts: {len(rows)} results (category={category})")
        return [Contact.from_row(row) for row in rows]


def find_by_brand_name(brand_name: str) -> Optional[Contact]:
    """Newest contact whose brand name matches exactly, or None."""
    with get_db_cursor() as cur:
        cur.execute("""
            SELECT * FROM contacts
            WHERE brand_name = %s
            ORDER BY created_at DESC
            LIMIT 1
        """, (brand_name.strip(),))

        row = cur.fetchone()
        return Contact.from_row(row) if row else None


def update_contact(contact_id: str, updates: Dict[str, Any]) -> Contact:
    """
    Replace mutable contact fields and stamp updated_at.
    Args:
        contact_id: ID of contact to update
        updates: Dict of field_name: new_value (staff_list as a list of Staff)
    Returns: the updated contact
    Raises: ValidationError for unknown/immutable fields, NotFoundError if absent
    """
    if not updates:
        raise ValidationError("No contact fields to update")

    # Guard: only known columns may appear in the SET clause
    _validate_columns(updates, _CONTACT_COLUMNS, 'contact')

    params = {column: _db_value(column, value) for column, value in updates.items()}

    # Build SET clause; keys are validated against the allowlist above
    set_clause = ', '.join(f"{key} = %({key})s" for key in params)

    params['contact_id'] = contact_id

    with get_db_cursor() as cur:
        cur.execute(f"""
            UPDATE contacts
            SET {set_clause}, updated_at = NOW()
            WHERE id = %(contact_id)s
            RETURNING *
        """, params)

        row = cur.fetchone()
        if not row:
            raise NotFoundError(f"Contact {contact_id} not found")

        logger.info(f"Updated contact {contact_id}: {sorted(updates.keys())}")
        bus.emit(EVENT_CONTACT_UPDATED, {'contact_id': contact_id, 'fields': sorted(updates.keys())})
        return Contact.from_row(row)


def delete_contact(contact_id: str) -> bool:
    """
    Delete a contact and its embedded staff. Idempotent.
    Returns: True if a row was removed, False if it did not exist
    """
    with get_db_cursor() as cur:
        cur.execute("DELETE FROM contacts WHERE id = %s", (contact_id,))

        if cur.rowcount > 0:
            logger.info(f"Deleted contact {contact_id}")
            bus.emit(EVENT_CONTACT_DELETED, {'contact_id': contact_id})
            return True
        logger.debug(f"delete_contact: contact_id={contact_id} already absent")
        return False


def mutable_fields(contact: Contact) -> Dict[str, Any]:
    """The full set of updatable fields of a contact, ready for update_contact()."""
    return {column: getattr(contact, column) for column in sorted(_CONTACT_COLUMNS)}
