"""
Labor Claims - per-day labor cost claims of outsourced workers.

A claim's total is the sum of its breakdown amounts; the total is then split
across the work sites in proportion to hours worked. Status only moves forward:
pending → approved → paid.
"""

import logging
import math
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from psycopg2 import errors as pg_errors
from psycopg2.extras import Json

from partnerdb.db.connection import get_db_cursor
from partnerdb.errors import DuplicateKeyError, NotFoundError, ValidationError
from partnerdb.models import LaborClaim, LABOR_CLAIM_STATUSES, BREAKDOWN_AMOUNT_KEYS
from partnerdb.bus.events import bus, EVENT_LABOR_CLAIM_CREATED, EVENT_LABOR_CLAIM_UPDATED, EVENT_LABOR_CLAIM_DELETED

logger = logging.getLogger(__name__)

_NEXT_STATUS = {'pending': 'approved', 'approved': 'paid'}


# =============================================================================
# ARITHMETIC
# =============================================================================

def claim_total(breakdown: Dict[str, Any]) -> float:
    """Sum of the amount fields of a breakdown; missing amounts count as 0."""
    return sum(float(breakdown.get(key) or 0) for key in BREAKDOWN_AMOUNT_KEYS)


def allocate_sites(sites: List[Dict[str, Any]], total: float) -> List[Dict[str, Any]]:
    """Return copies of sites with allocatedAmount = hours / total_hours * total, rounded half up."""
    total_hours = sum(float(site.get('hours') or 0) for site in sites)
    allocated = []
    for site in sites:
        share = math.floor(float(site.get('hours') or 0) / total_hours * total + 0.5) if total_hours > 0 else 0
        allocated.append({**site, 'allocatedAmount': share})
    return allocated


def validate_sites(sites: List[Dict[str, Any]]) -> None:
    for position, site in enumerate(sites, start=1):
        if not str(site.get('siteName') or '').strip():
            raise ValidationError(f"Site #{position}: site name is required")
        try:
            hours = float(site.get('hours') or 0)
        except (TypeError, ValueError):
            raise ValidationError(f"Site #{position}: hours must be a number")
        if hours <= 0:
            raise ValidationError(f"Site #{position}: hours must be greater than 0")


def _prepare(claim: LaborClaim) -> Dict[str, Any]:
    """Validate, compute totals/allocations, and build the row parameters."""
    if claim.status not in LABOR_CLAIM_STATUSES:
        raise ValidationError(f"Invalid status: {claim.status!r}")
    validate_sites(claim.sites)

    if not claim.total_amount:
        claim.total_amount = claim_total(claim.breakdown)
    claim.sites = allocate_sites(claim.sites, claim.total_amount)

    return {
        'id': claim.id,
        'worker_id': claim.worker_id,
        'worker_name': claim.worker_name,
        'worker_phone': claim.worker_phone,
        'work_date': claim.date,
        'sites': Json(claim.sites),
        'breakdown': Json(claim.breakdown or {}),
        'total_amount': claim.total_amount,
        'status': claim.status,
        'approved_by': claim.approved_by,
        'approved_at': claim.approved_at,
        'paid_at': claim.paid_at,
        'memo': claim.memo,
        'raw_text': claim.raw_text,
        'claimed_at': claim.claimed_at,
    }


# =============================================================================
# OPERATIONS
# =============================================================================

def list_claims(worker_id: Optional[str] = None) -> List[LaborClaim]:
    """All claims, newest first, optionally for one worker."""
    with get_db_cursor() as cur:
        if worker_id:
            cur.execute("""
                SELECT * FROM labor_claims
                WHERE worker_id = %s
                ORDER BY created_at DESC
            """, (worker_id,))
        else:
            cur.execute("SELECT * FROM labor_claims ORDER BY created_at DESC")

        rows = cur.fetchall()
        logger.debug(f"list_claims: {len(rows)} claims (worker_id={worker_id})")
        return [LaborClaim.from_row(row) for row in rows]


def get_claim(claim_id: str) -> LaborClaim:
    with get_db_cursor() as cur:
        cur.execute("SELECT * FROM labor_claims WHERE id = %s", (claim_id,))
        row = cur.fetchone()
        if not row:
            raise NotFoundError(f"Labor claim {claim_id} not found")
        return LaborClaim.from_row(row)


def create_claim(claim: LaborClaim) -> LaborClaim:
    """
    Create a claim. Computes total (when not given) and per-site allocation.
    Raises: ValidationError, DuplicateKeyError
    """
    if not claim.id:
        claim.id = uuid.uuid4().hex
    if not claim.claimed_at:
        claim.claimed_at = datetime.now(timezone.utc).isoformat()
    params = _prepare(claim)

    with get_db_cursor() as cur:
        try:
            cur.execute("""
                INSERT INTO labor_claims (
                    id, worker_id, worker_name, worker_phone, work_date, sites,
                    breakdown, total_amount, status, approved_by, approved_at,
                    paid_at, memo, raw_text, claimed_at, created_at, updated_at
                ) VALUES (
                    %(id)s, %(worker_id)s, %(worker_name)s, %(worker_phone)s,
                    %(work_date)s, %(sites)s, %(breakdown)s, %(total_amount)s,
                    %(status)s, %(approved_by)s, %(approved_at)s, %(paid_at)s,
                    %(memo)s, %(raw_text)s, %(claimed_at)s, NOW(), NOW()
                ) RETURNING *
            """, params)
        except pg_errors.UniqueViolation as e:
            raise DuplicateKeyError(f"Labor claim {claim.id} already exists") from e

        stored = LaborClaim.from_row(cur.fetchone())
        logger.info(f"Created labor claim {stored.id} for worker {stored.worker_name}: {stored.total_amount}")
        bus.emit(EVENT_LABOR_CLAIM_CREATED, {'claim_id': stored.id, 'worker_id': stored.worker_id})
        return stored


def update_claim(claim_id: str, claim: LaborClaim) -> LaborClaim:
    """
    Replace the editable fields of a claim. Status, approver and the approval
    and payment times stay as stored; only set_status moves them.
    A status of None keeps the current one; any other status must match it.
    Raises: NotFoundError, ValidationError
    """
    claim.id = claim_id

    with get_db_cursor() as cur:
        cur.execute("SELECT status FROM labor_claims WHERE id = %s FOR UPDATE", (claim_id,))
        row = cur.fetchone()
        if not row:
            raise NotFoundError(f"Labor claim {claim_id} not found")

        current = row['status']
        if claim.status and claim.status != current:
            raise ValidationError(
                f"Cannot change labor claim status from {current} to {claim.status} by editing"
            )
        claim.status = current
        params = _prepare(claim)

        cur.execute("""
            UPDATE labor_claims SET
                worker_id = %(worker_id)s, worker_name = %(worker_name)s,
                worker_phone = %(worker_phone)s, work_date = %(work_date)s,
                sites = %(sites)s, breakdown = %(breakdown)s,
                total_amount = %(total_amount)s, memo = %(memo)s, raw_text = %(raw_text)s,
                claimed_at = COALESCE(%(claimed_at)s, claimed_at),
                updated_at = NOW()
            WHERE id = %(id)s
            RETURNING *
        """, params)

        row = cur.fetchone()
        if not row:
            raise NotFoundError(f"Labor claim {claim_id} not found")
        logger.info(f"Updated labor claim {claim_id}")
        bus.emit(EVENT_LABOR_CLAIM_UPDATED, {'claim_id': claim_id, 'status': row['status']})
        return LaborClaim.from_row(row)


def set_status(claim_id: str, status: str, approved_by: Optional[str] = None) -> LaborClaim:
    """
    Move a claim one step forward: pending → approved (stamps approver and time)
    or approved → paid (stamps payment time).
    Raises: NotFoundError, ValidationError for any other transition
    """
    now = datetime.now(timezone.utc).isoformat()

    with get_db_cursor() as cur:
        cur.execute("SELECT status FROM labor_claims WHERE id = %s FOR UPDATE", (claim_id,))
        row = cur.fetchone()
        if not row:
            raise NotFoundError(f"Labor claim {claim_id} not found")

        current = row['status']
        if _NEXT_STATUS.get(current) != status:
            raise ValidationError(f"Cannot change labor claim status from {current} to {status}")

        if status == 'approved':
            if not (approved_by or '').strip():
                raise ValidationError("approvedBy is required to approve a claim")
            cur.execute("""
                UPDATE labor_claims
                SET status = %s, approved_by = %s, approved_at = %s, updated_at = NOW()
                WHERE id = %s
                RETURNING *
            """, (status, approved_by, now, claim_id))
        else:
            cur.execute("""
                UPDATE labor_claims
                SET status = %s, paid_at = %s, updated_at = NOW()
                WHERE id = %s
                RETURNING *
            """, (status, now, claim_id))

        updated = LaborClaim.from_row(cur.fetchone())
        logger.info(f"Labor claim {claim_id}: {current} → {status}")
        bus.emit(EVENT_LABOR_CLAIM_UPDATED, {'claim_id': claim_id, 'status': status})
        return updated


def delete_claim(claim_id: str) -> bool:
    """Delete a claim. Idempotent; returns whether a row was removed."""
    with get_db_cursor() as cur:
        cur.execute("DELETE FROM labor_claims WHERE id = %s", (claim_id,))
        if cur.rowcount > 0:
            logger.info(f"Deleted labor claim {claim_id}")
            bus.emit(EVENT_LABOR_CLAIM_DELETED, {'claim_id': claim_id})
            return True
        return False


def summarize(claims: List[LaborClaim]) -> Dict[str, float]:
    """Total, pending and paid sums over a list of claims."""
    return {
        'total': sum(c.total_amount for c in claims),
        'pending': sum(c.total_amount for c in claims if c.status == 'pending'),
        'paid': sum(c.total_amount for c in claims if c.status == 'paid'),
    }
