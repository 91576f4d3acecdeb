"""
Labor claims API endpoints.
"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Query, status

from partnerdb.api.schemas import ClaimStatusBody
from partnerdb.engine import labor_claims as claim_store
from partnerdb.errors import ValidationError
from partnerdb.models import LaborClaim

router = APIRouter(prefix="/api/labor-claims", tags=["labor-claims"])


def parse_claim(body: Dict[str, Any], default_status: Optional[str] = 'pending') -> LaborClaim:
    try:
        claim = LaborClaim.from_json(body)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid labor claim: {e}") from e
    claim.sites = [] if claim.sites is None else claim.sites
    claim.breakdown = {} if claim.breakdown is None else claim.breakdown
    if not isinstance(claim.sites, list) or not all(isinstance(s, dict) for s in claim.sites):
        raise ValidationError("sites must be a list of objects")
    if not isinstance(claim.breakdown, dict):
        raise ValidationError("breakdown must be an object")
    claim.status = body.get('status') or default_status
    try:
        claim.total_amount = float(claim.total_amount or 0)
    except (TypeError, ValueError):
        raise ValidationError("totalAmount must be a number")
    return claim


@router.get("")
def list_claims_endpoint(worker_id: Optional[str] = Query(None, alias="workerId")):
    claims = claim_store.list_claims(worker_id)
    return {"success": True, "data": [c.to_json() for c in claims]}


@router.get("/summary")
def summary_endpoint(worker_id: Optional[str] = Query(None, alias="workerId")):
    return {"success": True, "data": claim_store.summarize(claim_store.list_claims(worker_id))}


@router.get("/{claim_id}")
def get_claim_endpoint(claim_id: str):
    return {"success": True, "data": claim_store.get_claim(claim_id).to_json()}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_claim_endpoint(body: Dict[str, Any] = Body(...)):
    created = claim_store.create_claim(parse_claim(body))
    return {"success": True, "data": {"id": created.id}}


@router.put("/{claim_id}/status")
def set_status_endpoint(claim_id: str, body: ClaimStatusBody):
    updated = claim_store.set_status(claim_id, body.status, approved_by=body.approved_by)
    return {"success": True, "data": updated.to_json()}


@router.put("/{claim_id}")
def update_claim_endpoint(claim_id: str, body: Dict[str, Any] = Body(...)):
    # Without a status in the body the stored one is kept.
    claim_store.update_claim(claim_id, parse_claim(body, default_status=None))
    return {"success": True}


@router.delete("/{claim_id}")
def delete_claim_endpoint(claim_id: str):
    claim_store.delete_claim(claim_id)
    return {"success": True}
