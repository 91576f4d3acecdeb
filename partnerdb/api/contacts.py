"""
Contacts API endpoints.

Bodies use the web client's camelCase shape (brandName, staffList, ...).
The category of an existing contact is never changed through PUT.
"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, status

from partnerdb.engine import contacts as contact_store
from partnerdb.errors import ValidationError
from partnerdb.models import CategoryType, Contact

router = APIRouter(prefix="/api/contacts", tags=["contacts"])


def parse_contact(body: Dict[str, Any]) -> Contact:
    if not isinstance(body, dict):
        raise ValidationError("Contact body must be a JSON object")
    try:
        return Contact.from_json(body)
    except (TypeError, ValueError, AttributeError) as e:
        raise ValidationError(f"Invalid contact: {e}") from e


def parse_category(raw: Optional[str]) -> Optional[CategoryType]:
    if not raw:
        return None
    try:
        return CategoryType(raw)
    except ValueError:
        raise ValidationError(f"Unknown category: {raw}")


@router.get("")
def list_contacts_endpoint(category: Optional[str] = None):
    contacts = contact_store.list_contacts(parse_category(category))
    return {"success": True, "data": [c.to_json() for c in contacts]}


@router.get("/search")
def search_contact_endpoint(name: Optional[str] = None):
    """Exact brand-name lookup used by the company-name autocomplete."""
    if not name or not name.strip():
        raise ValidationError("A company name is required")
    contact = contact_store.find_by_brand_name(name)
    return {"success": True, "data": contact.to_json() if contact else None}


@router.get("/{contact_id}")
def get_contact_endpoint(contact_id: str):
    return {"success": True, "data": contact_store.get_contact(contact_id).to_json()}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_contact_endpoint(body: Dict[str, Any] = Body(...)):
    if not body.get("category"):
        raise ValidationError("category is required")
    created = contact_store.create_contact(parse_contact(body))
    return {"success": True, "data": {"id": created.id}}


@router.put("/{contact_id}")
def update_contact_endpoint(contact_id: str, body: Dict[str, Any] = Body(...)):
    # id, category and server timestamps in the body are ignored
    contact = parse_contact({k: v for k, v in body.items() if k != "category"})
    contact_store.update_contact(contact_id, contact_store.mutable_fields(contact))
    return {"success": True}


@router.delete("/{contact_id}")
def delete_contact_endpoint(contact_id: str):
    contact_store.delete_contact(contact_id)
    return {"success": True}
