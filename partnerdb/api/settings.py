"""
Settings API endpoints: the three controlled vocabularies and rename propagation.
"""
from fastapi import APIRouter, status

from partnerdb.api.schemas import RenameBody, VocabularyValueBody
from partnerdb.engine import rename as rename_propagator
from partnerdb.engine import settings as settings_store
from partnerdb.errors import NotFoundError, ValidationError
from partnerdb.models import VocabularyType

router = APIRouter(prefix="/api/settings", tags=["settings"])

_BY_SLUG = {v.slug: v for v in VocabularyType}


def vocabulary_for_slug(slug: str) -> VocabularyType:
    try:
        return _BY_SLUG[slug]
    except KeyError:
        raise NotFoundError(f"Unknown settings list: {slug}")


@router.put("/rename")
def rename_endpoint(body: RenameBody):
    try:
        vocabulary = VocabularyType.parse(body.type)
    except ValueError as e:
        raise ValidationError(str(e))
    affected = rename_propagator.rename_value(vocabulary, body.old_name, body.new_name)
    return {"success": True, "data": {"affected": affected}}


@router.get("/{slug}")
def list_values_endpoint(slug: str):
    return {"success": True, "data": settings_store.list_values(vocabulary_for_slug(slug))}


@router.post("/{slug}", status_code=status.HTTP_201_CREATED)
def add_value_endpoint(slug: str, body: VocabularyValueBody):
    values = settings_store.add_value(vocabulary_for_slug(slug), body.name)
    return {"success": True, "data": values}
