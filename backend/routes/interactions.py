"""Interaction rule CRUD endpoints (admin)."""

from fastapi import APIRouter, HTTPException, Request

from backend.storage import DuplicateRuleError, InteractionStore
from jacobs_office.models import InteractionRule

from .models import CreateRule, UpdateRule

router = APIRouter()


def _store(request: Request) -> InteractionStore:
    return request.app.state.store


@router.get("/interactions")
async def list_interactions(request: Request):
    """List every cached interaction rule."""
    return [r.model_dump() for r in _store(request).list_rules()]


@router.post("/interactions", status_code=201)
async def create_interaction(body: CreateRule, request: Request):
    """Add a hand-written rule."""
    rule = InteractionRule(**body.model_dump(), source="manual")
    try:
        stored = _store(request).insert(rule)
    except DuplicateRuleError as e:
        raise HTTPException(409, f"Rule already exists: {e.existing.id}") from e
    return stored.model_dump()


@router.patch("/interactions/{rule_id}")
async def update_interaction(rule_id: str, body: UpdateRule, request: Request):
    """Partially update a rule."""
    updated = _store(request).update_rule(rule_id, body.model_dump(exclude_unset=True))
    if not updated:
        raise HTTPException(404, "Interaction rule not found")
    return updated.model_dump()


@router.delete("/interactions/{rule_id}")
async def delete_interaction(rule_id: str, request: Request):
    """Delete a rule."""
    if not _store(request).delete_rule(rule_id):
        raise HTTPException(404, "Interaction rule not found")
    return {"ok": True}
