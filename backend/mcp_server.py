"""FastMCP server exposing the interaction rule cache as MCP tools.

Tools:
  - lookup_interaction(item_id, object_id, object_state)  — cached outcome or None
  - store_interaction_rule(...)                           — add a manual rule
  - list_interaction_rules()                              — every stored rule

The store is replaced via set_store() for tests, or opened on DATA_DIR
(default: data/) when run as __main__.

Usage:
    python -m backend.mcp_server
"""

from mcp.server.fastmcp import FastMCP

from backend.resolver import rule_to_result, select_rule
from backend.storage import DuplicateRuleError, InteractionStore
from jacobs_office.models import InteractionRule

mcp = FastMCP("jacobs-interactions")

_store: InteractionStore | None = None


def set_store(store: InteractionStore) -> None:
    """Replace the active rule store (used in tests)."""
    global _store
    _store = store


def get_store() -> InteractionStore:
    if _store is None:
        raise RuntimeError("Call set_store() before using the MCP tools")
    return _store


@mcp.tool()
def lookup_interaction(item_id: str | None, object_id: str, object_state: str | None = None) -> dict | None:
    """Return the cached outcome for an item used on an object, or None."""
    rule = select_rule(get_store().select_matching(item_id, object_id), object_state)
    if rule is None:
        return None
    return {"rule_id": rule.id, **rule_to_result(rule).model_dump()}


@mcp.tool()
def store_interaction_rule(
    object_id: str,
    description: str,
    item_id: str | None = None,
    required_state: str | None = None,
    result_state: str | None = None,
    output_item: str | None = None,
    output_item_tags: list[str] | None = None,
    item_tags: list[str] | None = None,
    object_tags: list[str] | None = None,
) -> dict:
    """Store a manual interaction rule. Returns the stored rule, or an error."""
    rule = InteractionRule(
        item_id=item_id,
        object_id=object_id,
        required_state=required_state,
        item_tags=item_tags or [],
        object_tags=object_tags or [],
        result_state=result_state,
        output_item=output_item,
        output_item_tags=output_item_tags or [],
        description=description,
        source="manual",
    )
    try:
        return get_store().insert(rule).model_dump()
    except DuplicateRuleError as e:
        return {"error": str(e), "existing": e.existing.model_dump()}


@mcp.tool()
def list_interaction_rules() -> list[dict]:
    """Every stored interaction rule."""
    return [r.model_dump() for r in get_store().list_rules()]


if __name__ == "__main__":
    from backend.config import get_settings
    from pathlib import Path

    set_store(InteractionStore(Path(get_settings()["data_dir"])))
    mcp.run()
