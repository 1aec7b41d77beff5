"""JSON file storage for cached interaction rules.

All rules live in one flat JSON file under the data directory. There is no
database: reads and writes load and dump the whole list, which is fine for
the few hundred rules a play-through produces.

Layout:

    {data_dir}/
      interactions.json    ← list of InteractionRule dicts

A rule is keyed by (item_id, object_id, required_state). item_id None means
bare hands; required_state None is a wildcard that matches any state.
"""

from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from jacobs_office.models import InteractionRule

logger = logging.getLogger(__name__)

RULES_FILE = "interactions.json"


class DuplicateRuleError(ValueError):
    """A rule with the same (item_id, object_id, required_state) exists."""

    def __init__(self, existing: InteractionRule) -> None:
        super().__init__(f"rule already exists: {existing.id}")
        self.existing = existing


class InteractionStore:
    def __init__(self, data_dir: Path) -> None:
        self._base = data_dir
        self._base.mkdir(parents=True, exist_ok=True)
        self._path = data_dir / RULES_FILE

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _read(self) -> list[InteractionRule]:
        if not self._path.exists():
            return []
        return [InteractionRule.model_validate(r) for r in json.loads(self._path.read_text())]

    def _write(self, rules: list[InteractionRule]) -> None:
        self._path.write_text(json.dumps([r.model_dump() for r in rules], indent=2))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def select_matching(self, item_id: str | None, object_id: str) -> list[InteractionRule]:
        """Every rule for this item/object pair, any required_state."""
        return [
            r for r in self._read()
            if r.item_id == item_id and r.object_id == object_id
        ]

    def list_rules(self) -> list[InteractionRule]:
        return self._read()

    def get_rule(self, rule_id: str) -> InteractionRule | None:
        for rule in self._read():
            if rule.id == rule_id:
                return rule
        return None

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def insert(self, rule: InteractionRule) -> InteractionRule:
        """Store a new rule with a fresh id and timestamp.

        Raises DuplicateRuleError if the key is already taken.
        """
        rules = self._read()
        for existing in rules:
            if (existing.item_id, existing.object_id, existing.required_state) == (
                rule.item_id, rule.object_id, rule.required_state
            ):
                raise DuplicateRuleError(existing)

        stored = rule.model_copy(update={
            "id": uuid.uuid4().hex,
            "created_at": datetime.now(timezone.utc).isoformat(),
        })
        rules.append(stored)
        self._write(rules)
        logger.info(
            "stored %s rule %s: %s + %s [%s]",
            stored.source, stored.id, stored.item_id, stored.object_id, stored.required_state,
        )
        return stored

    def update_rule(self, rule_id: str, fields: dict[str, Any]) -> InteractionRule | None:
        """Apply a partial update; id, source and created_at are kept."""
        fields = {k: v for k, v in fields.items() if k not in ("id", "source", "created_at")}
        rules = self._read()
        for i, rule in enumerate(rules):
            if rule.id == rule_id:
                rules[i] = InteractionRule.model_validate({**rule.model_dump(), **fields})
                self._write(rules)
                return rules[i]
        return None

    def delete_rule(self, rule_id: str) -> bool:
        rules = self._read()
        kept = [r for r in rules if r.id != rule_id]
        if len(kept) == len(rules):
            return False
        self._write(kept)
        return True
