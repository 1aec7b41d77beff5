"""Interaction resolver: cached rule lookup in front of the physics LLM.

resolve() order of business:

  1. load every rule for (item_id, object_id)
  2. pick the rule whose required_state equals the object's state, else the
     wildcard rule (required_state None); a hit returns cached=True without
     touching the rate limiter or the LLM
  3. on a miss, charge the caller's rate-limit budget; a denial raises
     RateLimitExceeded and is never papered over with a fallback
  4. ask the LLM, store the validated outcome as an "ai" rule (best effort)
     and return it with cached=False

Any LLM, prompt or cache-read failure yields InteractionResult.fallback().
"""

from __future__ import annotations

import logging

from backend.ai import generate_interaction
from backend.llm import LLM, LLMError
from backend.prompts import PromptError
from backend.rate_limit import RateLimitConfig, RateLimiter
from backend.storage import DuplicateRuleError, InteractionStore
from jacobs_office.models import InteractionResult, InteractionRule

logger = logging.getLogger(__name__)


class RateLimitExceeded(Exception):
    def __init__(self, retry_after: int) -> None:
        super().__init__(f"rate limit exceeded, retry after {retry_after}s")
        self.retry_after = retry_after


def select_rule(rules: list[InteractionRule], object_state: str | None) -> InteractionRule | None:
    """Exact required_state match wins over the wildcard rule."""
    wildcard = None
    for rule in rules:
        if rule.required_state is not None and rule.required_state == object_state:
            return rule
        if rule.required_state is None and wildcard is None:
            wildcard = rule
    return wildcard


def rule_to_result(rule: InteractionRule, cached: bool = True) -> InteractionResult:
    return InteractionResult(
        result_state=rule.result_state,
        output_item=rule.output_item,
        output_item_tags=rule.output_item_tags,
        description=rule.description,
        cached=cached,
    )


class InteractionResolver:
    def __init__(
        self,
        store: InteractionStore,
        llm: LLM,
        limiter: RateLimiter,
        limit: RateLimitConfig,
    ) -> None:
        self._store = store
        self._llm = llm
        self._limiter = limiter
        self._limit = limit

    def lookup(self, item_id: str | None, object_id: str, object_state: str | None) -> InteractionRule | None:
        try:
            rules = self._store.select_matching(item_id, object_id)
        except (OSError, ValueError) as e:
            logger.warning("interaction cache read failed, treating as miss: %s", e)
            return None
        return select_rule(rules, object_state)

    async def resolve(
        self,
        *,
        item_id: str | None,
        object_id: str,
        item_tags: list[str],
        object_tags: list[str],
        object_state: str | None,
        item_name: str,
        object_name: str,
        identifier: str = "anonymous",
    ) -> InteractionResult:
        rule = self.lookup(item_id, object_id, object_state)
        if rule is not None:
            logger.debug("cache hit %s + %s [%s] -> rule %s", item_id, object_id, object_state, rule.id)
            return rule_to_result(rule)

        check = self._limiter.check(f"interact:{identifier}", self._limit)
        if not check.allowed:
            raise RateLimitExceeded(check.retry_after(self._limiter.now()))

        logger.info("cache miss %s + %s [%s], asking LLM", item_id, object_id, object_state)
        try:
            result = await generate_interaction(
                self._llm,
                item_name=item_name,
                object_name=object_name,
                item_tags=item_tags,
                object_tags=object_tags,
                object_state=object_state,
            )
        except (LLMError, PromptError) as e:
            logger.warning("interaction resolve failed, using fallback: %s", e)
            return InteractionResult.fallback()

        return self._remember(item_id, object_id, item_tags, object_tags, object_state, result)

    def _remember(
        self,
        item_id: str | None,
        object_id: str,
        item_tags: list[str],
        object_tags: list[str],
        object_state: str | None,
        result: InteractionResult,
    ) -> InteractionResult:
        try:
            self._store.insert(InteractionRule(
                item_id=item_id,
                object_id=object_id,
                required_state=object_state,
                item_tags=item_tags,
                object_tags=object_tags,
                result_state=result.result_state,
                output_item=result.output_item,
                output_item_tags=result.output_item_tags or [],
                description=result.description,
                source="ai",
            ))
        except DuplicateRuleError as e:
            # a concurrent miss stored the same key first; its answer wins
            logger.info("rule stored concurrently, returning %s", e.existing.id)
            return rule_to_result(e.existing)
        except (OSError, ValueError) as e:
            logger.warning("failed to cache interaction rule: %s", e)
        return result.model_copy(update={"cached": False})
