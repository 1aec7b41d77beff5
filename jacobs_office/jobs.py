"""Job generation from the object catalog.

A job targets one catalog object and is worded from a template keyed by
that object's tags. The first tag with a template wins; objects with no
matching tag get the generic template.
"""

from __future__ import annotations

import random
from collections.abc import Sequence
from dataclasses import dataclass, field

from jacobs_office.models import Job

# Number of most recent picks excluded from the next pick.
RECENT_EXCLUSION = 2


@dataclass(frozen=True)
class CatalogObject:
    id: str
    name: str
    tags: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_door(self) -> bool:
        return "door" in self.name.lower()


# tag -> (title, description); {name} is the upper-cased object name
JOB_TEMPLATES: dict[str, tuple[str, str]] = {
    "ELECTRONIC": (
        "RUN DIAGNOSTICS: {name}",
        "RUN A DIAGNOSTIC ON THE {name}. THE NETWORK HAS BEEN ACTING UP.",
    ),
    "PAPER": (
        "SORT THE {name}",
        "I NEED THE {name} SORTED. EFFICIENCY IS MANDATORY.",
    ),
    "ORGANIC": (
        "TEND THE {name}",
        "THE {name} IS A VALUED EMPLOYEE. KEEP IT ALIVE. THAT IS YOUR JOB.",
    ),
    "WET": (
        "MOP UP THE {name}",
        "THE {name} IS LEAKING PRODUCTIVITY. DEAL WITH IT.",
    ),
    "GLASS": (
        "POLISH THE {name}",
        "THE {name} IS SMUDGED. I CAN SEE FINGERPRINTS FROM HERE.",
    ),
    "HEAVY": (
        "REORGANIZE THE {name}",
        "THE {name} IS IN THE WRONG PLACE. IT HAS ALWAYS BEEN IN THE WRONG PLACE.",
    ),
    "METALLIC": (
        "FIX THE {name}",
        "THE {name} IS DOWN AGAIN. FIX IT OR FACE CONSEQUENCES.",
    ),
    "HOT": (
        "COOL DOWN THE {name}",
        "THE {name} IS OVERHEATING. SO AM I. FIX ONE OF US.",
    ),
    "CHEMICAL": (
        "SANITIZE THE {name}",
        "THE {name} FAILED INSPECTION. SANITIZE IT BEFORE LEGAL FINDS OUT.",
    ),
    "WOODEN": (
        "CLEAN THE {name}",
        "THE {name} IS A DISGRACE. MAKE IT PRESENTABLE.",
    ),
}

GENERIC_TEMPLATE = (
    "INSPECT THE {name}",
    "GO LOOK AT THE {name}. REPORT NOTHING. I WILL KNOW ANYWAY.",
)


def _slug(name: str) -> str:
    return "-".join(name.lower().split())


def job_for(obj: CatalogObject) -> Job:
    """Word a job for one catalog object."""
    title_tpl, desc_tpl = GENERIC_TEMPLATE
    template_tag = "generic"
    for tag in obj.tags:
        if tag in JOB_TEMPLATES:
            title_tpl, desc_tpl = JOB_TEMPLATES[tag]
            template_tag = tag.lower()
            break
    name = obj.name.upper()
    return Job(
        id=f"{template_tag}-{_slug(obj.name)}",
        title=title_tpl.format(name=name),
        description=desc_tpl.format(name=name),
        objectHints=[obj.name],
    )


class JobPicker:
    """Samples catalog objects, skipping doors and the last two picks."""

    def __init__(
        self, catalog: Sequence[CatalogObject], rng: random.Random | None = None
    ) -> None:
        self._catalog = list(catalog)
        self._rng = rng or random.Random()
        self._recent: list[str] = []

    @property
    def recent(self) -> list[str]:
        return list(self._recent)

    def pick(self) -> Job | None:
        eligible = [o for o in self._catalog if not o.is_door]
        if not eligible:
            return None
        candidates = [o for o in eligible if o.id not in self._recent] or eligible
        obj = self._rng.choice(candidates)
        self._recent.append(obj.id)
        self._recent = self._recent[-RECENT_EXCLUSION:]
        return job_for(obj)
