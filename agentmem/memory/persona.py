"""Persona facet decay, merge and capping."""

from __future__ import annotations

from agentmem.config.schema import MemoryConfig
from agentmem.logging import get_logger
from agentmem.memory.types import PERSONA_CATEGORIES, PersonaFacet, PersonaModel, PersonaUpdate

logger = get_logger(__name__)

CATEGORY_CAPS: dict[str, int] = {
    "roles": 3,
    "style": 6,
    "heuristics": 8,
    "goals": 4,
    "antigoals": 6,
}

# Unseen facets start from a floor plus half of the mined weight
NEW_FACET_FLOOR = 0.15
NEW_FACET_SCALE = 0.5


class PersonaEngine:
    """Advances a :class:`PersonaModel` by one reflection update at a time."""

    def __init__(self, config: MemoryConfig):
        self.config = config

    def decay(self, facets: list[PersonaFacet]) -> list[PersonaFacet]:
        factor = 1 - self.config.decay_per_pass
        return [PersonaFacet(text=f.text, weight=f.weight * factor) for f in facets]

    def boost(self, current: float, evidence: float) -> float:
        """Noisy-OR of the current weight with scaled new evidence; never above 1."""
        bump = evidence * self.config.merge_aggressiveness
        return min(1.0, 1 - (1 - current) * (1 - bump))

    @staticmethod
    def initial_weight(evidence: float) -> float:
        return min(1.0, evidence * NEW_FACET_SCALE + NEW_FACET_FLOOR)

    def merge(
        self,
        existing: list[PersonaFacet],
        incoming: list[PersonaFacet],
        cap: int,
    ) -> list[PersonaFacet]:
        merged = list(existing)
        by_key: dict[str, PersonaFacet] = {}
        for facet in merged:
            by_key.setdefault(facet.key, facet)
        for item in incoming:
            found = by_key.get(item.key)
            if found is not None:
                found.weight = self.boost(found.weight, item.weight)
            else:
                facet = PersonaFacet(text=item.text, weight=self.initial_weight(item.weight))
                merged.append(facet)
                by_key[facet.key] = facet

        kept = [f for f in merged if f.weight >= self.config.min_keep_weight]
        kept.sort(key=lambda f: f.weight, reverse=True)
        return kept[:cap]

    def apply(self, persona: PersonaModel, update: PersonaUpdate, turn: int) -> PersonaModel:
        """Decay, merge, prune and cap every category, then bump the version.

        All categories are computed before any is written back, so *persona*
        never holds a half-applied update.
        """
        next_categories: dict[str, list[PersonaFacet]] = {}
        for name in PERSONA_CATEGORIES:
            aged = self.decay(persona.category(name))
            incoming = getattr(update.persona, name)
            next_categories[name] = self.merge(aged, incoming, CATEGORY_CAPS[name])

        for name, facets in next_categories.items():
            setattr(persona, name, facets)
        persona.version += 1
        persona.last_updated_turn = turn

        logger.info(
            "persona_updated",
            version=persona.version,
            turn=turn,
            friction=update.friction,
            confidence=update.confidence,
            counts=persona.counts(),
        )
        return persona
