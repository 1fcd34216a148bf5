"""Per-invocation generation counters.

Each section produces its own ``GenerationAccumulator``; the page result
folds them with ``merge``, which is associative and has ``GenerationAccumulator()``
as its identity.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from functools import reduce

from storyforge.content.types import ContentGenerationStats


@dataclass(frozen=True)
class GenerationAccumulator:
    """Token, fallback and confidence counters for one unit of work.

    Attributes:
        tokens_used: Tokens billed by synthesis calls.
        fallbacks_used: Sections whose base content came from the fallback template.
        persona_fallbacks_used: Persona adaptations that kept the base content.
        confidence_sum: Sum of section confidence scores.
        sections_generated: Sections counted in ``confidence_sum``.
    """

    tokens_used: int = 0
    fallbacks_used: int = 0
    persona_fallbacks_used: int = 0
    confidence_sum: float = 0.0
    sections_generated: int = 0

    def merge(self, other: "GenerationAccumulator") -> "GenerationAccumulator":
        return GenerationAccumulator(
            tokens_used=self.tokens_used + other.tokens_used,
            fallbacks_used=self.fallbacks_used + other.fallbacks_used,
            persona_fallbacks_used=self.persona_fallbacks_used + other.persona_fallbacks_used,
            confidence_sum=self.confidence_sum + other.confidence_sum,
            sections_generated=self.sections_generated + other.sections_generated,
        )

    @classmethod
    def combine(cls, accumulators: Iterable["GenerationAccumulator"]) -> "GenerationAccumulator":
        return reduce(cls.merge, accumulators, cls())

    def to_stats(self, total_sections: int, total_time_ms: int) -> ContentGenerationStats:
        average = self.confidence_sum / self.sections_generated if self.sections_generated else 0.0
        return ContentGenerationStats(
            total_sections=total_sections,
            sections_generated=self.sections_generated,
            total_tokens_used=self.tokens_used,
            total_time_ms=total_time_ms,
            average_confidence=average,
            fallbacks_used=self.fallbacks_used,
            persona_fallbacks_used=self.persona_fallbacks_used,
        )
