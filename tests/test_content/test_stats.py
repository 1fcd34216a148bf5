"""Tests for generation counters."""

from storyforge.content.stats import GenerationAccumulator


def _acc(tokens: int, fallbacks: int = 0, confidence: float = 0.0, sections: int = 0) -> GenerationAccumulator:
    return GenerationAccumulator(
        tokens_used=tokens,
        fallbacks_used=fallbacks,
        confidence_sum=confidence,
        sections_generated=sections,
    )


class TestGenerationAccumulator:
    """Tests for merging and reporting counters."""

    def test_merge_is_associative(self):
        """Test grouping does not change the merged totals."""
        a, b, c = _acc(10, 1, 0.5, 1), _acc(20, 0, 1.0, 1), GenerationAccumulator(persona_fallbacks_used=2)

        assert a.merge(b).merge(c) == a.merge(b.merge(c))

    def test_identity(self):
        """Test the empty accumulator is a merge identity."""
        a = _acc(10, 1, 0.5, 1)

        assert a.merge(GenerationAccumulator()) == a
        assert GenerationAccumulator().merge(a) == a

    def test_combine(self):
        """Test combining folds every accumulator."""
        combined = GenerationAccumulator.combine([_acc(10, 1, 0.5, 1), _acc(20, 0, 1.0, 1)])

        assert combined.tokens_used == 30
        assert combined.fallbacks_used == 1
        assert combined.sections_generated == 2

    def test_combine_empty(self):
        """Test combining nothing gives the identity."""
        assert GenerationAccumulator.combine([]) == GenerationAccumulator()

    def test_to_stats(self):
        """Test stats average confidence over generated sections."""
        stats = GenerationAccumulator.combine(
            [_acc(10, 1, 0.5, 1), _acc(20, 0, 1.0, 1), GenerationAccumulator(persona_fallbacks_used=2)]
        ).to_stats(total_sections=3, total_time_ms=120)

        assert stats.total_sections == 3
        assert stats.sections_generated == 2
        assert stats.total_tokens_used == 30
        assert stats.total_time_ms == 120
        assert stats.average_confidence == 0.75
        assert stats.fallbacks_used == 1
        assert stats.persona_fallbacks_used == 2

    def test_to_stats_without_sections(self):
        """Test the average is zero when nothing was generated."""
        stats = GenerationAccumulator().to_stats(total_sections=0, total_time_ms=0)
        assert stats.average_confidence == 0.0
