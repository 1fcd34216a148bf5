"""Narrative flow optimizer.

A fixed battery of independent rules inspects a block sequence against the
page template. The result carries a 0-100 score and, when auto-fix is
requested, a re-sorted copy of the blocks. Auto-fix only reorders; it never
touches block content.
"""

import logging
from collections import Counter
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field, replace
from enum import Enum

from storyforge.storyline.templates import NarrativeTemplate, get_template
from storyforge.storyline.types import (
    ContentBlock,
    ContentType,
    EmotionalArc,
    EmotionalJourney,
    EmotionalPoint,
    NarrativeRole,
    PageType,
    PersonaStoryVariation,
    StorylineGenerationResult,
)

logger = logging.getLogger(__name__)


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


SEVERITY_PENALTIES: dict[Severity, int] = {
    Severity.ERROR: 20,
    Severity.WARNING: 10,
    Severity.INFO: 5,
}

HEAVY_CONTENT_TYPES = frozenset(
    {ContentType.CASE_STUDY, ContentType.COMPARISON, ContentType.FAQ, ContentType.PROCESS}
)
MIN_HOOK_DESCRIPTION = 50
PROOF_VARIETY_THRESHOLD = 3

ARC_SUGGESTIONS: dict[EmotionalArc, str] = {
    EmotionalArc.URGENT: "Consider adding urgency elements to increase conversion",
    EmotionalArc.DRAMATIC: "Emphasize the transformation story with before/after contrast",
}


@dataclass(frozen=True)
class OptimizationViolation:
    rule_id: str
    severity: Severity
    message: str
    affected_block_ids: tuple[str, ...]
    suggested_fix: str | None = None


@dataclass(frozen=True)
class OptimizationRule:
    id: str
    name: str
    description: str
    check: Callable[[Sequence[ContentBlock], NarrativeTemplate], list[OptimizationViolation]]


@dataclass(frozen=True)
class OptimizationResult:
    is_optimal: bool
    score: int
    violations: tuple[OptimizationViolation, ...]
    suggestions: tuple[str, ...]
    optimized_blocks: tuple[ContentBlock, ...] | None = None

    def count(self, severity: Severity) -> int:
        return sum(1 for v in self.violations if v.severity == severity)


def _first_index(blocks: Sequence[ContentBlock], predicate: Callable[[ContentBlock], bool]) -> int:
    return next((i for i, block in enumerate(blocks) if predicate(block)), -1)


def _is_cta(block: ContentBlock) -> bool:
    return block.stage == NarrativeRole.ACTION or block.content.content_type == ContentType.CTA


# =============================================================================
# Rules
# =============================================================================


def check_cta_after_value(blocks, template):
    hook_index = _first_index(blocks, lambda b: b.stage == NarrativeRole.HOOK)
    first_cta = _first_index(blocks, _is_cta)
    # Without a hook there is nothing to precede; hook-engagement reports that case
    if first_cta != -1 and first_cta < hook_index:
        return [
            OptimizationViolation(
                rule_id="cta-after-value",
                severity=Severity.ERROR,
                message="CTA appears before the value proposition is established",
                affected_block_ids=(blocks[first_cta].id,),
                suggested_fix="Move CTA to after the solution section",
            )
        ]
    return []


def check_proof_after_problem(blocks, template):
    first_problem = _first_index(blocks, lambda b: b.stage == NarrativeRole.PROBLEM)
    first_proof = _first_index(
        blocks,
        lambda b: b.stage == NarrativeRole.PROOF or b.content.content_type == ContentType.TESTIMONIAL,
    )
    if first_proof != -1 and first_problem != -1 and first_proof < first_problem:
        return [
            OptimizationViolation(
                rule_id="proof-after-problem",
                severity=Severity.WARNING,
                message="Testimonials appear before problem acknowledgment",
                affected_block_ids=(blocks[first_proof].id,),
                suggested_fix="Move social proof to after problem section",
            )
        ]
    return []


def check_content_density(blocks, template):
    return [
        OptimizationViolation(
            rule_id="content-density-balance",
            severity=Severity.INFO,
            message="Two content-heavy blocks in sequence may overwhelm readers",
            affected_block_ids=(current.id, following.id),
            suggested_fix="Add a visual break or lighter content between these sections",
        )
        for current, following in zip(blocks, blocks[1:])
        if current.content.content_type in HEAVY_CONTENT_TYPES
        and following.content.content_type in HEAVY_CONTENT_TYPES
    ]


def check_required_stages(blocks, template):
    present = {block.stage for block in blocks}
    return [
        OptimizationViolation(
            rule_id="required-stages",
            severity=Severity.ERROR,
            message=f"Missing required stage: {stage.value}",
            affected_block_ids=(),
            suggested_fix=f"Add content for the {stage.value} stage",
        )
        for stage in template.required_stages
        if stage not in present
    ]


def check_stage_order(blocks, template):
    violations = []
    max_index = -1
    for block in blocks:
        if block.stage not in template.stage_order:
            continue
        index = template.stage_order.index(block.stage)
        if index < max_index:
            violations.append(
                OptimizationViolation(
                    rule_id="stage-order",
                    severity=Severity.WARNING,
                    message=f'Stage "{block.stage.value}" appears out of order',
                    affected_block_ids=(block.id,),
                    suggested_fix="Consider moving this block to maintain narrative flow",
                )
            )
        max_index = max(max_index, index)
    return violations


def check_hook_engagement(blocks, template):
    hook = next((b for b in blocks if b.stage == NarrativeRole.HOOK), None)
    if hook is None:
        return [
            OptimizationViolation(
                rule_id="hook-engagement",
                severity=Severity.ERROR,
                message="No hook section found - page may not capture attention",
                affected_block_ids=(),
                suggested_fix="Add a compelling opening hook with value proposition",
            )
        ]
    if len(hook.content.description) < MIN_HOOK_DESCRIPTION:
        return [
            OptimizationViolation(
                rule_id="hook-engagement",
                severity=Severity.INFO,
                message="Hook description may be too short to be compelling",
                affected_block_ids=(hook.id,),
                suggested_fix="Expand the hook with more engaging details",
            )
        ]
    return []


def check_clear_cta(blocks, template):
    if any(_is_cta(block) for block in blocks):
        return []
    return [
        OptimizationViolation(
            rule_id="clear-cta",
            severity=Severity.WARNING,
            message="No clear call-to-action found",
            affected_block_ids=(),
            suggested_fix="Add a clear CTA to guide visitors to take action",
        )
    ]


def check_proof_variety(blocks, template):
    proof_blocks = [b for b in blocks if b.stage == NarrativeRole.PROOF]
    types = {b.content.content_type for b in proof_blocks}
    if len(proof_blocks) >= PROOF_VARIETY_THRESHOLD and len(types) == 1:
        return [
            OptimizationViolation(
                rule_id="proof-variety",
                severity=Severity.INFO,
                message="Proof section uses only one type of evidence",
                affected_block_ids=tuple(b.id for b in proof_blocks),
                suggested_fix="Add different types of proof (testimonials, stats, case studies)",
            )
        ]
    return []


OPTIMIZATION_RULES: tuple[OptimizationRule, ...] = (
    OptimizationRule(
        "cta-after-value", "CTA After Value Proposition",
        "Call-to-action should appear after the value proposition is established",
        check_cta_after_value,
    ),
    OptimizationRule(
        "proof-after-problem", "Proof After Problem",
        "Social proof is more effective after the problem has been acknowledged",
        check_proof_after_problem,
    ),
    OptimizationRule(
        "content-density-balance", "Content Density Balance",
        "Alternate between content-heavy and visual sections",
        check_content_density,
    ),
    OptimizationRule(
        "required-stages", "Required Stages Present",
        "Page must include all required narrative stages",
        check_required_stages,
    ),
    OptimizationRule(
        "stage-order", "Narrative Stage Order",
        "Stages should follow the narrative flow order",
        check_stage_order,
    ),
    OptimizationRule(
        "hook-engagement", "Hook Engagement",
        "The opening hook should be compelling and action-oriented",
        check_hook_engagement,
    ),
    OptimizationRule(
        "clear-cta", "Clear CTA Present",
        "Page should end with a clear call-to-action",
        check_clear_cta,
    ),
    OptimizationRule(
        "proof-variety", "Proof Variety",
        "Social proof section should include different types of evidence",
        check_proof_variety,
    ),
)


def score_violations(violations: Sequence[OptimizationViolation]) -> int:
    """100 minus severity penalties, floored at 0."""
    penalty = sum(SEVERITY_PENALTIES[v.severity] for v in violations)
    return max(0, 100 - penalty)


# =============================================================================
# Optimizer
# =============================================================================


class NarrativeFlowOptimizer:
    """Scores block sequences and optionally restores stage order.

    Args:
        rules: Rule battery (defaults to ``OPTIMIZATION_RULES``).
    """

    def __init__(self, rules: Sequence[OptimizationRule] = OPTIMIZATION_RULES) -> None:
        self.rules = tuple(rules)

    def optimize(
        self,
        blocks: Sequence[ContentBlock],
        page_type: PageType | str,
        auto_fix: bool = False,
    ) -> OptimizationResult:
        template = get_template(page_type)
        blocks = list(blocks)

        violations: list[OptimizationViolation] = []
        for rule in self.rules:
            violations.extend(rule.check(blocks, template))

        suggestions = list(dict.fromkeys(v.suggested_fix for v in violations if v.suggested_fix))
        arc_advice = ARC_SUGGESTIONS.get(template.recommended_arc)
        if arc_advice and arc_advice not in suggestions:
            suggestions.append(arc_advice)

        optimized = None
        if auto_fix and violations:
            optimized = tuple(self.auto_fix(blocks, template))

        score = score_violations(violations)
        is_optimal = not any(v.severity == Severity.ERROR for v in violations)
        logger.debug(f"Flow score {score} for {template.page_type.value} ({len(violations)} violations)")

        return OptimizationResult(
            is_optimal=is_optimal,
            score=score,
            violations=tuple(violations),
            suggestions=tuple(suggestions),
            optimized_blocks=optimized,
        )

    @staticmethod
    def auto_fix(blocks: Sequence[ContentBlock], template: NarrativeTemplate) -> list[ContentBlock]:
        """Stable sort by (stage order index, priority)."""
        return sorted(blocks, key=lambda b: (template.stage_index(b.stage), b.priority))

    def optimize_emotional_flow(
        self,
        blocks: Sequence[ContentBlock],
        journey: EmotionalJourney,
    ) -> list[ContentBlock]:
        """Retone each block from the journey point nearest its page position."""
        total = len(blocks)
        if total == 0:
            return list(blocks)
        return [
            replace(block, emotional_tone=closest_journey_point(index / total * 100, journey).emotion)
            for index, block in enumerate(blocks)
        ]


def closest_journey_point(position: float, journey: EmotionalJourney) -> EmotionalPoint:
    """First journey point with the smallest distance to ``position``."""
    closest = journey.points[0]
    min_distance = abs(position - closest.position)
    for point in journey.points:
        distance = abs(position - point.position)
        if distance < min_distance:
            min_distance = distance
            closest = point
    return closest


def sort_content_blocks(blocks: Sequence[ContentBlock], page_type: PageType | str) -> list[ContentBlock]:
    """Blocks in narrative order; unchanged when no rule fires."""
    result = NarrativeFlowOptimizer().optimize(blocks, page_type, auto_fix=True)
    return list(result.optimized_blocks) if result.optimized_blocks is not None else list(blocks)


def validate_storyline(result: StorylineGenerationResult, page_type: PageType | str) -> OptimizationResult:
    """Score a generated storyline without reordering it."""
    return NarrativeFlowOptimizer().optimize(result.content_blocks, page_type)


def optimize_persona_variations(
    variations: Sequence[PersonaStoryVariation],
    page_type: PageType | str,
) -> list[PersonaStoryVariation]:
    """Apply auto-fix ordering to each persona's blocks."""
    optimizer = NarrativeFlowOptimizer()
    optimized = []
    for variation in variations:
        result = optimizer.optimize(variation.content_blocks, page_type, auto_fix=True)
        if result.optimized_blocks is not None:
            variation = replace(variation, content_blocks=result.optimized_blocks)
        optimized.append(variation)
    return optimized


@dataclass(frozen=True)
class StageShare:
    count: int
    percentage: int


@dataclass(frozen=True)
class ContentDistributionAnalysis:
    total_blocks: int
    by_stage: dict[NarrativeRole, StageShare]
    by_content_type: dict[ContentType, int]
    recommendations: list[str] = field(default_factory=list)


def analyze_content_distribution(
    blocks: Sequence[ContentBlock],
    page_type: PageType | str,
) -> ContentDistributionAnalysis:
    """Compare per-stage block counts with the template's min/max."""
    template = get_template(page_type)
    total = len(blocks)
    stage_counts = Counter(block.stage for block in blocks)
    type_counts = Counter(block.content.content_type for block in blocks)

    by_stage = {
        stage: StageShare(
            count=stage_counts[stage],
            percentage=round(stage_counts[stage] / total * 100) if total else 0,
        )
        for stage in NarrativeRole
    }

    recommendations = []
    for stage in NarrativeRole:
        distribution = template.content_distribution[stage]
        actual = stage_counts[stage]
        if actual < distribution.min:
            recommendations.append(
                f"Add {distribution.min - actual} more {stage.value} block(s) (minimum: {distribution.min})"
            )
        elif actual > distribution.max:
            recommendations.append(
                f"Consider reducing {stage.value} blocks from {actual} to {distribution.max} (maximum)"
            )

    return ContentDistributionAnalysis(
        total_blocks=total,
        by_stage=by_stage,
        by_content_type=dict(type_counts),
        recommendations=recommendations,
    )
