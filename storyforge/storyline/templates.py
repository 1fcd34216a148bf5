"""Narrative template registry.

Static, page-type-keyed configuration for the storyline pipeline: which
stages a page uses, in what order, how many blocks each stage should hold,
the recommended emotional arc, and per-stage guidance. Also holds the
emotional journey arcs and the hook/CTA strategy prompts.

Everything here is read-only module data. An unknown page type is a
configuration defect and raises ``TemplateNotFoundError``.
"""

from dataclasses import dataclass

from storyforge.exceptions import TemplateNotFoundError
from storyforge.storyline.types import (
    DEFAULT_STAGE_TONES,
    ContentType,
    CTAStrategy,
    EmotionalArc,
    EmotionalJourney,
    EmotionalPoint,
    EmotionalTone,
    HookStrategy,
    NarrativeRole,
    PacingZone,
    Pacing,
    PageType,
    StoryFlow,
    StoryStage,
)


@dataclass(frozen=True)
class ContentRange:
    min: int
    max: int
    recommended: int


@dataclass(frozen=True)
class StageGuidance:
    purpose: str
    duration: str
    content_types: tuple[ContentType, ...]
    emotional_goal: str


@dataclass(frozen=True)
class NarrativeTemplate:
    page_type: PageType
    required_stages: tuple[NarrativeRole, ...]
    optional_stages: tuple[NarrativeRole, ...]
    stage_order: tuple[NarrativeRole, ...]
    content_distribution: dict[NarrativeRole, ContentRange]
    recommended_arc: EmotionalArc
    recommended_hooks: tuple[HookStrategy, ...]
    recommended_ctas: tuple[CTAStrategy, ...]
    stage_guidance: dict[NarrativeRole, StageGuidance]

    @property
    def active_stages(self) -> set[NarrativeRole]:
        """Stages the page may use (required plus optional)."""
        return set(self.required_stages) | set(self.optional_stages)

    def stage_index(self, stage: NarrativeRole) -> int:
        """Position of a stage in ``stage_order``; stages outside it sort last."""
        try:
            return self.stage_order.index(stage)
        except ValueError:
            return len(self.stage_order)


H, P, S, PR, A = (
    NarrativeRole.HOOK,
    NarrativeRole.PROBLEM,
    NarrativeRole.SOLUTION,
    NarrativeRole.PROOF,
    NarrativeRole.ACTION,
)
ALL_STAGES = (H, P, S, PR, A)


def _dist(hook, problem, solution, proof, action) -> dict[NarrativeRole, ContentRange]:
    return {
        stage: ContentRange(*values)
        for stage, values in zip(ALL_STAGES, (hook, problem, solution, proof, action))
    }


def _guide(purpose: str, duration: str, types: str, goal: str) -> StageGuidance:
    return StageGuidance(
        purpose=purpose,
        duration=duration,
        content_types=tuple(ContentType(t) for t in types.split()),
        emotional_goal=goal,
    )


_NOT_USED = _guide("N/A", "0%", "", "N/A")


def _template(
    page_type: PageType,
    required: tuple[NarrativeRole, ...],
    optional: tuple[NarrativeRole, ...],
    order: tuple[NarrativeRole, ...],
    distribution: dict[NarrativeRole, ContentRange],
    arc: EmotionalArc,
    hooks: str,
    ctas: str,
    guidance: tuple[StageGuidance, ...],
) -> NarrativeTemplate:
    return NarrativeTemplate(
        page_type=page_type,
        required_stages=required,
        optional_stages=optional,
        stage_order=order,
        content_distribution=distribution,
        recommended_arc=arc,
        recommended_hooks=tuple(HookStrategy(h) for h in hooks.split()),
        recommended_ctas=tuple(CTAStrategy(c) for c in ctas.split()),
        stage_guidance=dict(zip(ALL_STAGES, guidance)),
    )


NARRATIVE_TEMPLATES: dict[PageType, NarrativeTemplate] = {
    PageType.HOME: _template(
        PageType.HOME, (H, S, PR, A), (P,), ALL_STAGES,
        _dist((1, 2, 1), (0, 2, 1), (2, 5, 3), (2, 4, 3), (1, 2, 1)),
        EmotionalArc.STANDARD,
        "bold_statement transformation_preview social_proof_lead",
        "soft_commitment multiple_options",
        (
            _guide("Capture attention and establish brand relevance immediately", "10-15% of page",
                   "value_proposition statistic", "Spark curiosity and interest"),
            _guide("Acknowledge visitor pain points to build empathy", "10-15% of page",
                   "pain_point statistic", "Create recognition and validation"),
            _guide("Present offerings as the answer to their needs", "35-45% of page",
                   "feature benefit process", "Generate hope and excitement"),
            _guide("Build credibility with evidence and social proof", "20-25% of page",
                   "testimonial case_study statistic", "Establish trust and confidence"),
            _guide("Guide visitors to take the next step", "10-15% of page",
                   "cta", "Create excitement and momentum"),
        ),
    ),
    PageType.LANDING: _template(
        PageType.LANDING, (H, S, A), (P, PR), ALL_STAGES,
        _dist((1, 1, 1), (0, 2, 1), (2, 4, 3), (1, 3, 2), (2, 3, 2)),
        EmotionalArc.URGENT,
        "surprising_statistic problem_agitation bold_statement",
        "direct_offer scarcity_urgency",
        (
            _guide("Immediately capture attention with compelling offer", "15-20% of page",
                   "value_proposition statistic", "Create immediate interest and urgency"),
            _guide("Agitate the pain point to increase desire for solution", "15-20% of page",
                   "pain_point comparison", "Amplify problem awareness"),
            _guide("Present the offer as the perfect solution", "30-35% of page",
                   "feature benefit", "Build excitement for the solution"),
            _guide("Quickly establish credibility", "15-20% of page",
                   "testimonial statistic", "Remove doubt"),
            _guide("Drive conversion with clear, compelling CTA", "15-20% of page",
                   "cta", "Create urgency to act now"),
        ),
    ),
    PageType.PRODUCT: _template(
        PageType.PRODUCT, (H, S, PR), (P, A), ALL_STAGES,
        _dist((1, 1, 1), (0, 1, 1), (4, 8, 6), (2, 4, 3), (1, 2, 1)),
        EmotionalArc.STANDARD,
        "transformation_preview bold_statement",
        "soft_commitment value_recap",
        (
            _guide("Showcase the product and its primary value", "15-20% of page",
                   "value_proposition", "Generate interest in the product"),
            _guide("Connect product to real-world challenges", "10-15% of page",
                   "pain_point", "Create relevance"),
            _guide("Detail features, capabilities, and benefits", "40-50% of page",
                   "feature benefit comparison process", "Build comprehensive understanding"),
            _guide("Show real-world success and validation", "15-20% of page",
                   "testimonial case_study statistic", "Validate purchase consideration"),
            _guide("Guide to trial, demo, or purchase", "10-15% of page",
                   "cta", "Encourage next step"),
        ),
    ),
    PageType.PRICING: _template(
        PageType.PRICING, (S, A), (H, PR), (H, S, PR, A),
        _dist((0, 1, 1), (0, 0, 0), (1, 3, 2), (0, 2, 1), (1, 2, 1)),
        EmotionalArc.REASSURING,
        "transformation_preview",
        "direct_offer multiple_options",
        (
            _guide("Reinforce value before showing price", "10-15% of page",
                   "value_proposition", "Affirm value before cost discussion"),
            _guide("N/A for pricing pages", "0%", "", "N/A"),
            _guide("Present pricing tiers and what each includes", "50-60% of page",
                   "comparison feature", "Make decision easy"),
            _guide("Address objections and build confidence", "15-20% of page",
                   "testimonial faq", "Remove purchase anxiety"),
            _guide("Clear path to purchase for each tier", "15-20% of page",
                   "cta", "Confidence in selection"),
        ),
    ),
    PageType.ABOUT: _template(
        PageType.ABOUT, (H, S, PR), (A,), (H, S, PR, A),
        _dist((1, 1, 1), (0, 1, 0), (2, 4, 3), (2, 4, 3), (0, 1, 1)),
        EmotionalArc.REASSURING,
        "story_opener bold_statement",
        "soft_commitment",
        (
            _guide("Tell the company story and mission", "20-25% of page",
                   "value_proposition", "Create connection and trust"),
            _guide("Why the company was founded (optional)", "0-10% of page",
                   "pain_point", "Show understanding of market"),
            _guide("Team, values, culture, approach", "40-50% of page",
                   "feature process", "Build familiarity and trust"),
            _guide("Achievements, press, partnerships", "20-25% of page",
                   "statistic testimonial", "Establish credibility"),
            _guide("Invite to connect or learn more", "10-15% of page",
                   "cta", "Warmth and invitation"),
        ),
    ),
    PageType.CONTACT: _template(
        PageType.CONTACT, (H, A), (PR,), (H, PR, A),
        _dist((1, 1, 1), (0, 0, 0), (0, 1, 0), (0, 2, 1), (1, 2, 1)),
        EmotionalArc.REASSURING,
        "bold_statement",
        "direct_offer multiple_options",
        (
            _guide("Welcome and encourage contact", "20-30% of page",
                   "value_proposition", "Welcoming and approachable"),
            _guide("N/A for contact pages", "0%", "", "N/A"),
            _guide("Contact options and expectations", "0-15% of page",
                   "process", "Clarity on what happens next"),
            _guide("Quick trust signals", "15-25% of page",
                   "testimonial statistic", "Confidence in reaching out"),
            _guide("Contact form and methods", "40-50% of page",
                   "cta", "Easy to take action"),
        ),
    ),
    PageType.BLOG: _template(
        PageType.BLOG, (H, S), (A,), (H, S, A),
        _dist((1, 1, 1), (0, 1, 0), (1, 3, 2), (0, 1, 0), (0, 1, 1)),
        EmotionalArc.STANDARD,
        "provocative_question surprising_statistic",
        "soft_commitment",
        (
            _guide("Featured content and value proposition", "20-25% of page",
                   "value_proposition", "Interest in content"),
            _guide("Topic categories (optional)", "0-10% of page",
                   "feature", "Navigation clarity"),
            _guide("Blog post listings and categories", "60-70% of page",
                   "feature", "Discovery and exploration"),
            _guide("Popular posts, social proof (optional)", "0-10% of page",
                   "statistic", "Validation of content quality"),
            _guide("Newsletter signup", "10-15% of page",
                   "cta", "Stay connected"),
        ),
    ),
    PageType.BLOG_POST: _template(
        PageType.BLOG_POST, (H, S), (PR, A), (H, S, PR, A),
        _dist((1, 1, 1), (0, 1, 0), (1, 3, 2), (0, 2, 1), (0, 1, 1)),
        EmotionalArc.STANDARD,
        "provocative_question surprising_statistic story_opener",
        "soft_commitment",
        (
            _guide("Engaging article introduction", "15-20% of page",
                   "value_proposition", "Interest in reading"),
            _guide("Context for the topic (optional)", "0-15% of page",
                   "pain_point", "Relevance"),
            _guide("Main article content and insights", "55-65% of page",
                   "feature process", "Value and learning"),
            _guide("Supporting evidence or examples", "10-15% of page",
                   "testimonial statistic", "Credibility"),
            _guide("Related content or newsletter signup", "10-15% of page",
                   "cta", "Continue engagement"),
        ),
    ),
    PageType.CASE_STUDY: _template(
        PageType.CASE_STUDY, (H, P, S, PR), (A,), ALL_STAGES,
        _dist((1, 1, 1), (1, 2, 2), (2, 4, 3), (2, 4, 3), (0, 1, 1)),
        EmotionalArc.DRAMATIC,
        "transformation_preview surprising_statistic",
        "soft_commitment value_recap",
        (
            _guide("Headline result and client introduction", "15-20% of page",
                   "value_proposition statistic", "Interest in the client's journey"),
            _guide("Detail the client's challenges before", "20-25% of page",
                   "pain_point statistic", "Empathy with similar challenges"),
            _guide("How the solution was implemented", "25-30% of page",
                   "process feature", "Understanding of approach"),
            _guide("Results, metrics, and testimonials", "25-30% of page",
                   "statistic testimonial case_study", "Confidence in results"),
            _guide("Invite similar results", "10-15% of page",
                   "cta", "Desire for similar outcome"),
        ),
    ),
    PageType.FEATURES: _template(
        PageType.FEATURES, (H, S), (PR, A), (H, S, PR, A),
        _dist((1, 1, 1), (0, 1, 0), (5, 10, 7), (0, 2, 1), (0, 1, 1)),
        EmotionalArc.STANDARD,
        "bold_statement transformation_preview",
        "soft_commitment",
        (
            _guide("Overview of capabilities", "15-20% of page",
                   "value_proposition", "Excitement about capabilities"),
            _guide("Optional challenges features solve", "0-10% of page",
                   "pain_point", "Relevance"),
            _guide("Comprehensive feature showcase", "55-65% of page",
                   "feature benefit comparison", "Appreciation for depth"),
            _guide("Feature-specific testimonials", "10-15% of page",
                   "testimonial", "Feature validation"),
            _guide("Try or learn more", "10-15% of page",
                   "cta", "Desire to experience"),
        ),
    ),
    PageType.SOLUTIONS: _template(
        PageType.SOLUTIONS, (H, P, S, PR), (A,), ALL_STAGES,
        _dist((1, 1, 1), (1, 3, 2), (3, 6, 4), (2, 3, 2), (1, 2, 1)),
        EmotionalArc.STANDARD,
        "problem_agitation transformation_preview",
        "soft_commitment multiple_options",
        (
            _guide("Industry/use-case specific value proposition", "15-20% of page",
                   "value_proposition", "Relevance to their situation"),
            _guide("Industry-specific challenges", "20-25% of page",
                   "pain_point statistic", "Recognition of their pain"),
            _guide("How solution addresses their needs", "35-40% of page",
                   "feature benefit process", "Hope for resolution"),
            _guide("Industry-relevant case studies", "15-20% of page",
                   "case_study testimonial", "Peer validation"),
            _guide("Industry-specific next steps", "10-15% of page",
                   "cta", "Confidence to engage"),
        ),
    ),
    PageType.RESOURCES: _template(
        PageType.RESOURCES, (H, S), (A,), (H, S, A),
        _dist((1, 1, 1), (0, 0, 0), (2, 5, 3), (0, 1, 0), (0, 1, 1)),
        EmotionalArc.REASSURING,
        "bold_statement",
        "soft_commitment",
        (
            _guide("Resource hub introduction", "15-20% of page",
                   "value_proposition", "Discovery excitement"),
            _NOT_USED,
            _guide("Resource categories and featured items", "65-75% of page",
                   "feature", "Easy navigation"),
            _guide("Resource usage stats (optional)", "0-10% of page",
                   "statistic", "Validation"),
            _guide("Newsletter or updates signup", "10-15% of page",
                   "cta", "Stay informed"),
        ),
    ),
    PageType.CAREERS: _template(
        PageType.CAREERS, (H, S, PR), (A,), (H, S, PR, A),
        _dist((1, 1, 1), (0, 0, 0), (2, 4, 3), (2, 4, 3), (1, 1, 1)),
        EmotionalArc.STANDARD,
        "story_opener bold_statement",
        "direct_offer",
        (
            _guide("Company culture and mission", "20-25% of page",
                   "value_proposition", "Excitement about the opportunity"),
            _NOT_USED,
            _guide("Benefits, growth opportunities, values", "35-40% of page",
                   "feature benefit", "Desire to join"),
            _guide("Employee stories, awards, culture", "25-30% of page",
                   "testimonial statistic", "Trust in culture"),
            _guide("View open positions", "15-20% of page",
                   "cta", "Ready to apply"),
        ),
    ),
    PageType.LEGAL: _template(
        PageType.LEGAL, (H, S), (), (H, S),
        _dist((1, 1, 1), (0, 0, 0), (1, 2, 1), (0, 0, 0), (0, 1, 0)),
        EmotionalArc.REASSURING,
        "bold_statement",
        "soft_commitment",
        (
            _guide("Legal page header", "10-15% of page",
                   "value_proposition", "Professional and clear"),
            _NOT_USED,
            _guide("Legal content and navigation", "80-90% of page",
                   "feature", "Transparency and trust"),
            _NOT_USED,
            _guide("Contact for questions (optional)", "0-10% of page",
                   "cta", "Accessibility"),
        ),
    ),
    PageType.CUSTOM: _template(
        PageType.CUSTOM, (H, S), (P, PR, A), ALL_STAGES,
        _dist((1, 2, 1), (0, 2, 1), (2, 6, 3), (0, 3, 2), (0, 2, 1)),
        EmotionalArc.STANDARD,
        "bold_statement transformation_preview",
        "soft_commitment value_recap",
        (
            _guide("Capture attention with main message", "15-20% of page",
                   "value_proposition", "Interest and relevance"),
            _guide("Address relevant challenges (optional)", "10-20% of page",
                   "pain_point", "Recognition"),
            _guide("Present main content and value", "35-45% of page",
                   "feature benefit", "Understanding and hope"),
            _guide("Supporting evidence (optional)", "15-25% of page",
                   "testimonial statistic", "Credibility"),
            _guide("Guide to next steps", "10-15% of page",
                   "cta", "Motivation to act"),
        ),
    ),
}


def get_template(page_type: PageType | str) -> NarrativeTemplate:
    """Look up the narrative template for a page type.

    Raises:
        TemplateNotFoundError: If no template is registered.
    """
    try:
        return NARRATIVE_TEMPLATES[PageType(page_type)]
    except (KeyError, ValueError):
        raise TemplateNotFoundError(str(page_type)) from None


def get_default_story_flow(page_type: PageType | str) -> StoryFlow:
    """Build the default story flow for a page type.

    The result follows ``stage_order`` and contains exactly the required and
    optional stages, each with its default tone and guidance purpose.
    """
    template = get_template(page_type)
    active = template.active_stages
    return StoryFlow(
        stages=tuple(
            StoryStage(
                name=stage.value,
                narrative_role=stage,
                emotional_tone=DEFAULT_STAGE_TONES[stage],
                description=template.stage_guidance[stage].purpose,
            )
            for stage in template.stage_order
            if stage in active
        )
    )


# =============================================================================
# Emotional journeys
# =============================================================================


def _points(*rows: tuple[int, str, int, str]) -> tuple[EmotionalPoint, ...]:
    return tuple(
        EmotionalPoint(position=pos, emotion=EmotionalTone(emotion), intensity=level, pacing=Pacing(pace))
        for pos, emotion, level, pace in rows
    )


EMOTIONAL_JOURNEY_TEMPLATES: dict[EmotionalArc, tuple[EmotionalPoint, ...]] = {
    EmotionalArc.STANDARD: _points(
        (0, "curiosity", 85, "fast"),
        (15, "empathy", 70, "medium"),
        (30, "urgency", 75, "medium"),
        (50, "hope", 90, "medium"),
        (70, "confidence", 85, "slow"),
        (85, "trust", 80, "slow"),
        (100, "excitement", 90, "fast"),
    ),
    EmotionalArc.DRAMATIC: _points(
        (0, "curiosity", 95, "fast"),
        (15, "empathy", 60, "slow"),
        (25, "urgency", 90, "fast"),
        (40, "hope", 50, "slow"),
        (55, "hope", 95, "fast"),
        (75, "confidence", 90, "medium"),
        (100, "excitement", 100, "fast"),
    ),
    EmotionalArc.REASSURING: _points(
        (0, "trust", 80, "slow"),
        (20, "confidence", 75, "slow"),
        (40, "hope", 80, "medium"),
        (60, "confidence", 85, "medium"),
        (80, "trust", 90, "slow"),
        (100, "relief", 85, "slow"),
    ),
    EmotionalArc.URGENT: _points(
        (0, "curiosity", 90, "fast"),
        (10, "urgency", 85, "fast"),
        (25, "urgency", 95, "fast"),
        (45, "hope", 90, "fast"),
        (65, "confidence", 85, "medium"),
        (80, "excitement", 95, "fast"),
        (100, "excitement", 100, "fast"),
    ),
}

# (fast, medium, slow)
_PACING_PURPOSES: dict[EmotionalTone, tuple[str, str, str]] = {
    EmotionalTone.CURIOSITY: (
        "Capture attention quickly", "Build intrigue steadily", "Let interest develop naturally"),
    EmotionalTone.EMPATHY: (
        "Acknowledge pain quickly", "Build emotional connection", "Deep emotional resonance"),
    EmotionalTone.URGENCY: (
        "Create immediate pressure", "Build sense of importance", "Sustained urgency"),
    EmotionalTone.HOPE: (
        "Quick relief and excitement", "Building optimism", "Thoughtful consideration of benefits"),
    EmotionalTone.CONFIDENCE: (
        "Rapid credibility building", "Steady trust building", "Deep credibility establishment"),
    EmotionalTone.EXCITEMENT: (
        "Drive to action", "Building momentum", "Sustained enthusiasm"),
    EmotionalTone.TRUST: (
        "Quick reassurance", "Building reliability", "Deep trust establishment"),
    EmotionalTone.RELIEF: (
        "Quick resolution", "Comfortable conclusion", "Peaceful satisfaction"),
}


def pacing_purpose(emotion: EmotionalTone, pacing: Pacing) -> str:
    fast, medium, slow = _PACING_PURPOSES[emotion]
    return {Pacing.FAST: fast, Pacing.MEDIUM: medium, Pacing.SLOW: slow}[pacing]


def build_journey(arc: EmotionalArc, points: tuple[EmotionalPoint, ...]) -> EmotionalJourney:
    """Derive peak position and pacing zones for a sequence of points."""
    peak_position = 0
    max_intensity = 0
    for point in points:
        if point.intensity > max_intensity:
            max_intensity = point.intensity
            peak_position = point.position

    zones = tuple(
        PacingZone(
            start=current.position,
            end=following.position,
            pacing=current.pacing,
            purpose=pacing_purpose(current.emotion, current.pacing),
        )
        for current, following in zip(points, points[1:])
    )
    return EmotionalJourney(arc=arc, points=points, peak_position=peak_position, pacing_zones=zones)


def generate_emotional_journey(page_type: PageType | str) -> EmotionalJourney:
    """Emotional journey for a page type's recommended arc."""
    arc = get_template(page_type).recommended_arc
    return build_journey(arc, EMOTIONAL_JOURNEY_TEMPLATES[arc])


# =============================================================================
# Strategy prompts
# =============================================================================

HOOK_STRATEGY_PROMPTS: dict[HookStrategy, str] = {
    HookStrategy.SURPRISING_STATISTIC: (
        "Lead with a surprising or counter-intuitive statistic that challenges "
        "assumptions and demands attention."
    ),
    HookStrategy.PROVOCATIVE_QUESTION: (
        "Open with a thought-provoking question that the reader cannot help but want answered."
    ),
    HookStrategy.BOLD_STATEMENT: (
        "Make a strong, confident claim about the value or transformation you provide."
    ),
    HookStrategy.STORY_OPENER: (
        "Begin with a brief, compelling story that illustrates the transformation or journey."
    ),
    HookStrategy.PROBLEM_AGITATION: (
        "Start by vividly describing the pain point or problem, making it feel urgent."
    ),
    HookStrategy.TRANSFORMATION_PREVIEW: (
        "Show the end result first: the transformed state the visitor can achieve."
    ),
    HookStrategy.SOCIAL_PROOF_LEAD: (
        "Lead with impressive credibility signals such as numbers, logos, or achievements."
    ),
    HookStrategy.CONTRARIAN_VIEW: (
        "Challenge conventional wisdom or common approaches in the industry."
    ),
}

CTA_STRATEGY_PROMPTS: dict[CTAStrategy, str] = {
    CTAStrategy.DIRECT_OFFER: "Clear, specific action with immediate value proposition. No ambiguity.",
    CTAStrategy.SOFT_COMMITMENT: (
        'Low-friction first step that feels easy and risk-free (e.g., "Learn more", '
        '"See how it works").'
    ),
    CTAStrategy.SCARCITY_URGENCY: (
        "Time-limited or availability-limited offer that creates pressure to act now."
    ),
    CTAStrategy.VALUE_RECAP: (
        "Summarize key benefits before the ask, reminding them why they should act."
    ),
    CTAStrategy.MULTIPLE_OPTIONS: (
        "Offer different entry points for different readiness levels (demo, trial, contact)."
    ),
    CTAStrategy.SOCIAL_MOMENTUM: "Emphasize that others are taking action. Join the movement.",
}
