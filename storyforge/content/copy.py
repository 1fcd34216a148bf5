"""Standalone copy utilities.

Headline and description options are free-text synthesis calls with a fixed
fallback string; CTAs are chosen deterministically from the CTA strategy.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Literal

from storyforge.content.prompts import (
    DESCRIPTION_PROMPT,
    DESCRIPTION_SYSTEM_PROMPT,
    HEADLINE_PROMPT,
    HEADLINE_SYSTEM_PROMPT,
)
from storyforge.content.types import CTAContent, CTAVariant
from storyforge.llm.base import TextSynthesizer
from storyforge.llm.exceptions import LLMError
from storyforge.llm.message_types import Message
from storyforge.llm.retry import with_retry
from storyforge.llm.structured import SynthesisOptions
from storyforge.storyline.types import CTAStrategy, EmotionalTone, NarrativeRole

logger = logging.getLogger(__name__)

FALLBACK_HEADLINE = "Discover the Difference"
FALLBACK_DESCRIPTION = "Learn more about our solution."
DEFAULT_CTA_TEXT = "Get Started"


class CopyStrategy(str, Enum):
    BENEFIT_FOCUSED = "benefit_focused"
    FEATURE_FOCUSED = "feature_focused"
    PROBLEM_SOLUTION = "problem_solution"
    SOCIAL_PROOF = "social_proof"
    STORY_DRIVEN = "story_driven"
    DATA_DRIVEN = "data_driven"


STRATEGY_GUIDES: dict[CopyStrategy, str] = {
    CopyStrategy.BENEFIT_FOCUSED: "Lead with the primary benefit to the user",
    CopyStrategy.FEATURE_FOCUSED: "Highlight the key feature or capability",
    CopyStrategy.PROBLEM_SOLUTION: "Frame as solving a specific problem",
    CopyStrategy.SOCIAL_PROOF: "Reference credibility or social validation",
    CopyStrategy.STORY_DRIVEN: "Use narrative or storytelling approach",
    CopyStrategy.DATA_DRIVEN: "Lead with a compelling statistic or metric",
}

CTA_TEXT_BY_STRATEGY: dict[CTAStrategy, str] = {
    CTAStrategy.DIRECT_OFFER: "Start Free Trial",
    CTAStrategy.SOFT_COMMITMENT: "Learn More",
    CTAStrategy.SCARCITY_URGENCY: "Claim Your Spot",
    CTAStrategy.VALUE_RECAP: "Get Started Now",
    CTAStrategy.MULTIPLE_OPTIONS: "Explore Options",
    CTAStrategy.SOCIAL_MOMENTUM: "Join 10,000+ Users",
}


@dataclass
class HeadlineOptions:
    stage: NarrativeRole
    tone: EmotionalTone
    max_length: int
    strategy: CopyStrategy
    formality: Literal["formal", "neutral", "informal"] = "neutral"
    keywords: list[str] = field(default_factory=list)


@dataclass
class DescriptionOptions:
    stage: NarrativeRole
    tone: EmotionalTone
    max_length: int
    density: Literal["concise", "balanced", "detailed"] = "balanced"
    include_stats: bool = False
    keywords: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class CopyResult:
    text: str
    used_fallback: bool
    tokens_used: int = 0


def generate_cta(strategy: CTAStrategy | str, variant: CTAVariant = "primary") -> CTAContent:
    """CTA button text for a strategy. Unknown strategies get a generic label."""
    try:
        text = CTA_TEXT_BY_STRATEGY[CTAStrategy(strategy)]
    except ValueError:
        text = DEFAULT_CTA_TEXT
    return CTAContent(text=text, link="#", variant=variant)


def _clean(text: str, max_length: int) -> str:
    return text.strip().strip('"').strip()[:max_length]


async def _complete_text(
    synthesizer: TextSynthesizer,
    prompt: str,
    system_prompt: str,
    max_tokens: int,
    temperature: float,
    options: SynthesisOptions,
) -> tuple[str, int]:
    response = await asyncio.wait_for(
        with_retry(
            synthesizer.complete,
            messages=[Message.user(prompt)],
            model=options.model,
            max_tokens=max_tokens,
            temperature=temperature,
            system_prompt=system_prompt,
            config=options.retry,
        ),
        timeout=options.timeout_seconds,
    )
    return response.content or "", response.tokens_used


async def generate_headline(
    synthesizer: TextSynthesizer,
    content: str,
    options: HeadlineOptions,
    synthesis: SynthesisOptions | None = None,
) -> CopyResult:
    """One headline for ``content``, or the fallback headline on failure."""
    synthesis = synthesis or SynthesisOptions()
    prompt = HEADLINE_PROMPT.format(
        stage=options.stage.value,
        tone=options.tone.value,
        max_length=options.max_length,
        strategy=STRATEGY_GUIDES[options.strategy],
        formality=options.formality,
        keywords=", ".join(options.keywords) or "none",
        content=content,
    )
    try:
        text, tokens = await _complete_text(
            synthesizer, prompt, HEADLINE_SYSTEM_PROMPT, 100, 0.8, synthesis
        )
    except (LLMError, asyncio.TimeoutError) as e:
        logger.warning(f"Headline synthesis failed, using fallback: {e}")
        return CopyResult(text=FALLBACK_HEADLINE, used_fallback=True)

    headline = _clean(text, options.max_length)
    if not headline:
        return CopyResult(text=FALLBACK_HEADLINE, used_fallback=True, tokens_used=tokens)
    return CopyResult(text=headline, used_fallback=False, tokens_used=tokens)


async def generate_description(
    synthesizer: TextSynthesizer,
    content: str,
    options: DescriptionOptions,
    synthesis: SynthesisOptions | None = None,
) -> CopyResult:
    """One description for ``content``, or the fallback description on failure."""
    synthesis = synthesis or SynthesisOptions()
    prompt = DESCRIPTION_PROMPT.format(
        max_length=options.max_length,
        stage=options.stage.value,
        tone=options.tone.value,
        density=options.density,
        include_stats="yes" if options.include_stats else "no",
        keywords=", ".join(options.keywords) or "none",
        content=content,
    )
    try:
        text, tokens = await _complete_text(
            synthesizer, prompt, DESCRIPTION_SYSTEM_PROMPT, 300, 0.7, synthesis
        )
    except (LLMError, asyncio.TimeoutError) as e:
        logger.warning(f"Description synthesis failed, using fallback: {e}")
        return CopyResult(text=FALLBACK_DESCRIPTION, used_fallback=True)

    description = _clean(text, options.max_length)
    if not description:
        return CopyResult(text=FALLBACK_DESCRIPTION, used_fallback=True, tokens_used=tokens)
    return CopyResult(text=description, used_fallback=False, tokens_used=tokens)
