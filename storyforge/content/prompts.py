"""Prompt templates for section content synthesis."""

from storyforge.storyline.types import NarrativeRole

COPYWRITER_SYSTEM_PROMPT = (
    "You are an expert marketing copywriter. Generate compelling, conversion-focused "
    "content. Respond only with valid JSON."
)

PERSONA_SYSTEM_PROMPT = (
    "You are an expert at personalizing marketing content for different audience "
    "segments. Respond only with valid JSON."
)

SEO_SYSTEM_PROMPT = "You are an SEO expert. Respond only with valid JSON."

HEADLINE_SYSTEM_PROMPT = "You are an expert copywriter. Generate only the headline, no explanations."

DESCRIPTION_SYSTEM_PROMPT = "You are an expert copywriter. Generate only the description, no explanations."

NO_SOURCED_CONTENT = "No specific content available."
NO_BRAND_GUIDELINES = "No specific brand guidelines."

STAGE_GUIDANCE: dict[NarrativeRole, str] = {
    NarrativeRole.HOOK: (
        "PURPOSE: Capture attention immediately\n"
        "EMOTIONAL TONE: Curiosity, intrigue\n"
        "FOCUS: Value proposition, transformation promise\n"
        "STYLE: Bold, direct, benefit-focused"
    ),
    NarrativeRole.PROBLEM: (
        "PURPOSE: Create resonance with audience pain\n"
        "EMOTIONAL TONE: Empathy, understanding\n"
        "FOCUS: Specific challenges, quantified impact\n"
        "STYLE: Relatable, specific, validating"
    ),
    NarrativeRole.SOLUTION: (
        "PURPOSE: Present your offering as the answer\n"
        "EMOTIONAL TONE: Hope, possibility\n"
        "FOCUS: Features that solve problems, benefits\n"
        "STYLE: Clear, benefit-focused, confident"
    ),
    NarrativeRole.PROOF: (
        "PURPOSE: Build credibility and trust\n"
        "EMOTIONAL TONE: Confidence, trust\n"
        "FOCUS: Social proof, results, testimonials\n"
        "STYLE: Specific, quantified, authentic"
    ),
    NarrativeRole.ACTION: (
        "PURPOSE: Drive conversion\n"
        "EMOTIONAL TONE: Excitement, urgency\n"
        "FOCUS: Clear next steps, value recap\n"
        "STYLE: Direct, encouraging, low-friction"
    ),
}

HINTS_CONTEXT = """
Focus Keywords: {focus_keywords}
Avoid Terms: {avoid_terms}
Tone Override: {tone_override}
Include Stats: {include_stats}
CTA Preference: {cta_preference}"""

STORYLINE_BLOCK_CONTEXT = """
STORYLINE BLOCK:
Headline: {headline}
Description: {description}"""

SECTION_PROMPT = """Generate marketing content for a {stage} section.

NARRATIVE STAGE: {stage}
{stage_guidance}

AVAILABLE CONTENT:
{content_context}

BRAND GUIDELINES:
{brand_context}

REQUIRED CONTENT SLOTS:
{slot_context}
{hints_context}{block_context}

Generate compelling marketing copy that:
1. Matches the {stage} stage emotional tone
2. Follows brand voice guidelines
3. Fills all required content slots
4. Is concise but impactful

Respond with JSON in this format:
{{
  "headline": "string (max 100 chars)",
  "subheadline": "string (max 150 chars)",
  "description": "string (max 500 chars)",
  "bullets": ["string (max 5 items)"],
  "primaryCTA": {{"text": "string (max 50 chars)", "link": "#", "variant": "primary"}},
  "secondaryCTA": {{"text": "string (max 50 chars)", "link": "#", "variant": "secondary"}},
  "features": [{{"title": "string", "description": "string", "icon": "string"}}],
  "statistics": [{{"value": "string", "label": "string"}}]
}}

Only include fields that are relevant to this section type. Include null for unused fields."""

PERSONA_PROMPT = """Adapt the following marketing content for a specific persona.

PERSONA:
Name: {name}
Communication Style: {communication_style}
Journey Stage: {journey_stage}
Pain Points: {pain_points}
Goals: {goals}
Decision Criteria: {decision_criteria}

NARRATIVE STAGE: {stage}

BASE CONTENT:
{base_content}

Adapt this content to:
1. Use {communication_style} language style
2. Emphasize points relevant to their {journey_stage} journey stage
3. Address their specific pain points
4. Align with their decision criteria
5. Keep the same structure but adjust messaging

Respond with the adapted content in the same JSON format."""

SEO_PROMPT = """Generate SEO metadata for a {page_type} page.

HEADLINE: {headline}
DESCRIPTION: {description}
BRAND: {brand}
KEYWORDS: {keywords}

Generate:
1. SEO title (50-60 chars)
2. Meta description (150-160 chars)
3. Keywords (5-10 terms)

Respond with JSON:
{{
  "title": "string",
  "description": "string",
  "keywords": ["string"]
}}"""

HEADLINE_PROMPT = """Generate a headline for marketing content.

STAGE: {stage}
TONE: {tone}
MAX LENGTH: {max_length} characters
STRATEGY: {strategy}
FORMALITY: {formality}
KEYWORDS: {keywords}

CONTENT TO SUMMARIZE:
{content}

Generate a single, compelling headline that captures attention and drives engagement."""

DESCRIPTION_PROMPT = """Generate a description for marketing content.

MAX LENGTH: {max_length} characters
STAGE: {stage}
TONE: {tone}
DENSITY: {density}
INCLUDE STATS: {include_stats}
KEYWORDS: {keywords}

CONTENT TO SUMMARIZE:
{content}

Generate a compelling description that supports the headline and drives action."""
