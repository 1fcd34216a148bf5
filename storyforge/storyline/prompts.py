"""Prompt templates for storyline synthesis."""

NARRATIVE_SYSTEM_PROMPT = (
    "You are an expert marketing strategist who identifies compelling narratives "
    "from content. Respond only with valid JSON."
)

NARRATIVE_PROMPT = """Analyze the following knowledge base content and identify the core marketing narrative.

CONTENT SUMMARY:
{content_summary}

BRAND CONTEXT:
{brand_context}

Based on this content, identify:
1. Central Theme: The main message or theme
2. Value Proposition: The unique value offered
3. Differentiators: What makes this offering unique (list 3-5)
4. Target Audience: Who this is for
5. Transformation: The before/after state for customers
6. Pain Points: Key problems addressed (list 3-5)
7. Benefits: Key benefits offered (list 3-5)
8. Proof Elements: Available social proof (testimonials, case studies, statistics, awards, certifications)

Respond in JSON format matching this structure:
{{
  "centralTheme": "string",
  "valueProposition": "string",
  "differentiators": ["string"],
  "targetAudience": "string",
  "transformation": {{"before": "string", "after": "string"}},
  "painPoints": ["string"],
  "benefits": ["string"],
  "proofElements": [
    {{"type": "testimonial|case_study|statistic|award|certification", "count": 0, "strength": "high|medium|low"}}
  ]
}}"""

NO_BRAND_CONTEXT = "No specific brand guidelines provided."
