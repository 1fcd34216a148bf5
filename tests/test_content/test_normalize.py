"""Tests for normalization of synthesized content."""

import json

import pytest

from storyforge.content.normalize import normalize_content
from storyforge.content.types import (
    CTAContent,
    FeatureItem,
    ImageContent,
    PopulatedContent,
    PricingTier,
    StatisticItem,
)
from storyforge.llm.exceptions import StructuredOutputError


class TestNormalizeContent:
    """Tests for normalize_content."""

    def test_text_fields(self):
        """Test string text is kept as is and non-string text dropped."""
        content = normalize_content(
            {"headline": "Close faster", "subheadline": "", "description": 42, "sectionTitle": "Why us"}
        )

        assert content.headline == "Close faster"
        assert content.subheadline == ""
        assert content.description is None
        assert content.section_title == "Why us"

    def test_cta_variants_defaulted(self):
        """Test missing or invalid variants take the slot default."""
        content = normalize_content(
            {
                "primaryCTA": {"text": "Start", "link": "#start"},
                "secondaryCTA": {"text": "More", "link": "#more", "variant": "sparkly"},
            }
        )

        assert content.primary_cta == CTAContent(text="Start", link="#start", variant="primary")
        assert content.secondary_cta.variant == "secondary"

    def test_incomplete_cta_dropped(self):
        """Test a CTA without a link is discarded."""
        content = normalize_content({"primaryCTA": {"text": "Start"}})
        assert content.primary_cta is None

    def test_malformed_items_dropped(self):
        """Test array items that do not validate are filtered out."""
        content = normalize_content(
            {
                "features": [
                    {"title": "Live sync", "description": "Real time"},
                    "not an object",
                    {"description": "no title"},
                ],
                "bullets": ["Fast", 2, "Easy"],
            }
        )

        assert content.features == [FeatureItem(title="Live sync", description="Real time")]
        assert content.bullets == ["Fast", "Easy"]

    def test_scalar_coercion(self):
        """Test numeric values in text item fields become strings."""
        content = normalize_content({"statistics": [{"value": 80, "label": "percent less work"}]})
        assert content.statistics == [StatisticItem(value="80", label="percent less work")]

    @pytest.mark.parametrize("value", [{"amount": 80}, ["80"], True])
    def test_non_scalar_text_drops_item(self, value):
        """Test objects, lists and booleans in text item fields fail the item."""
        content = normalize_content(
            {"statistics": [{"value": value, "label": "less work"}, {"value": "3x", "label": "faster"}]}
        )
        assert content.statistics == [StatisticItem(value="3x", label="faster")]

    @pytest.mark.parametrize("features", [5, "SSO", {"sso": True}, None])
    def test_pricing_features_not_a_list(self, features):
        """Test a non-list features value leaves the tier with no features."""
        content = normalize_content({"pricingTiers": [{"name": "Pro", "features": features}]})

        assert content.pricing_tiers == [PricingTier(name="Pro")]
        assert content.pricing_tiers[0].features == []

    def test_pricing_defaults(self):
        """Test pricing tiers get string features and a default CTA."""
        content = normalize_content({"pricingTiers": [{"name": "Pro", "price": 49, "features": ["SSO", 3]}]})

        tier = content.pricing_tiers[0]
        assert tier.price == "49"
        assert tier.features == ["SSO"]
        assert tier.cta == CTAContent(text="Get Started", link="#", variant="primary")

    def test_process_step_numbers(self):
        """Test missing or non-integer step numbers follow list position."""
        content = normalize_content(
            {
                "processSteps": [
                    {"title": "Connect"},
                    {"step": 7, "title": "Match"},
                    {"step": True, "title": "Report"},
                ]
            }
        )

        assert [s.step for s in content.process_steps] == [1, 7, 3]

    def test_logos_get_image(self):
        """Test logos without an image get an empty one."""
        content = normalize_content({"logos": [{"name": "Northwind"}]})
        assert content.logos[0].image == ImageContent()

    def test_media_and_custom(self):
        """Test media objects and custom dicts are kept, malformed media dropped."""
        content = normalize_content(
            {
                "image": {"src": "hero.png", "alt": "Hero"},
                "backgroundImage": "bg.png",
                "custom": {"links": ["a"]},
                "unknownField": "ignored",
            }
        )

        assert content.image == ImageContent(src="hero.png", alt="Hero")
        assert content.background_image is None
        assert content.custom == {"links": ["a"]}
        assert "unknownField" not in content.to_slots()

    def test_valid_content_survives(self):
        """Test normalizing the slot dump of valid content reproduces it."""
        content = PopulatedContent(
            headline="Close faster",
            primary_cta=CTAContent(text="Start", link="#start", variant="outline"),
            secondary_cta=CTAContent(text="Demo", link="#demo", variant="ghost"),
            features=[FeatureItem(title="Live sync", description="Real time", icon="sync")],
            statistics=[StatisticItem(value="80%", label="less work")],
        )

        assert normalize_content(content.to_slots()).to_slots() == content.to_slots()

    @pytest.mark.parametrize(
        "content",
        [
            PopulatedContent(primary_cta=CTAContent(text="Go", link="#go")),
            PopulatedContent(secondary_cta=CTAContent(text="More", link="#more")),
            PopulatedContent(pricing_tiers=[PricingTier(name="Pro")]),
            PopulatedContent(headline="", bullets=[]),
        ],
    )
    def test_defaulted_content_survives(self, content):
        """Test content relying on model defaults round-trips through JSON."""
        assert normalize_content(json.dumps(content.to_slots())) == content

    def test_cta_without_variant_takes_slot_default(self):
        """Test the model applies slot defaults to CTAs without a variant."""
        content = PopulatedContent(
            primary_cta=CTAContent(text="Go", link="#go"),
            secondary_cta=CTAContent(text="More", link="#more"),
        )

        assert content.primary_cta.variant == "primary"
        assert content.secondary_cta.variant == "secondary"
        assert PricingTier(name="Pro", cta=CTAContent(text="Buy")).cta.variant == "primary"

    def test_text_input(self):
        """Test JSON embedded in prose is extracted."""
        content = normalize_content('Here is the content: {"headline": "Hello"} Enjoy!')
        assert content.headline == "Hello"

    def test_text_without_json(self):
        """Test text with no JSON object raises."""
        with pytest.raises(StructuredOutputError):
            normalize_content("I could not write this section.")
