"""
Unit tests for the content transformer.

Tests the mapping from validated components to stored blocks:
- Storage type names and block ids
- Renderer field shapes per component variant
- Price parsing for pricing plans
"""
import json

import pytest

from sitebuilder.schemas import site_spec
from sitebuilder.services.block_transformer import (
    CONTACT_SUCCESS_MESSAGE,
    DEFAULT_RATING,
    parse_price,
    storage_type,
    transform,
)
from sitebuilder.services.structure_validator import validate


def _component(tag: str, props: dict):
    component_cls, _ = site_spec.COMPONENT_VARIANTS[tag]
    return component_cls.model_validate({"type": tag, "props": props})


class TestParsePrice:
    """Test display price parsing."""

    @pytest.mark.parametrize(
        "price, expected",
        [
            ("$29", 29),
            ("$1,299/mo", 1299),
            ("Free", 0),
            ("", 0),
            ("€15.99", 15),
        ],
    )
    def test_parse_price(self, price, expected):
        assert parse_price(price) == expected


class TestTransform:
    """Test block ids and storage types."""

    def test_blocks_follow_component_order(self, site_document):
        spec = validate(json.dumps(site_document))

        blocks = transform(spec.components, now_ms=1700000000000)

        assert [b.type for b in blocks] == ["hero", "features", "pricing", "contact-form"]
        assert [b.id for b in blocks] == [
            "hero-1700000000000-0",
            "features-1700000000000-1",
            "pricing-1700000000000-2",
            "contact-form-1700000000000-3",
        ]

    def test_ids_unique_for_repeated_types(self):
        text = _component("text", {"heading": "A", "text": "b"})

        blocks = transform([text, text, text], now_ms=1)

        assert len({b.id for b in blocks}) == 3

    def test_storage_type_mapping(self):
        assert storage_type("contact") == "contact-form"
        assert storage_type("text") == "content-block"
        assert storage_type("gallery") == "image-gallery"
        assert storage_type("hero") == "hero"
        assert storage_type("newsletter") == "newsletter"


class TestRendererShapes:
    """Test each variant produces exactly its renderer's fields."""

    def test_hero(self):
        hero = _component("hero", {
            "title": "Welcome",
            "subtitle": "Sub",
            "ctaText": "Book Now",
            "image": "https://img.test/hero.jpg",
        })

        content = transform([hero], now_ms=1)[0].content

        assert content["title"] == "Welcome"
        assert content["imageUrl"] == "https://img.test/hero.jpg"
        assert content["actions"] == [
            {"label": "Book Now", "href": "#contact", "variant": "default"}
        ]

    def test_features_drop_icons(self):
        features = _component("features", {
            "title": "Why us",
            "features": [{"icon": "zap", "title": "Fast", "description": "Very fast"}],
        })

        content = transform([features], now_ms=1)[0].content

        assert content == {
            "title": "Why us",
            "features": [{"title": "Fast", "description": "Very fast"}],
        }

    def test_pricing_amounts(self):
        pricing = _component("pricing", {
            "title": "Plans",
            "plans": [{
                "name": "Pro",
                "price": "$1,299/mo",
                "description": "For teams",
                "features": ["A", "B"],
                "ctaText": "Buy",
                "featured": True,
            }],
        })

        content = transform([pricing], now_ms=1)[0].content
        plan = content["plans"][0]

        assert plan["priceMonthly"] == 1299
        assert plan["priceYearly"] == 12990
        assert plan["buttonText"] == "Buy"
        assert plan["isPopular"] is True
        assert "subtitle" not in content

    def test_pricing_custom_multiplier(self):
        pricing = _component("pricing", {
            "title": "Plans",
            "plans": [{
                "name": "Basic",
                "price": "$10",
                "description": "d",
                "features": [],
                "ctaText": "Go",
            }],
        })

        content = transform([pricing], yearly_multiplier=12, now_ms=1)[0].content

        assert content["plans"][0]["priceYearly"] == 120
        assert content["plans"][0]["isPopular"] is False

    def test_testimonials_default_rating(self):
        reviews = _component("testimonials", {
            "title": "Clients",
            "testimonials": [
                {"quote": "Great", "author": "Ann", "role": "CEO", "avatar": "https://img.test/a.jpg"},
                {"quote": "Fine", "author": "Bo", "role": "CTO", "avatar": "https://img.test/b.jpg", "rating": 3},
            ],
        })

        content = transform([reviews], now_ms=1)[0].content

        assert content["reviews"][0] == {
            "name": "Ann",
            "role": "CEO",
            "avatarUrl": "https://img.test/a.jpg",
            "content": "Great",
            "rating": DEFAULT_RATING,
        }
        assert content["reviews"][1]["rating"] == 3

    def test_faq(self):
        faq = _component("faq", {
            "title": "FAQ",
            "faqs": [{"question": "Q?", "answer": "A."}],
        })

        block = transform([faq], now_ms=1)[0]

        assert block.content == {"title": "FAQ", "items": [{"question": "Q?", "answer": "A."}]}

    def test_contact_drops_details(self):
        contact = _component("contact", {
            "title": "Talk to us",
            "email": "hi@example.com",
            "phone": "+1 555",
        })

        block = transform([contact], now_ms=1)[0]

        assert block.type == "contact-form"
        assert block.content == {
            "title": "Talk to us",
            "successMessage": CONTACT_SUCCESS_MESSAGE,
        }

    def test_text_renders_escaped_html(self):
        text = _component("text", {
            "heading": "About <Us>",
            "text": "Line one\nLine two\n\nSecond paragraph",
        })

        block = transform([text], now_ms=1)[0]

        assert block.type == "content-block"
        assert block.content == {
            "content": "<h2>About &lt;Us&gt;</h2><p>Line one<br>Line two</p><p>Second paragraph</p>",
            "className": "text-left",
        }

    def test_gallery(self):
        gallery = _component("gallery", {
            "images": [{"url": "https://img.test/1.jpg", "alt": "One", "caption": "c"}],
        })

        block = transform([gallery], now_ms=1)[0]

        assert block.type == "image-gallery"
        assert block.content == {
            "images": [{"url": "https://img.test/1.jpg", "alt": "One"}],
            "columns": 3,
        }

    def test_passthrough_keeps_props(self):
        unknown = site_spec.PassthroughComponent(type="newsletter", props={"headline": "Hi"})

        block = transform([unknown], now_ms=1)[0]

        assert block.type == "newsletter"
        assert block.content == {"headline": "Hi"}

    def test_transform_is_pure(self, site_document):
        spec = validate(json.dumps(site_document))

        first = transform(spec.components, now_ms=1)
        second = transform(spec.components, now_ms=2)

        assert [(b.type, b.content) for b in first] == [(b.type, b.content) for b in second]
