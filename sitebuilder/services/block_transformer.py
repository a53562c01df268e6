"""
Content transformer: maps validated components to renderer-shaped blocks.

Each recognized variant has one reshaper that emits exactly the fields its
renderer reads. Unrecognized components keep their props as content.
"""
import html
import logging
import re
import time
from dataclasses import dataclass
from typing import Any, Callable

from sitebuilder.config import settings
from sitebuilder.schemas.site_spec import (
    ComponentSpec,
    ContactComponent,
    FaqComponent,
    FeaturesComponent,
    GalleryComponent,
    HeroComponent,
    PassthroughComponent,
    PricingComponent,
    TestimonialsComponent,
    TextComponent,
    TransformedBlock,
)

logger = logging.getLogger(__name__)

# Generation-time type -> storage/render type; unmapped types keep their name
STORAGE_TYPES = {
    "contact": "contact-form",
    "text": "content-block",
    "gallery": "image-gallery",
}

DEFAULT_CTA_TEXT = "Get Started"
DEFAULT_CTA_LINK = "#contact"
DEFAULT_ACTION_VARIANT = "default"
DEFAULT_RATING = 5
CONTACT_SUCCESS_MESSAGE = "Thank you for your message! We'll be in touch soon."

PRICE_RE = re.compile(r"\d[\d,]*")
PARAGRAPH_SPLIT_RE = re.compile(r"\n\s*\n")


@dataclass(frozen=True)
class TransformOptions:
    yearly_multiplier: int


def storage_type(tag: str) -> str:
    return STORAGE_TYPES.get(tag, tag)


def parse_price(price: str) -> int:
    """Integer amount from a display price: ``"$1,299/mo"`` -> 1299, ``"Free"`` -> 0."""
    match = PRICE_RE.search(price or "")
    if not match:
        return 0
    return int(match.group(0).replace(",", ""))


def _compact(content: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in content.items() if v is not None}


def _hero(component: HeroComponent, options: TransformOptions) -> dict[str, Any]:
    props = component.props
    return {
        "title": props.title,
        "subtitle": props.subtitle,
        "actions": [
            {
                "label": props.cta_text or DEFAULT_CTA_TEXT,
                "href": props.cta_link or DEFAULT_CTA_LINK,
                "variant": DEFAULT_ACTION_VARIANT,
            }
        ],
        "imageUrl": props.image,
        "imagePosition": "right" if props.alignment == "center" else "left",
        "backgroundStyle": "solid",
    }


def _features(component: FeaturesComponent, options: TransformOptions) -> dict[str, Any]:
    props = component.props
    return {
        "title": props.title,
        "features": [
            {"title": f.title, "description": f.description}
            for f in props.features
        ],
    }


def _pricing(component: PricingComponent, options: TransformOptions) -> dict[str, Any]:
    props = component.props
    plans = []
    for plan in props.plans:
        monthly = parse_price(plan.price)
        plans.append({
            "name": plan.name,
            "priceMonthly": monthly,
            "priceYearly": monthly * options.yearly_multiplier,
            "features": list(plan.features),
            "buttonText": plan.cta_text,
            "isPopular": plan.featured,
        })
    return _compact({
        "title": props.title,
        "subtitle": props.subtitle,
        "plans": plans,
    })


def _testimonials(component: TestimonialsComponent, options: TransformOptions) -> dict[str, Any]:
    props = component.props
    return {
        "title": props.title,
        "reviews": [
            {
                "name": t.author,
                "role": t.role,
                "avatarUrl": t.avatar,
                "content": t.quote,
                "rating": t.rating if t.rating is not None else DEFAULT_RATING,
            }
            for t in props.testimonials
        ],
    }


def _faq(component: FaqComponent, options: TransformOptions) -> dict[str, Any]:
    props = component.props
    return {
        "title": props.title,
        "items": [{"question": f.question, "answer": f.answer} for f in props.faqs],
    }


def _contact(component: ContactComponent, options: TransformOptions) -> dict[str, Any]:
    props = component.props
    return _compact({
        "title": props.title,
        "subtitle": props.subtitle,
        "successMessage": CONTACT_SUCCESS_MESSAGE,
    })


def _text(component: TextComponent, options: TransformOptions) -> dict[str, Any]:
    props = component.props
    parts = [f"<h2>{html.escape(props.heading)}</h2>"]
    for paragraph in PARAGRAPH_SPLIT_RE.split(props.text.strip()):
        if paragraph.strip():
            body = "<br>".join(html.escape(line.strip()) for line in paragraph.splitlines())
            parts.append(f"<p>{body}</p>")
    return {
        "content": "".join(parts),
        "className": f"text-{props.alignment}",
    }


def _gallery(component: GalleryComponent, options: TransformOptions) -> dict[str, Any]:
    props = component.props
    return _compact({
        "title": props.title,
        "images": [{"url": img.url, "alt": img.alt} for img in props.images],
        "columns": props.columns,
    })


def _passthrough(component: PassthroughComponent, options: TransformOptions) -> dict[str, Any]:
    return dict(component.props)


RESHAPERS: dict[type, Callable[[Any, TransformOptions], dict[str, Any]]] = {
    HeroComponent: _hero,
    FeaturesComponent: _features,
    PricingComponent: _pricing,
    TestimonialsComponent: _testimonials,
    FaqComponent: _faq,
    ContactComponent: _contact,
    TextComponent: _text,
    GalleryComponent: _gallery,
    PassthroughComponent: _passthrough,
}


def reshape(component: ComponentSpec, options: TransformOptions) -> dict[str, Any]:
    reshaper = RESHAPERS.get(type(component))
    if reshaper is None:
        return component.props.model_dump(by_alias=True, exclude_none=True)
    return reshaper(component, options)


def transform(
    components: list[ComponentSpec],
    *,
    yearly_multiplier: int | None = None,
    now_ms: int | None = None,
) -> list[TransformedBlock]:
    """Transform components into storage blocks with per-document unique ids."""
    options = TransformOptions(
        yearly_multiplier=(
            settings.PRICING_YEARLY_MULTIPLIER if yearly_multiplier is None else yearly_multiplier
        ),
    )
    stamp = int(time.time() * 1000) if now_ms is None else now_ms

    blocks = []
    for index, component in enumerate(components):
        block_type = storage_type(component.type)
        blocks.append(
            TransformedBlock(
                id=f"{block_type}-{stamp}-{index}",
                type=block_type,
                content=reshape(component, options),
            )
        )
        logger.debug(f"Component {index + 1}: {component.type} -> {block_type}")

    logger.info(f"Transformed {len(blocks)} components into blocks")
    return blocks
