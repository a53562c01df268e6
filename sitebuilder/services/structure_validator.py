"""
Structural validator: parses sanitized text into a typed ``SiteSpec``.

A document is accepted whole or not at all. Failures name the offending field
path (``components[2].props.plans[0].price``) so they can be diagnosed without
the raw response.
"""
import json
import logging
from typing import Any

from pydantic import ValidationError

from sitebuilder.core.exceptions import (
    DocumentValidationError,
    InvalidComponentsType,
    MissingComponents,
    MissingHero,
    ParseFailed,
)
from sitebuilder.core.retry import AttemptsExhausted, attempt
from sitebuilder.schemas.site_spec import (
    COMPONENT_VARIANTS,
    HERO_TAG,
    MAX_COMPONENTS,
    MIN_COMPONENTS,
    ComponentSpec,
    PassthroughComponent,
    SiteMetadata,
    SiteSpec,
)
from sitebuilder.services.sanitizer import escape_control_characters

logger = logging.getLogger(__name__)

# First parse plus one aggressive repair pass
PARSE_ATTEMPTS = 2

METADATA_FIELDS = ("name", "subdomain", "description", "industry", "primaryColor")


def format_field_path(loc: tuple[Any, ...] | list[Any], prefix: str = "") -> str:
    """Render a pydantic error location as ``a.b[0].c``."""
    path = prefix
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path = f"{path}.{part}" if path else str(part)
    return path or "$"


def _raise_field_error(exc: ValidationError, prefix: str = "") -> None:
    first = exc.errors()[0]
    field = format_field_path(first["loc"], prefix)
    raise DocumentValidationError(
        f"{field}: {first['msg']}",
        field=field,
        error_count=exc.error_count(),
    ) from exc


def _deepest_nesting(text: str) -> int:
    """Character index of the bracket that opens the deepest nesting level."""
    depth = deepest = position = 0
    in_string = escape_pending = False
    for i, ch in enumerate(text):
        if in_string:
            if escape_pending:
                escape_pending = False
            elif ch == "\\":
                escape_pending = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch in "[{":
            depth += 1
            if depth > deepest:
                deepest, position = depth, i
        elif ch in "]}":
            depth -= 1
    return position


def parse_document(text: str) -> Any:
    """Parse JSON text, retrying once with the aggressive repair pass."""

    def _parse(n: int) -> Any:
        if n == 0:
            return json.loads(text)
        logger.warning("JSON parse failed, retrying with aggressive control-character repair")
        return json.loads(escape_control_characters(text, aggressive=True))

    try:
        return attempt(_parse, PARSE_ATTEMPTS, retry_on=(json.JSONDecodeError,))
    except RecursionError as e:
        pos = _deepest_nesting(text)
        offset = len(text[:pos].encode("utf-8"))
        logger.error(f"JSON nesting too deep near byte {offset}")
        raise ParseFailed(
            f"JSON nesting too deep near byte {offset}. Try regenerating the site.",
            offset=offset,
        ) from e
    except AttemptsExhausted as e:
        err = e.first_error
        offset = len(text[:err.pos].encode("utf-8"))
        logger.error(f"JSON parsing failed at byte {offset}: {err.msg}")
        logger.debug(f"Context around error: {text[max(0, err.pos - 100):err.pos + 100]!r}")
        raise ParseFailed(
            f"JSON parsing error near byte {offset}: {err.msg}. Try regenerating the site.",
            offset=offset,
            line=err.lineno,
            column=err.colno,
        ) from err


def _components_of(document: dict[str, Any]) -> list[Any]:
    if "components" not in document or document["components"] is None:
        raise MissingComponents(field="components")
    components = document["components"]
    if not isinstance(components, list):
        raise InvalidComponentsType(
            f"'components' must be an array, got {type(components).__name__}",
            field="components",
        )
    if not components:
        raise MissingComponents("'components' must not be empty", field="components")
    return components


def _is_hero(component: Any) -> bool:
    return isinstance(component, dict) and component.get("type") == HERO_TAG


def validate_component(raw: Any, index: int) -> ComponentSpec:
    """Validate one ``{type, props}`` element against its variant."""
    prefix = f"components[{index}]"
    if not isinstance(raw, dict):
        raise DocumentValidationError(f"{prefix}: component must be an object", field=prefix)

    tag = raw.get("type")
    if not isinstance(tag, str) or not tag:
        raise DocumentValidationError(f"{prefix}.type: missing component type", field=f"{prefix}.type")

    props = raw.get("props")
    if props is None:
        props = {}
    if not isinstance(props, dict):
        raise DocumentValidationError(f"{prefix}.props: props must be an object", field=f"{prefix}.props")

    variant = COMPONENT_VARIANTS.get(tag)
    if variant is None:
        logger.info(f"Keeping unrecognized component type '{tag}' at {prefix} as passthrough")
        return PassthroughComponent(type=tag, props=props)

    component_cls, _ = variant
    try:
        return component_cls.model_validate({"type": tag, "props": props})
    except ValidationError as e:
        _raise_field_error(e, prefix)


def validate(text: str) -> SiteSpec:
    """Parse and validate sanitized text into a ``SiteSpec``."""
    document = parse_document(text)

    if not isinstance(document, dict):
        raise DocumentValidationError("The document must be a JSON object", field="$")

    components = _components_of(document)
    logger.info(f"Components array found: {len(components)} items")

    if not _is_hero(components[0]):
        first = components[0].get("type") if isinstance(components[0], dict) else None
        raise MissingHero(
            f"The first component must be a hero section, got {first!r}",
            field="components[0].type",
        )

    if not MIN_COMPONENTS <= len(components) <= MAX_COMPONENTS:
        raise DocumentValidationError(
            f"components: expected {MIN_COMPONENTS}-{MAX_COMPONENTS} items, got {len(components)}",
            field="components",
        )

    try:
        metadata = SiteMetadata.model_validate(
            {key: document[key] for key in METADATA_FIELDS if key in document}
        )
    except ValidationError as e:
        _raise_field_error(e)

    parsed = [validate_component(raw, i) for i, raw in enumerate(components)]

    spec = SiteSpec.model_validate(
        {**metadata.model_dump(by_alias=True), "components": parsed}
    )
    logger.info(f"Validated site '{spec.name}' ({spec.subdomain}) with {len(spec.components)} components")
    return spec
