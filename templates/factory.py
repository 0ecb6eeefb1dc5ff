"""
Template selection.

Maps a template identifier to the layout function that renders it. The
set of layouts is closed: anything that isn't a known identifier falls
back to the generic layout.
"""

from enum import Enum
from typing import Callable, Optional

import structlog

from templates.base import TemplateLayout
from templates.generic import apply_generic_template, apply_generic_template_multi
from templates.hpi import apply_hpi_template, apply_hpi_template_multi

logger = structlog.get_logger(__name__)

DEFAULT_TEMPLATE_TYPE = "generic"

TemplateFunction = Callable[..., TemplateLayout]


class TemplateKind(str, Enum):
    GENERIC = "generic"
    HPI = "hpi"


TEMPLATE_NAMES = {
    TemplateKind.GENERIC: "Generic Supplier Template",
    TemplateKind.HPI: "HPI Supplier Template",
}

_REGISTRY: dict[tuple[TemplateKind, bool], TemplateFunction] = {
    (TemplateKind.GENERIC, False): apply_generic_template,
    (TemplateKind.GENERIC, True): apply_generic_template_multi,
    (TemplateKind.HPI, False): apply_hpi_template,
    (TemplateKind.HPI, True): apply_hpi_template_multi,
}


def normalize_template_type(identifier: Optional[str]) -> Optional[str]:
    """' HPI ' -> 'hpi'; blank -> None"""
    if identifier is None:
        return None
    normalized = identifier.strip().lower()
    return normalized or None


def resolve_template_type(
    supplier_type: Optional[str],
    requested: Optional[str] = None,
    default: str = DEFAULT_TEMPLATE_TYPE,
) -> str:
    """
    Pick the template identifier for an export.

    The supplier's configured template wins over what the caller asked
    for; with neither, the default is used.
    """
    return (
        normalize_template_type(supplier_type)
        or normalize_template_type(requested)
        or normalize_template_type(default)
        or DEFAULT_TEMPLATE_TYPE
    )


def get_template_kind(identifier: Optional[str]) -> TemplateKind:
    normalized = normalize_template_type(identifier) or DEFAULT_TEMPLATE_TYPE
    try:
        return TemplateKind(normalized)
    except ValueError:
        logger.info("unknown_template_type_using_generic", template_type=normalized)
        return TemplateKind.GENERIC


def get_template_function(identifier: Optional[str], multi: bool = False) -> TemplateFunction:
    """Layout function for (identifier, single/multi)."""
    return _REGISTRY[(get_template_kind(identifier), multi)]


def get_template_name(identifier: Optional[str]) -> str:
    normalized = normalize_template_type(identifier) or DEFAULT_TEMPLATE_TYPE
    try:
        return TEMPLATE_NAMES[TemplateKind(normalized)]
    except ValueError:
        return f"{normalized} Template (Using Generic)"


def list_templates() -> list[TemplateKind]:
    return list(TemplateKind)
