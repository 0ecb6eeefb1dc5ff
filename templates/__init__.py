"""
Supplier export templates.
"""

from templates.base import TemplateLayout
from templates.factory import (
    TemplateKind,
    get_template_function,
    get_template_kind,
    get_template_name,
    list_templates,
    normalize_template_type,
    resolve_template_type,
)
from templates.generic import apply_generic_template, apply_generic_template_multi
from templates.hpi import apply_hpi_template, apply_hpi_template_multi

__all__ = [
    "TemplateLayout",
    "TemplateKind",
    "get_template_function",
    "get_template_kind",
    "get_template_name",
    "list_templates",
    "normalize_template_type",
    "resolve_template_type",
    "apply_generic_template",
    "apply_generic_template_multi",
    "apply_hpi_template",
    "apply_hpi_template_multi",
]
