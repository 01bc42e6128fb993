"""Content schema, registries, and loading for enablement manuals.

Only the data model is re-exported here; import
:mod:`manual_pages.content.loader` and :mod:`manual_pages.content.lint`
directly.
"""

from .errors import (
    ContentError,
    ContentLoadError,
    ContentValidationError,
    DiagramSyntaxError,
    DuplicateSectionError,
    UnknownEnforcementLevelError,
    UnknownSectionError,
    UnknownVariantError,
)
from .models import (
    BusinessRule,
    CalloutBlock,
    EnforcementLevel,
    FieldDefinition,
    RelatedTopic,
    Section,
    WorkflowStep,
)
from .registry import Manual, NavigationRegistry, SectionRegistry
from .variants import DEFAULT_VARIANTS, CalloutVariant, VariantRegistry, VariantStyle

__all__ = [
    "DEFAULT_VARIANTS",
    "BusinessRule",
    "CalloutBlock",
    "CalloutVariant",
    "ContentError",
    "ContentLoadError",
    "ContentValidationError",
    "DiagramSyntaxError",
    "DuplicateSectionError",
    "EnforcementLevel",
    "FieldDefinition",
    "Manual",
    "NavigationRegistry",
    "RelatedTopic",
    "Section",
    "SectionRegistry",
    "UnknownEnforcementLevelError",
    "UnknownSectionError",
    "UnknownVariantError",
    "VariantRegistry",
    "VariantStyle",
    "WorkflowStep",
]
