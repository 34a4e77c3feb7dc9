"""Enum registry: application code can do::

    from paddywatch.models import SeverityEnum, RangeKindEnum, ...
"""

from paddywatch.models.enums import (
    NetworkEnum,
    RangeKindEnum,
    SeverityEnum,
    StageCategoryEnum,
)

__all__ = [
    "NetworkEnum",
    "RangeKindEnum",
    "SeverityEnum",
    "StageCategoryEnum",
]
