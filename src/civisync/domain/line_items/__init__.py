"""Line item composition: fixed stage pipeline plus aggregation."""

from __future__ import annotations

from .compositor import SHIPPING_LABEL, LineItemCompositor, excluded_amount
from .context import SKIP, Composition, Skip, Stage, StageContext, StageResult
from .stages import (
    STANDARD_STAGES,
    base_mapping,
    membership_augmentation,
    participant_augmentation,
    standard_stages,
    tax_augmentation,
    variant_redirection,
)

__all__ = [
    "SHIPPING_LABEL",
    "SKIP",
    "STANDARD_STAGES",
    "Composition",
    "LineItemCompositor",
    "Skip",
    "Stage",
    "StageContext",
    "StageResult",
    "base_mapping",
    "excluded_amount",
    "membership_augmentation",
    "participant_augmentation",
    "standard_stages",
    "tax_augmentation",
    "variant_redirection",
]
