"""Engine subpackage - pure pricing logic."""
from .errors import InconsistentTierRules, InvalidInput, MissingCatalogReference, PricingError
from .models import (
    AddOn,
    BreakdownLine,
    LineKind,
    MenuItem,
    OrderSpecification,
    PricingFacts,
    PricingMode,
    Quote,
    SectionRule,
)
from .pricing_engine import PricingEngine, compute_quote

__all__ = [
    'PricingEngine', 'compute_quote',
    'OrderSpecification', 'PricingFacts', 'PricingMode', 'MenuItem', 'AddOn', 'SectionRule',
    'Quote', 'BreakdownLine', 'LineKind',
    'PricingError', 'InvalidInput', 'MissingCatalogReference', 'InconsistentTierRules',
]
