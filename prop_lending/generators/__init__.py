"""Sample data generators."""

from prop_lending.generators.demo import demo_loans, demo_properties, seed_if_empty
from prop_lending.generators.lending import LoanGenerator, PropertyGenerator

__all__ = [
    "LoanGenerator",
    "PropertyGenerator",
    "demo_loans",
    "demo_properties",
    "seed_if_empty",
]
