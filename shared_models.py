"""
Shared Data Models for the Oxford BMI Calculator

This module contains the shared dataclasses, enums and constants used by the
calculation engine, the console input layer and the command-line interface.

Unified data models provide:
- A single source of truth for the category labels and thresholds
- Consistent result structures between the calculator and the presenter
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple

# ============================================================================
# CONSTANTS
# ============================================================================

# Oxford 2013 formula: BMI = OXFORD_SCALE * weight / height_m ** OXFORD_EXPONENT
OXFORD_SCALE = 1.3
OXFORD_EXPONENT = 2.5

# Reference BMI values used to derive the ideal weight range.
# The upper value intentionally differs from the classifier's 25.0 boundary.
IDEAL_WEIGHT_MIN_BMI = 18.5
IDEAL_WEIGHT_MAX_BMI = 24.9

# Measurements are 16-bit unsigned values
MIN_MEASUREMENT = 1
MAX_MEASUREMENT = 65535

FORMULA_FOOTNOTE = "(*) BMI (Oxford 2013) = 1,3 x weight / height ^ 2,5"
FORMULA_REFERENCE_URL = "https://people.maths.ox.ac.uk/trefethen/bmi.html"


# ============================================================================
# ENUMS
# ============================================================================


class WeightCategory(Enum):
    """Weight status categories, ordered from lowest to highest BMI"""

    SEVERE_THINNESS = "Severe thinness (severe anorexia)"
    INSUFFICIENT_WEIGHT = "Insufficient weight (moderate anorexia)"
    SLIGHT_UNDERWEIGHT = "Slight underweight"
    IDEAL_WEIGHT = "Ideal weight (normal)"
    OVERWEIGHT = "Overweight"
    OBESITY_TYPE_I = "Obesity type I"
    OBESITY_TYPE_II = "Obesity type II"
    OBESITY_TYPE_III = "Obesity type III"
    OBESITY_TYPE_IV = "Hypermorbid Obesity type IV"


# Upper bound of each category, checked top-down. The flag marks an inclusive
# upper bound; only Obesity type III (<= 45.0) has one. The last category has
# no upper bound and catches everything above.
CATEGORY_UPPER_BOUNDS: List[Tuple[WeightCategory, float, bool]] = [
    (WeightCategory.SEVERE_THINNESS, 16.0, False),
    (WeightCategory.INSUFFICIENT_WEIGHT, 17.0, False),
    (WeightCategory.SLIGHT_UNDERWEIGHT, 18.5, False),
    (WeightCategory.IDEAL_WEIGHT, 25.0, False),
    (WeightCategory.OVERWEIGHT, 30.0, False),
    (WeightCategory.OBESITY_TYPE_I, 35.0, False),
    (WeightCategory.OBESITY_TYPE_II, 40.0, False),
    (WeightCategory.OBESITY_TYPE_III, 45.0, True),
]


# ============================================================================
# CORE DATA STRUCTURES
# ============================================================================


@dataclass(frozen=True)
class IdealWeightRange:
    """Weight band (kg) whose BMI lies between the ideal reference values"""

    min_weight_kg: float
    max_weight_kg: float

    def __iter__(self):
        """Allow tuple unpacking as (min, max)"""
        return iter((self.min_weight_kg, self.max_weight_kg))


@dataclass
class BMIReport:
    """Everything computed for a single height/weight pair"""

    height_cm: int
    weight_kg: int
    bmi: float
    category: WeightCategory
    ideal_weight: IdealWeightRange

    @property
    def category_label(self) -> str:
        return self.category.value
