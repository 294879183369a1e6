"""
Core Oxford BMI Logic

This module contains the calculation logic, data processing functions and
plotting functionality for the BMI calculator. It is the computational
engine behind the command-line script.

Sections:
- Core calculation logic (BMI, classification, ideal weight range)
- Profile configuration loading
- Reference table and plotting logic
- Report presentation and orchestration
"""

import json
import logging
import math
import os
import sys

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from jsonschema import validate

from console_input import read_positive_integer
from shared_models import (
    CATEGORY_UPPER_BOUNDS,
    FORMULA_FOOTNOTE,
    FORMULA_REFERENCE_URL,
    IDEAL_WEIGHT_MAX_BMI,
    IDEAL_WEIGHT_MIN_BMI,
    MAX_MEASUREMENT,
    MIN_MEASUREMENT,
    OXFORD_EXPONENT,
    OXFORD_SCALE,
    BMIReport,
    IdealWeightRange,
    WeightCategory,
)

logger = logging.getLogger(__name__)

HEIGHT_PROMPT = "Your height (centimeters): "
WEIGHT_PROMPT = "Your weight (kilograms): "

# Shading used for the category bands on the BMI chart
CATEGORY_COLORS = {
    WeightCategory.SEVERE_THINNESS: "#9ecae1",
    WeightCategory.INSUFFICIENT_WEIGHT: "#c6dbef",
    WeightCategory.SLIGHT_UNDERWEIGHT: "#deebf7",
    WeightCategory.IDEAL_WEIGHT: "lightgreen",
    WeightCategory.OVERWEIGHT: "lightyellow",
    WeightCategory.OBESITY_TYPE_I: "#fdd0a2",
    WeightCategory.OBESITY_TYPE_II: "#fdae6b",
    WeightCategory.OBESITY_TYPE_III: "#fc9272",
    WeightCategory.OBESITY_TYPE_IV: "#de2d26",
}

# JSON Schema for profile configuration validation
PROFILE_SCHEMA = {
    "type": "object",
    "properties": {
        "height_cm": {
            "type": "integer",
            "minimum": MIN_MEASUREMENT,
            "maximum": MAX_MEASUREMENT,
        },
        "weight_kg": {
            "type": "integer",
            "minimum": MIN_MEASUREMENT,
            "maximum": MAX_MEASUREMENT,
        },
    },
    "additionalProperties": False,
}


class InvalidHeightError(ValueError):
    """Raised when a height cannot be used in the Oxford formula"""

    pass


# ---------------------------------------------------------------------------
# CORE CALCULATION LOGIC
# ---------------------------------------------------------------------------


def _height_factor(height_cm):
    """Returns (height in meters) ** 2.5, rejecting non-positive heights."""
    if height_cm <= 0:
        raise InvalidHeightError(f"Height must be greater than 0 cm, got {height_cm}")
    return np.power(height_cm / 100.0, OXFORD_EXPONENT)


def compute_bmi(height_cm, weight_kg):
    """
    Calculates the Oxford 2013 Body Mass Index.

    BMI = 1.3 * weight / height_m ** 2.5, with height converted from
    centimeters to meters.

    Args:
        height_cm (int): Height in centimeters, must be > 0
        weight_kg (int): Weight in kilograms, must be >= 0

    Returns:
        float: The BMI value

    Raises:
        InvalidHeightError: If height_cm <= 0
        ValueError: If weight_kg < 0
    """
    bmi = float(compute_bmi_curve(height_cm, weight_kg))
    logger.debug(f"BMI for {height_cm} cm / {weight_kg} kg: {bmi:.4f}")
    return bmi


def compute_bmi_curve(height_cm, weights_kg):
    """
    Vectorized BMI over an array of weights at a fixed height.

    Args:
        height_cm (int): Height in centimeters, must be > 0
        weights_kg (array-like): Weights in kilograms, all >= 0

    Returns:
        np.ndarray: BMI value for each weight

    Raises:
        InvalidHeightError: If height_cm <= 0
        ValueError: If any weight is negative
    """
    weights = np.asarray(weights_kg, dtype=float)
    if np.any(weights < 0):
        raise ValueError(f"Weight must not be negative, got {weights_kg}")
    return OXFORD_SCALE * weights / _height_factor(height_cm)


def classify_bmi(bmi):
    """
    Maps a BMI value to its weight status category.

    Ranges are checked top-down with an exclusive upper bound, except
    Obesity type III whose upper bound (45.0) is inclusive.

    Args:
        bmi (float): The BMI value

    Returns:
        WeightCategory: The matching category

    Raises:
        ValueError: If bmi is NaN
    """
    if math.isnan(bmi):
        raise ValueError("Cannot classify a NaN BMI")

    for category, upper_bound, inclusive in CATEGORY_UPPER_BOUNDS:
        if bmi < upper_bound or (inclusive and bmi == upper_bound):
            return category
    return WeightCategory.OBESITY_TYPE_IV


def calculate_weight_for_bmi(height_cm, target_bmi):
    """
    Inverts the Oxford formula: the weight (kg) giving target_bmi at height_cm.

    Args:
        height_cm (int): Height in centimeters, must be > 0
        target_bmi (float): The BMI to solve for

    Returns:
        float: Weight in kilograms
    """
    return float(target_bmi * _height_factor(height_cm) / OXFORD_SCALE)


def calculate_ideal_weight_range(height_cm):
    """
    Calculates the ideal weight range for a height.

    The bounds are the weights giving a BMI of IDEAL_WEIGHT_MIN_BMI (18.5)
    and IDEAL_WEIGHT_MAX_BMI (24.9).

    Args:
        height_cm (int): Height in centimeters, must be > 0

    Returns:
        IdealWeightRange: (min_weight_kg, max_weight_kg)

    Raises:
        InvalidHeightError: If height_cm <= 0
    """
    return IdealWeightRange(
        min_weight_kg=calculate_weight_for_bmi(height_cm, IDEAL_WEIGHT_MIN_BMI),
        max_weight_kg=calculate_weight_for_bmi(height_cm, IDEAL_WEIGHT_MAX_BMI),
    )


# ---------------------------------------------------------------------------
# PROFILE CONFIGURATION
# ---------------------------------------------------------------------------


def load_profile_json(config_path):
    """
    Loads and validates a JSON profile with optional height and weight.

    Args:
        config_path (str): Path to the JSON profile file.

    Returns:
        dict: Profile with any of the keys "height_cm" and "weight_kg".

    Raises:
        FileNotFoundError: If the profile file doesn't exist.
        json.JSONDecodeError: If the JSON is malformed.
        ValidationError: If the JSON doesn't match PROFILE_SCHEMA.
    """
    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Profile file not found: {config_path}")

    with open(config_path, "r") as f:
        profile = json.load(f)

    validate(profile, PROFILE_SCHEMA)

    logger.info(f"Loaded profile from {config_path} with keys: {sorted(profile)}")
    return profile


# ---------------------------------------------------------------------------
# REFERENCE TABLE AND PLOTTING LOGIC
# ---------------------------------------------------------------------------


def create_category_table(height_cm=None):
    """
    Builds a reference table of the nine weight status categories.

    The first band is open below (BMI From is -inf), matching classify_bmi.
    Weights cannot be negative, so the weight columns are floored at 0.

    Args:
        height_cm (int): Optional height; when given, the weight band (kg)
            of each category at that height is included.

    Returns:
        pd.DataFrame: One row per category, lowest BMI first
    """
    rows = []
    lower_bound = -np.inf
    bounds = CATEGORY_UPPER_BOUNDS + [(WeightCategory.OBESITY_TYPE_IV, np.inf, False)]
    for category, upper_bound, inclusive in bounds:
        row = {
            "Category": category.value,
            "BMI From": lower_bound,
            "BMI To": upper_bound,
            "To Inclusive": inclusive,
        }
        if height_cm is not None:
            row["Weight From (kg)"] = max(
                0.0, calculate_weight_for_bmi(height_cm, lower_bound)
            )
            row["Weight To (kg)"] = calculate_weight_for_bmi(height_cm, upper_bound)
        rows.append(row)
        lower_bound = upper_bound

    return pd.DataFrame(rows)


def create_bmi_plot(report, return_figure=False, filename="bmi_plot.png"):
    """
    Plots BMI against weight at the report's height, with category bands.

    Args:
        report (BMIReport): The computed report to highlight
        return_figure (bool): If True, returns the figure instead of saving
        filename (str): Output path used when saving

    Returns:
        matplotlib.figure.Figure or None: Figure object if return_figure=True, None otherwise
    """
    fig, ax = plt.subplots(figsize=(12, 8))

    max_weight = max(report.weight_kg, report.ideal_weight.max_weight_kg) * 1.5
    weights = np.linspace(0, max_weight, 200)
    bmis = compute_bmi_curve(report.height_cm, weights)
    y_max = max(50.0, report.bmi + 5)

    # Background shading for the category bands
    table = create_category_table()
    for _, band in table.iterrows():
        category = WeightCategory(band["Category"])
        ax.axhspan(
            max(band["BMI From"], 0.0),
            min(band["BMI To"], y_max),
            color=CATEGORY_COLORS[category],
            alpha=0.3,
            label=category.value,
        )

    ax.axvspan(
        report.ideal_weight.min_weight_kg,
        report.ideal_weight.max_weight_kg,
        color="green",
        alpha=0.1,
        hatch="//",
        label="Your Ideal Weight",
    )

    ax.plot(weights, bmis, color="black", linewidth=2, label=f"BMI at {report.height_cm} cm")
    ax.plot(
        report.weight_kg,
        report.bmi,
        color="red",
        marker="o",
        markersize=10,
        label="You",
        zorder=10,
    )
    ax.annotate(
        f"{report.bmi:.2f}",
        (report.weight_kg, report.bmi),
        textcoords="offset points",
        xytext=(0, 10),
        ha="center",
        fontsize=10,
        fontweight="bold",
        color="darkred",
    )

    ax.set_xlabel("Weight (kg)", fontsize=12)
    ax.set_ylabel("BMI (Oxford 2013)", fontsize=12)
    ax.set_title("Body Mass Index by Weight", fontsize=14, fontweight="bold")
    ax.set_xlim(0, max_weight)
    ax.set_ylim(0, y_max)
    ax.legend(bbox_to_anchor=(1.05, 1), loc="upper left")
    ax.grid(True, alpha=0.3)

    plt.tight_layout()

    if return_figure:
        return fig

    plt.savefig(filename, dpi=300, bbox_inches="tight")
    plt.close(fig)
    print(f"BMI plot saved as: {filename}")
    return None


# ---------------------------------------------------------------------------
# REPORT PRESENTATION
# ---------------------------------------------------------------------------


def build_report(height_cm, weight_kg):
    """Computes BMI, category and ideal weight range for one person."""
    bmi = compute_bmi(height_cm, weight_kg)
    return BMIReport(
        height_cm=height_cm,
        weight_kg=weight_kg,
        bmi=bmi,
        category=classify_bmi(bmi),
        ideal_weight=calculate_ideal_weight_range(height_cm),
    )


def format_report(report):
    """
    Formats a report as the lines printed to the console.

    Args:
        report (BMIReport): The computed report

    Returns:
        list: Output lines, without trailing newlines
    """
    min_weight, max_weight = report.ideal_weight
    return [
        "",
        f"Your Body Mass Index (BMI) is {report.bmi:.2f}(*)",
        f"You have {report.category_label}",
        f"Your ideal weight is between {min_weight:.2f} and {max_weight:.2f} kg.",
        "",
        FORMULA_FOOTNOTE,
        FORMULA_REFERENCE_URL,
    ]


def clear_screen(output_stream=None):
    """Clears the terminal, only when writing to an interactive console."""
    output_stream = output_stream if output_stream is not None else sys.stdout
    if not output_stream.isatty():
        return
    os.system("cls" if os.name == "nt" else "clear")


def run_report(
    height_cm=None,
    weight_kg=None,
    clear=True,
    input_stream=None,
    output_stream=None,
):
    """
    Main workflow: gathers the measurements, computes and prints the report.

    Any measurement not supplied is prompted for interactively.

    Args:
        height_cm (int): Height in centimeters, or None to prompt
        weight_kg (int): Weight in kilograms, or None to prompt
        clear (bool): Clear the terminal before prompting
        input_stream: Readable text stream (default: sys.stdin)
        output_stream: Writable text stream (default: sys.stdout)

    Returns:
        BMIReport: The computed report

    Raises:
        InputExhaustedError: If input ends before both values are read
    """
    output_stream = output_stream if output_stream is not None else sys.stdout

    if clear:
        clear_screen(output_stream)

    if height_cm is None:
        height_cm = read_positive_integer(HEIGHT_PROMPT, input_stream, output_stream)
    if weight_kg is None:
        weight_kg = read_positive_integer(WEIGHT_PROMPT, input_stream, output_stream)

    report = build_report(height_cm, weight_kg)
    logger.info(
        f"Report for {height_cm} cm / {weight_kg} kg: "
        f"BMI {report.bmi:.2f}, {report.category_label}"
    )

    for line in format_report(report):
        output_stream.write(line + "\n")
    output_stream.flush()

    return report
