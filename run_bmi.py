#!/usr/bin/env python3
"""
Oxford BMI Calculator - Main CLI Script

This is the main entry point for the BMI calculator. It asks for height and
weight (or takes them from flags or a JSON profile), then prints the Oxford
2013 BMI, the weight status category and the ideal weight range. The
calculation logic lives in the core module.
"""

import argparse
import json
import logging

from jsonschema import ValidationError

from console_input import InputExhaustedError
from core import create_bmi_plot, create_category_table, load_profile_json, run_report
from shared_models import MAX_MEASUREMENT, MIN_MEASUREMENT

logger = logging.getLogger(__name__)


def measurement(value):
    """argparse type for a whole-number height or weight."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid whole number: {value!r}")
    if not MIN_MEASUREMENT <= number <= MAX_MEASUREMENT:
        raise argparse.ArgumentTypeError(
            f"must be between {MIN_MEASUREMENT} and {MAX_MEASUREMENT}, got {number}"
        )
    return number


def build_parser():
    parser = argparse.ArgumentParser(
        description="Body Mass Index calculator (Oxford 2013 formula)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run_bmi.py                           # Prompt for height and weight
  python run_bmi.py --height 175 --weight 72  # Non-interactive
  python run_bmi.py --config profile.json     # Read values from a profile
  python run_bmi.py --show-categories --plot  # Also print the table and save a chart

JSON profile format (both keys optional, missing values are prompted for):
  {
    "height_cm": 175,
    "weight_kg": 72
  }
        """,
    )

    parser.add_argument(
        "--height",
        type=measurement,
        help="Height in centimeters (prompted for if omitted)",
    )

    parser.add_argument(
        "--weight",
        type=measurement,
        help="Weight in kilograms (prompted for if omitted)",
    )

    parser.add_argument(
        "--config",
        "-c",
        dest="config_file",
        help="Path to a JSON profile with height_cm and/or weight_kg",
    )

    parser.add_argument(
        "--no-clear",
        action="store_true",
        help="Do not clear the terminal before prompting",
    )

    parser.add_argument(
        "--show-categories",
        action="store_true",
        help="Print the category reference table for your height",
    )

    parser.add_argument(
        "--plot",
        action="store_true",
        help="Save a BMI chart as bmi_plot.png",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging on stderr",
    )

    return parser


def main(argv=None):
    """Main CLI function."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    height_cm = args.height
    weight_kg = args.weight

    if args.config_file:
        try:
            profile = load_profile_json(args.config_file)
        except FileNotFoundError as e:
            print(f"Error: {e}")
            return 1
        except json.JSONDecodeError as e:
            print(f"Error: Profile is not valid JSON: {e}")
            return 1
        except ValidationError as e:
            print(f"Error: Invalid profile: {e.message}")
            return 1

        if height_cm is None:
            height_cm = profile.get("height_cm")
        if weight_kg is None:
            weight_kg = profile.get("weight_kg")

    try:
        report = run_report(
            height_cm=height_cm,
            weight_kg=weight_kg,
            clear=not args.no_clear,
        )
    except InputExhaustedError as e:
        logger.debug(f"Input exhausted: {e}")
        print("\nError: No more input, exiting.")
        return 1
    except KeyboardInterrupt:
        print("\nError: Interrupted by user.")
        return 1

    if args.show_categories:
        print()
        print(f"--- Weight Status Categories at {report.height_cm} cm ---")
        table = create_category_table(report.height_cm)
        print(table.to_string(index=False, float_format=lambda x: f"{x:.2f}"))

    if args.plot:
        create_bmi_plot(report)

    return 0


if __name__ == "__main__":
    exit(main())
