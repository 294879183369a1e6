"""
Validated Console Input

Interactive prompting for the whole-number measurements (height in
centimeters, weight in kilograms) the calculator needs. Parsing is kept
separate from the prompt loop so it can be validated without a console.
"""

import logging
import re
import sys

from shared_models import MAX_MEASUREMENT, MIN_MEASUREMENT

logger = logging.getLogger(__name__)

INVALID_INPUT_MESSAGE = "Oops, that input is invalid.  Please try again."

_LEADING_INTEGER = re.compile(r"\+?([0-9]+)")


class InputExhaustedError(EOFError):
    """Raised when the input stream closes before a valid value is read"""

    pass


def parse_measurement(text):
    """
    Parses the first token of a line of user input as a measurement.

    Only the leading run of digits of the token is used; anything after it
    is discarded, so "170cm" parses as 170.

    Args:
        text (str): A single line of user input

    Returns:
        tuple: (value, error_message) where value is None on failure
    """
    tokens = text.split()
    if not tokens:
        return None, "No value entered"

    match = _LEADING_INTEGER.match(tokens[0])
    if match is None:
        return None, "Please enter a whole number"

    digits = match.group(1).lstrip("0") or "0"
    if len(digits) > len(str(MAX_MEASUREMENT)):
        return None, f"Value must be at most {MAX_MEASUREMENT}"

    value = int(digits)
    if value < MIN_MEASUREMENT:
        return None, "Value must be greater than 0"
    if value > MAX_MEASUREMENT:
        return None, f"Value must be at most {MAX_MEASUREMENT}"
    return value, ""


def read_positive_integer(prompt, input_stream=None, output_stream=None):
    """
    Prompts until the user enters a valid measurement.

    Blank lines are skipped silently. Invalid lines print a retry message
    and re-prompt, with no limit on the number of attempts.

    Args:
        prompt (str): Text written before each read, without a newline
        input_stream: Readable text stream (default: sys.stdin)
        output_stream: Writable text stream (default: sys.stdout)

    Returns:
        int: The accepted value

    Raises:
        InputExhaustedError: If the input stream ends before a valid value
    """
    input_stream = input_stream if input_stream is not None else sys.stdin
    output_stream = output_stream if output_stream is not None else sys.stdout

    while True:
        output_stream.write(prompt)
        output_stream.flush()

        line = input_stream.readline()
        while line and not line.strip():
            line = input_stream.readline()

        if not line:
            raise InputExhaustedError(f"Input ended while waiting for: {prompt.strip()}")

        value, error_message = parse_measurement(line)
        if value is not None:
            return value

        logger.debug(f"Rejected input {line.rstrip()!r}: {error_message}")
        output_stream.write(INVALID_INPUT_MESSAGE + "\n")
