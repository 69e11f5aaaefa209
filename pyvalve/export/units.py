"""
Parsing and formatting of numbers with SI unit prefixes.

SPICE reads "m" as milli and "Meg" as mega; micro is written "u" in
netlists and accepted as "u" or "µ" on input.
"""

from __future__ import annotations
import math
import re

from .. import config

# Dictionary of SI prefixes and their multipliers
SI_PREFIX_MULTIPLIERS = {
    'f': 1e-15,  # Femto
    'p': 1e-12,  # Pico
    'n': 1e-9,   # Nano
    'u': 1e-6,   # Micro
    'µ': 1e-6,   # Micro
    'm': 1e-3,   # Milli
    'k': 1e3,    # Kilo
    'K': 1e3,    # Kilo
    'M': 1e6,    # Mega
    'MEG': 1e6,  # Mega (SPICE variant)
    'G': 1e9,    # Giga
    'T': 1e12,   # Tera
}

# Exponent -> prefix used when formatting
FORMATTING_PREFIXES = {
    -15: 'f',
    -12: 'p',
    -9: 'n',
    -6: 'u',
    -3: 'm',
    0: '',
    3: 'k',
    6: 'M',
    9: 'G',
    12: 'T',
}
MIN_PREFIX = min(FORMATTING_PREFIXES)
MAX_PREFIX = max(FORMATTING_PREFIXES)

_NUMBER = re.compile(r'^([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)\s*([a-zA-Zµ]*)$')


def parse_si(s) -> float:
    """
    Parse a string with an optional SI prefix into a float.

    Examples: "10k" -> 10000.0, "25m" -> 0.025, ".47µ" -> 4.7e-7, "1Meg" -> 1e6
    Anything after the prefix (a unit such as "F" or "Ohm") is ignored.
    """
    if not isinstance(s, str):
        return float(s)

    match = _NUMBER.match(s.strip())
    if not match:
        raise ValueError(f"Invalid number format: {s}")

    num_str, unit_str = match.groups()
    value = float(num_str)
    if not unit_str:
        return value

    if unit_str.upper().startswith('MEG'):
        return value * SI_PREFIX_MULTIPLIERS['MEG']

    multiplier = SI_PREFIX_MULTIPLIERS.get(unit_str[0])
    if multiplier is None:
        return value
    return value * multiplier


def format_si(value, digits: int = config.SI_SIGNIFICANT_DIGITS) -> str:
    """
    Format a number with the largest power-of-1000 prefix that keeps the
    mantissa at or above 1, rounded to ``digits`` significant digits.

    Examples: 100000.0 -> "100k", 4.7e-7 -> "470n", 1500.0 -> "1.5k"
    """
    if value is None:
        return "0"
    value = float(value)

    # Rounding slack so 999.996 formats as "1k" rather than "1000"
    rounding = 1.0 + 5 * 10.0 ** -digits

    if value == 0 or not math.isfinite(value):
        order = 0.0
    else:
        order = math.log10(abs(value) * rounding)
        if order < -20:
            order = 0.0

    prefix = max(min(math.floor(order / 3) * 3, MAX_PREFIX), MIN_PREFIX)
    scaled = value / 10.0 ** prefix
    return f"{scaled:.{digits}g}{FORMATTING_PREFIXES[prefix]}".strip()
