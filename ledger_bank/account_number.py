"""
Account number generation.

An account number is the first three letters of the holder name, upper-cased,
followed by a random four digit suffix, e.g. ``ALI4821``. The generator does
not check uniqueness; the store's unique key does.
"""

import random
import string
import unicodedata
from typing import Optional

from .errors import InvalidInputError


PREFIX_LENGTH = 3
SUFFIX_MIN = 1000
SUFFIX_MAX = 9999


def account_prefix(holder_name: str) -> str:
    """
    Return the first three A-Z letters of a holder name, upper-cased.

    Accents are stripped and case mapping is applied before letters are
    picked, so "Émile" gives EMI and "ßen" gives SSE. Letters with no
    A-Z form are skipped.
    """
    folded = unicodedata.normalize("NFKD", (holder_name or "").strip()).upper()
    letters = [char for char in folded if char in string.ascii_uppercase]
    if len(letters) < PREFIX_LENGTH:
        raise InvalidInputError(
            f"Holder name must contain at least {PREFIX_LENGTH} letters: {holder_name!r}"
        )
    return "".join(letters[:PREFIX_LENGTH])


def generate_account_number(holder_name: str, rng: Optional[random.Random] = None) -> str:
    """
    Generate a candidate account number for a holder.

    Args:
        holder_name: The account holder's name
        rng: Random source, the module-level generator if omitted

    Returns:
        Prefix plus a suffix in the range 1000-9999

    Raises:
        InvalidInputError: If the name has fewer than three letters
    """
    prefix = account_prefix(holder_name)
    suffix = (rng or random).randint(SUFFIX_MIN, SUFFIX_MAX)
    return f"{prefix}{suffix}"
