"""Shortcode generation utility

This module provides a helper function for generating random, fixed-length
shortcodes over the Base62 alphabet.

Functions:
    generate_shortcode(length=8):
        Generate a random shortcode suitable for use as a URL slug.

Example:
    >>> from shortlinks.utils import generate_shortcode
    >>> generate_shortcode()
    'q3ZbT0xa'
"""

import secrets

from shortlinks.constants import ALPHABET, Defaults
from shortlinks.exceptions import RandomSourceError


def generate_shortcode(length: int = Defaults.SHORTCODE_LENGTH) -> str:
    """Generate a random Base62 shortcode.

    Every character is drawn independently and uniformly from [a-zA-Z0-9]
    using the OS CSPRNG (`secrets`). Shortcodes double as access tokens, so
    a predictable pseudo-random source must not be used here.

    Args:
        length (int, optional):
            Number of characters in the shortcode. Defaults to 8.

    Returns:
        str: A random alphanumeric shortcode.

    Raises:
        TypeError: If length is not an integer.
        ValueError: If length is smaller than 1.
        RandomSourceError: If the OS entropy source is unavailable.

    NOTE:
        - No uniqueness guarantee: callers must check the store.
        - With the default length there are 62^8 (~2.18e14) possible codes.
    """
    if not isinstance(length, int) or isinstance(length, bool):
        raise TypeError(f'Length must be of type integer (given type: {type(length)}).')
    if length < 1:
        raise ValueError(f'Length must be a positive integer (given value: {length}).')

    try:
        return ''.join(secrets.choice(ALPHABET) for _ in range(length))
    except (OSError, NotImplementedError) as e:
        raise RandomSourceError('Secure random source is unavailable.') from e
