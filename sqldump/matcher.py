"""
Table name matching against exact names and /regex/ patterns.
"""

import logging
import re
from functools import lru_cache

REGEX_DELIMITER = '/'

_FLAGS = {
    'i': re.IGNORECASE,
    'm': re.MULTILINE,
    's': re.DOTALL,
    'x': re.VERBOSE,
}


@lru_cache(maxsize=256)
def compile_pattern(pattern: str) -> re.Pattern:
    """
    Compile a delimited pattern such as ``/^tmp_/`` or ``/^LOG_/i``.

    The text between the first and the last delimiter is the expression,
    trailing letters are flags.
    """
    end = pattern.rfind(REGEX_DELIMITER)
    if end <= 0:
        return re.compile(re.escape(pattern[1:]))

    flags = 0
    for letter in pattern[end + 1:]:
        flags |= _FLAGS.get(letter, 0)
    return re.compile(pattern[1:end], flags)


def is_regex(pattern: str) -> bool:
    return pattern.startswith(REGEX_DELIMITER)


def matches(name: str, patterns: list[str]) -> bool:
    """
    Check if a name matches any entry of a pattern list.

    Entries starting with '/' are regular expressions searched in the name,
    every other entry must equal the name exactly.
    """
    regex_match = False
    for pattern in patterns:
        if is_regex(pattern) and compile_pattern(pattern).search(name):
            logging.debug(f"'{name}' matched by pattern '{pattern}'")
            regex_match = True

    return name in patterns or regex_match
