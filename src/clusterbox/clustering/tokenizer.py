"""
Tokenization of email text into terms.

Both tokenizers lowercase, collapse runs of delimiter characters into a single
space and split on spaces. Leading or trailing delimiters leave an empty-string
term; downstream counting treats it like any other term.
"""

import re

# Whitespace, list separators, brackets, quotes and punctuation
_TEXT_DELIMITERS = re.compile(r"[\r\n\s,'|<>{}%!*$()/\"“”:#;?\[\].+@–\-_=&]+")

# Header addresses keep . + @ - _ = & so address structure partially survives
_ADDRESS_DELIMITERS = re.compile(r"[\r\n\s,|<>{}%!*$()/\":#;?\[\]]+")


def tokenize(text: str) -> list[str]:
    """Split subject or body text into terms."""
    return _TEXT_DELIMITERS.sub(" ", text.lower()).split(" ")


def tokenize_address(text: str) -> list[str]:
    """Split a From/To/Cc header into terms."""
    return _ADDRESS_DELIMITERS.sub(" ", text.lower()).split(" ")
