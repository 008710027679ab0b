"""
Frequency vectors for emails.

Each field is tokenized on its own (subject/body as text, To/Cc/From as address
headers), stop words are dropped, and the remaining terms are counted. The
field vectors are then summed with per-field weights into one vector per email.
"""

from collections import Counter
from typing import Iterable, Optional

from clusterbox.clustering.models import EmailFields, FieldVectors, SparseVector
from clusterbox.clustering.tokenizer import tokenize, tokenize_address
from clusterbox.clustering.vector_algebra import add_vectors, scale_vector
from clusterbox.common.config import FieldWeights
from clusterbox.common.stopwords import DEFAULT_STOP_WORDS


def remove_stop_words(terms: Iterable[str], stop_words: frozenset[str] = DEFAULT_STOP_WORDS) -> list[str]:
    return [term for term in terms if term not in stop_words]


def frequency_vector(terms: Iterable[str], stop_words: frozenset[str] = DEFAULT_STOP_WORDS) -> SparseVector:
    """
    Count term occurrences after removing stop words.

    Empty-string terms produced by the tokenizer are counted as well.
    """
    counts = Counter(remove_stop_words(terms, stop_words))
    return {term: float(count) for term, count in counts.items()}


def field_vectors(email: EmailFields, stop_words: frozenset[str] = DEFAULT_STOP_WORDS) -> FieldVectors:
    """Build the five per-field frequency vectors of one email."""
    return FieldVectors(
        subject=frequency_vector(tokenize(email.subject), stop_words),
        body=frequency_vector(tokenize(email.body), stop_words),
        to=frequency_vector(tokenize_address(email.to), stop_words),
        cc=frequency_vector(tokenize_address(email.cc), stop_words),
        sender=frequency_vector(tokenize_address(email.sender), stop_words),
    )


def combine_fields(vectors: FieldVectors, weights: Optional[FieldWeights] = None) -> SparseVector:
    """
    Weighted element-wise sum of the field vectors.

    Fields weighted at zero are left out entirely so every term in the result
    carries a positive weight.
    """
    weights = weights or FieldWeights()
    weight_map = weights.as_dict()
    parts = [
        scale_vector(vector, weight_map[name])
        for name, vector in vectors.as_dict().items()
        if weight_map[name] > 0
    ]
    return add_vectors(*parts)
