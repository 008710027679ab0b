"""
Corpus-wide term weighting.

Combined email vectors are reweighted in two passes that both need the whole
corpus up front:

1. BM25 TF transform per document::

           (k + 1) * x
       y = -----------
              x + k

2. IDF per term, from document frequency over the raw combined vectors::

       idf(w) = log2((M + 1) / df(w))

   where M is the number of documents and df(w) counts documents containing w.
"""

import logging
import math
from collections import Counter
from typing import Sequence

from clusterbox.clustering.models import SparseVector

logger = logging.getLogger(__name__)


def bm25_transform(v: SparseVector, k: float) -> SparseVector:
    """Saturate raw term counts so heavily repeated terms gain less weight."""
    return {term: ((k + 1) * x) / (x + k) for term, x in v.items()}


def document_frequencies(corpus: Sequence[SparseVector]) -> dict[str, int]:
    """Number of documents each term appears in (once per document, not per occurrence)."""
    df: Counter[str] = Counter()
    for v in corpus:
        df.update(v.keys())
    return dict(df)


def idf_weights(doc_freq: dict[str, int], num_documents: int) -> dict[str, float]:
    return {term: math.log2((num_documents + 1) / count) for term, count in doc_freq.items()}


def apply_idf(v: SparseVector, idf: dict[str, float]) -> SparseVector:
    return {term: weight * idf[term] for term, weight in v.items()}


def weight_corpus(corpus: Sequence[SparseVector], bm25k: float) -> list[SparseVector]:
    """
    Apply BM25 TF and IDF weighting to every vector in the corpus.

    Args:
        corpus: Combined (un-weighted) vectors of all documents
        bm25k: BM25 saturation constant

    Returns:
        New weighted vectors, parallel to the input
    """
    idf = idf_weights(document_frequencies(corpus), len(corpus))
    weighted = [apply_idf(bm25_transform(v, bm25k), idf) for v in corpus]

    logger.info(f"Weighted {len(weighted)} documents over a vocabulary of {len(idf)} terms (bm25k={bm25k})")

    return weighted
