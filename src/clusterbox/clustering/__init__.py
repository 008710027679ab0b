"""
Email Clustering Module

Groups emails into k clusters of similar content using weighted term vectors
and K-Means++ with an inverse dot-product distance.

Components:
- tokenizer: text and address-header tokenization
- vector_builder: per-field frequency vectors and weighted field combination
- weighting: BM25 TF transform and IDF weighting over the corpus
- vector_algebra: sparse vector add/scale/divide and distance
- seeding: K-Means++ initial centroid selection
- kmeans: single assign/update/converge run
- cluster_engine: full pipeline with best-of-N selection
- models: data structures
"""

__all__ = [
    "tokenizer",
    "vector_builder",
    "weighting",
    "vector_algebra",
    "seeding",
    "kmeans",
    "cluster_engine",
    "models",
]
