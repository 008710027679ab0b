"""
Main clustering engine that orchestrates the entire pipeline.

Pipeline steps:
1. Validate the configuration against the number of emails
2. Build per-field frequency vectors for each email
3. Combine the fields into one weighted vector per email
4. Apply BM25 TF and IDF weighting across the corpus
5. Run K-Means++ total_rounds times and keep the lowest sum-of-distance
"""

import logging
import random
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional, Sequence

from clusterbox.clustering.kmeans import KMeansRun, run_kmeans
from clusterbox.clustering.models import ClusteringResult, EmailFields, SparseVector
from clusterbox.clustering.vector_builder import combine_fields, field_vectors
from clusterbox.clustering.weighting import weight_corpus
from clusterbox.common.config import ClusteringConfig

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, float], None]


class ClusterEngine:
    """Turns a batch of emails into k clusters."""

    def __init__(self, config: Optional[ClusteringConfig] = None, rng: Optional[random.Random] = None):
        """
        Initialize the engine.

        Args:
            config: Clustering parameters (defaults to ClusteringConfig())
            rng: Random source; if omitted, one is created from config.random_seed
        """
        self.config = config or ClusteringConfig()
        self.config.validate()
        self._random = rng if rng is not None else random.Random(self.config.random_seed)

    def cluster(
        self, emails: Sequence[EmailFields], progress_callback: Optional[ProgressCallback] = None
    ) -> ClusteringResult:
        """
        Cluster emails by content.

        Args:
            emails: One record per email (typically the first message of a thread)
            progress_callback: Optional callback(step_name, progress_percent)

        Returns:
            ClusteringResult with one cluster index per email

        Raises:
            ConfigurationError: If the parameters or the number of emails are invalid
        """
        self.config.validate(corpus_size=len(emails))
        self._report_progress(progress_callback, "Initializing", 0.0)

        self._report_progress(progress_callback, "Building term vectors", 10.0)
        corpus = self.vectorize(emails)

        self._report_progress(progress_callback, "Running k-means++ clustering", 40.0)
        result = self.cluster_vectors(corpus)

        self._report_progress(progress_callback, "Completed", 100.0)
        logger.info(
            f"Clustered {len(emails)} emails into {self.config.cluster_count} clusters, "
            f"sizes {result.cluster_sizes()}, sum of distance {result.sum_of_distance:.4f}"
        )
        return result

    def vectorize(self, emails: Sequence[EmailFields]) -> list[SparseVector]:
        """Weighted term vector for each email, parallel to the input."""
        combined = [
            combine_fields(field_vectors(email, self.config.stop_words), self.config.field_weights)
            for email in emails
        ]
        return weight_corpus(combined, self.config.bm25k)

    def cluster_vectors(self, corpus: Sequence[SparseVector]) -> ClusteringResult:
        """
        Run K-Means total_rounds times on prepared vectors and keep the best run.

        Each round gets its own seed drawn from the engine's random source, so
        serial and parallel execution produce the same result.
        """
        self.config.validate(corpus_size=len(corpus))
        seeds = [self._random.getrandbits(64) for _ in range(self.config.total_rounds)]

        if self.config.parallel_rounds and len(seeds) > 1:
            workers = min(self.config.max_workers, len(seeds))
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="kmeans") as executor:
                runs = list(executor.map(lambda seed: self._run_round(corpus, seed), seeds))
        else:
            runs = [self._run_round(corpus, seed) for seed in seeds]

        best_index = 0
        for i, run in enumerate(runs):
            logger.info(f"Round {i}: sum of distance {run.sum_of_distance:.4f} after {run.iterations} cycles")
            if run.sum_of_distance < runs[best_index].sum_of_distance:
                best_index = i

        best = runs[best_index]
        logger.info(f"Selected round {best_index} with sum of distance {best.sum_of_distance:.4f}")

        return ClusteringResult(
            assignments=best.assignments,
            sum_of_distance=best.sum_of_distance,
            cluster_count=self.config.cluster_count,
            iterations=best.iterations,
            round_index=best_index,
            round_scores=tuple(run.sum_of_distance for run in runs),
        )

    def _run_round(self, corpus: Sequence[SparseVector], seed: int) -> KMeansRun:
        return run_kmeans(
            corpus,
            self.config.cluster_count,
            random.Random(seed),
            max_iterations=self.config.max_iterations,
            convergence_threshold=self.config.convergence_threshold,
            seeding_exponent=self.config.seeding_exponent,
        )

    def _report_progress(self, callback: Optional[ProgressCallback], step: str, percent: float) -> None:
        """Report progress to callback if provided."""
        if callback:
            callback(step, percent)
        logger.info(f"Progress: {step} ({percent:.1f}%)")


# Convenience functions


def cluster_emails(
    emails: Sequence[EmailFields],
    config: Optional[ClusteringConfig] = None,
    rng: Optional[random.Random] = None,
) -> ClusteringResult:
    """Cluster emails with the given (or default) parameters."""
    return ClusterEngine(config, rng).cluster(emails)
