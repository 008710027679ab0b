"""
Clustering configuration.

Tunable parameters for the vectorization and K-Means++ pipeline. The stop-word
list and per-field weights live here as plain injectable values so tests and
callers can swap them without touching module globals.

Environment variables (all optional, read by ``ClusteringConfig.from_env``):
- CLUSTERBOX_CLUSTER_COUNT: number of clusters k (default 5)
- CLUSTERBOX_EMAIL_COUNT: number of emails the caller fetched (informational)
- CLUSTERBOX_BM25K: BM25 term-frequency saturation constant (default 20)
- CLUSTERBOX_TOTAL_ROUNDS: independent K-Means runs to pick from (default 3)
- CLUSTERBOX_MAX_ITERATIONS: iteration cap after the first cycle (default 5)
- CLUSTERBOX_RANDOM_SEED: seed for reproducible clustering
- CLUSTERBOX_PARALLEL_ROUNDS: run the rounds on a thread pool (default false)
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass, field, replace
from typing import Mapping, Optional

from dotenv import load_dotenv

from clusterbox.common.stopwords import DEFAULT_STOP_WORDS

ENV_PREFIX = "CLUSTERBOX_"


class ConfigurationError(ValueError):
    """Raised when clustering parameters or the corpus cannot produce a valid run."""


@dataclass(frozen=True)
class FieldWeights:
    """Multipliers applied to each email field before the fields are summed."""

    body: float = 1.0
    subject: float = 1.8
    to: float = 1.4
    cc: float = 1.1
    sender: float = 2.0

    def as_dict(self) -> dict[str, float]:
        return {
            "body": self.body,
            "subject": self.subject,
            "to": self.to,
            "cc": self.cc,
            "sender": self.sender,
        }


@dataclass(frozen=True)
class ClusteringConfig:
    """
    Parameters for one clustering invocation.

    Attributes:
        cluster_count: Number of clusters k (must be >= 2)
        email_count: How many emails the caller asked for; not used by the core
        bm25k: k parameter of the BM25 TF transform
        total_rounds: Independent K-Means runs; the lowest sum-of-distance wins
        max_iterations: Assign/update cycles allowed after the first one
        convergence_threshold: Mean centroid shift below which a run stops
        seeding_exponent: Power applied to seeding distances (1.0 = linear)
        parallel_rounds: Run the rounds on a thread pool
        max_workers: Thread pool size when parallel_rounds is set
        random_seed: Seed for the engine's random source, None for entropy
        stop_words: Terms removed before counting
        field_weights: Per-field multipliers for the combined vector
    """

    cluster_count: int = 5
    email_count: Optional[int] = None
    bm25k: float = 20.0
    total_rounds: int = 3
    max_iterations: int = 5
    convergence_threshold: float = 0.01
    seeding_exponent: float = 1.0
    parallel_rounds: bool = False
    max_workers: int = 4
    random_seed: Optional[int] = None
    stop_words: frozenset[str] = DEFAULT_STOP_WORDS
    field_weights: FieldWeights = field(default_factory=FieldWeights)

    def validate(self, corpus_size: Optional[int] = None) -> None:
        """
        Reject parameters that cannot produce a meaningful clustering.

        Args:
            corpus_size: Number of documents to be clustered, if known

        Raises:
            ConfigurationError: On the first invalid parameter found
        """
        if self.cluster_count < 2:
            raise ConfigurationError(f"cluster_count must be at least 2, got {self.cluster_count}")
        if not (math.isfinite(self.bm25k) and self.bm25k > 0):
            raise ConfigurationError(f"bm25k must be a positive finite number, got {self.bm25k}")
        if self.total_rounds < 1:
            raise ConfigurationError(f"total_rounds must be at least 1, got {self.total_rounds}")
        if self.max_iterations < 1:
            raise ConfigurationError(f"max_iterations must be at least 1, got {self.max_iterations}")
        if not (math.isfinite(self.convergence_threshold) and self.convergence_threshold >= 0):
            raise ConfigurationError(
                f"convergence_threshold must be a non-negative finite number, got {self.convergence_threshold}"
            )
        if not (math.isfinite(self.seeding_exponent) and self.seeding_exponent > 0):
            raise ConfigurationError(
                f"seeding_exponent must be a positive finite number, got {self.seeding_exponent}"
            )
        if self.max_workers < 1:
            raise ConfigurationError(f"max_workers must be at least 1, got {self.max_workers}")
        for name, weight in self.field_weights.as_dict().items():
            if not (math.isfinite(weight) and weight >= 0):
                raise ConfigurationError(
                    f"Field weight for '{name}' must be a non-negative finite number, got {weight}"
                )

        if corpus_size is None:
            return
        if corpus_size < 2:
            raise ConfigurationError(f"Need at least 2 documents to cluster, got {corpus_size}")
        if self.cluster_count > corpus_size:
            raise ConfigurationError(
                f"cluster_count ({self.cluster_count}) exceeds the number of documents ({corpus_size})"
            )

    def with_overrides(self, **overrides) -> ClusteringConfig:
        """Return a copy with the given fields replaced; None values are ignored."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> ClusteringConfig:
        """
        Build a config from CLUSTERBOX_* environment variables.

        Args:
            env: Mapping to read instead of os.environ (a .env file is loaded first
                 only when reading the real environment)

        Raises:
            ConfigurationError: If a variable is set but cannot be parsed
        """
        if env is None:
            load_dotenv()
            env = os.environ

        overrides = {
            "cluster_count": _parse(env, "CLUSTER_COUNT", int),
            "email_count": _parse(env, "EMAIL_COUNT", int),
            "bm25k": _parse(env, "BM25K", float),
            "total_rounds": _parse(env, "TOTAL_ROUNDS", int),
            "max_iterations": _parse(env, "MAX_ITERATIONS", int),
            "random_seed": _parse(env, "RANDOM_SEED", int),
            "parallel_rounds": _parse(env, "PARALLEL_ROUNDS", _parse_bool),
        }
        return cls().with_overrides(**overrides)


def _parse_bool(raw: str) -> bool:
    value = raw.strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"not a boolean: {raw!r}")


def _parse(env: Mapping[str, str], name: str, parser):
    raw = env.get(ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return None
    try:
        return parser(raw.strip())
    except ValueError as e:
        raise ConfigurationError(f"Invalid value for {ENV_PREFIX}{name}: {raw!r} ({e})") from e
