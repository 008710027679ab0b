"""
Data models for the email clustering pipeline.

- EmailFields: raw text of one email (first message of a thread)
- FieldVectors: per-field term-frequency vectors for one email
- ClusteringResult: assignments and quality score of a clustering run
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

# term -> weight; absent terms are zero
SparseVector = dict[str, float]

DEFAULT_LABEL_PREFIX = "ClusterBox"


@dataclass(frozen=True)
class EmailFields:
    """
    Raw text fields of one email.

    Attributes:
        subject: Subject line
        body: Plain-text body
        to: Raw To header (comma separated addresses with display names)
        cc: Raw Cc header
        sender: Raw From header
    """

    subject: str = ""
    body: str = ""
    to: str = ""
    cc: str = ""
    sender: str = ""

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> EmailFields:
        """
        Create EmailFields from a mapping, accepting either "from" or "sender".

        Missing fields and None values become empty strings.
        """
        sender = data.get("from")
        if sender is None:
            sender = data.get("sender")
        return cls(
            subject=data.get("subject") or "",
            body=data.get("body") or "",
            to=data.get("to") or "",
            cc=data.get("cc") or "",
            sender=sender or "",
        )


@dataclass(frozen=True)
class FieldVectors:
    """Term-frequency vector of each email field, built from that field's text only."""

    subject: SparseVector
    body: SparseVector
    to: SparseVector
    cc: SparseVector
    sender: SparseVector

    def as_dict(self) -> dict[str, SparseVector]:
        return {
            "body": self.body,
            "subject": self.subject,
            "to": self.to,
            "cc": self.cc,
            "sender": self.sender,
        }


def cluster_label_names(k: int, prefix: str = DEFAULT_LABEL_PREFIX) -> list[str]:
    """Label names for k clusters: ["ClusterBox/Cluster-1", ..., "ClusterBox/Cluster-k"]."""
    return [f"{prefix}/Cluster-{i}" for i in range(1, k + 1)]


@dataclass(frozen=True)
class ClusteringResult:
    """
    Outcome of a clustering run.

    Attributes:
        assignments: Cluster index (0..k-1) per document, parallel to the input
        sum_of_distance: Sum of each document's distance to its centroid (lower is tighter)
        cluster_count: k
        iterations: Assign/update cycles performed by the selected run
        round_index: Which of the best-of-N rounds produced this result
        round_scores: Sum-of-distance of every round, in round order
    """

    assignments: tuple[int, ...]
    sum_of_distance: float
    cluster_count: int
    iterations: int = 0
    round_index: int = 0
    round_scores: tuple[float, ...] = field(default_factory=tuple)

    @property
    def quality_score(self) -> float:
        return self.sum_of_distance

    def cluster_sizes(self) -> list[int]:
        sizes = [0] * self.cluster_count
        for cluster in self.assignments:
            sizes[cluster] += 1
        return sizes

    def members(self, cluster: int) -> list[int]:
        """Indexes of the documents assigned to a cluster."""
        return [i for i, c in enumerate(self.assignments) if c == cluster]

    def labels(self, prefix: str = DEFAULT_LABEL_PREFIX) -> list[str]:
        """Label name for each document, parallel to assignments."""
        names = cluster_label_names(self.cluster_count, prefix)
        return [names[c] for c in self.assignments]
