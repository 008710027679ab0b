"""
API request/response schemas for the clustering server.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


# Request schemas


class EmailIn(BaseModel):
    """Raw fields of one email (first message of a thread)."""

    model_config = ConfigDict(populate_by_name=True)

    subject: str = ""
    body: str = ""
    to: str = ""
    cc: str = ""
    sender: str = Field(default="", alias="from", description="Raw From header")


class RunClusteringRequest(BaseModel):
    """Emails to cluster plus optional parameter overrides."""

    emails: list[EmailIn]
    cluster_count: Optional[int] = Field(default=None, description="Number of clusters k")
    email_count: Optional[int] = Field(default=None, description="Emails fetched by the caller (informational)")
    bm25k: Optional[float] = Field(default=None, description="BM25 TF saturation constant")
    total_rounds: Optional[int] = Field(default=None, description="Independent runs to choose the best from")
    max_iterations: Optional[int] = Field(default=None, description="Iteration cap after the first cycle")
    random_seed: Optional[int] = Field(default=None, description="Seed for reproducible clustering")


# Response schemas


class ClusteringResponse(BaseModel):
    """Cluster assignment for each submitted email."""

    assignments: list[int]
    quality_score: float
    labels: list[str]
    cluster_sizes: list[int]
    round_scores: list[float]


class RunStatusResponse(BaseModel):
    """Status of the most recent clustering run."""

    status: str  # 'idle', 'processing', 'done', 'failed'
    message: str = ""
    email_count: int = 0
