"""Immutable orchestration engine configuration."""

from dataclasses import dataclass

# Attempt ceiling for one orchestration call
MAX_RETRIES = 3

# Minimum candidates requested per attempt, to absorb verification failures
MIN_BATCH = 5

# Extra sources (and extraction headroom) requested on top of `needed`
LOOKAHEAD_MARGIN = 5

# max_candidates default when a request leaves it unset
DEFAULT_CANDIDATE_MULTIPLIER = 3


@dataclass(frozen=True)
class EngineConfig:
    """Tuning knobs for OrchestrationEngine.

    Attributes:
        max_retries: Maximum loop iterations per orchestration call.
        min_batch: Floor on candidates requested per attempt.
        lookahead_margin: Extra sources requested beyond `needed`.
        dedupe_candidates: Drop candidates whose (source_url, excerpt) was
            already seen in this run. Off by default: duplicates across
            attempts are kept and may be over-counted.
        fail_on_total_outage: Raise CollaboratorUnavailableError when every
            attempt failed at the collaborator level.
    """

    max_retries: int = MAX_RETRIES
    min_batch: int = MIN_BATCH
    lookahead_margin: int = LOOKAHEAD_MARGIN
    dedupe_candidates: bool = False
    fail_on_total_outage: bool = True

    def __post_init__(self) -> None:
        if self.max_retries < 1:
            raise ValueError("max_retries must be >= 1")
        if self.min_batch < 1:
            raise ValueError("min_batch must be >= 1")
        if self.lookahead_margin < 0:
            raise ValueError("lookahead_margin must be >= 0")
