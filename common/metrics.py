"""
Per-turn metrics and diagnostics.
"""
import time
from typing import Dict, Any, List, Optional
from datetime import datetime


class TurnMetrics:
    """Track metrics for one assistant turn."""

    def __init__(self):
        self.start_time = time.time()
        self.end_time = None
        self.stages: Dict[str, float] = {}
        self.llm_calls = 0
        self.total_tokens = 0
        self.models_tried: List[str] = []
        self.model_used: Optional[str] = None
        self.normalization_tier: Optional[str] = None
        self.recommendation_count = 0
        self.errors = []

    def mark_stage(self, stage_name: str):
        """Mark completion of a stage."""
        self.stages[stage_name] = time.time()

    def finish(self):
        """Mark turn as finished."""
        self.end_time = time.time()

    def add_llm_call(self, model: str, tokens: int, models_tried: List[str] = None):
        """Record an answered upstream call."""
        self.llm_calls += 1
        self.total_tokens += tokens or 0
        self.model_used = model
        for tried in models_tried or [model]:
            self.models_tried.append(tried)

    def set_normalization(self, tier: str, recommendation_count: int):
        self.normalization_tier = tier
        self.recommendation_count = recommendation_count

    def add_error(self, error: str):
        """Record an error."""
        self.errors.append(error)

    def duration(self) -> float:
        """Get total duration in seconds."""
        if self.end_time:
            return self.end_time - self.start_time
        return time.time() - self.start_time

    def duration_ms(self) -> int:
        return int(self.duration() * 1000)

    def to_dict(self) -> Dict[str, Any]:
        """Convert metrics to dict."""
        return {
            "duration_seconds": self.duration(),
            "llm_calls": self.llm_calls,
            "total_tokens": self.total_tokens,
            "models_tried": self.models_tried,
            "model_used": self.model_used,
            "normalization_tier": self.normalization_tier,
            "recommendation_count": self.recommendation_count,
            "stages": {k: v - self.start_time for k, v in self.stages.items()},
            "errors": self.errors,
            "start_time": datetime.fromtimestamp(self.start_time).isoformat(),
            "end_time": datetime.fromtimestamp(self.end_time).isoformat() if self.end_time else None
        }
