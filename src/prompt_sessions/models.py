"""Data model for reconstructed prompt sessions."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class TokenUsage:
    """Token counts reported by the assistant, summed over a prompt session."""

    input_tokens: int = 0
    output_tokens: int = 0
    cache_read_tokens: int = 0

    def __add__(self, other: "TokenUsage") -> "TokenUsage":
        if not isinstance(other, TokenUsage):
            return NotImplemented
        return TokenUsage(
            input_tokens=self.input_tokens + other.input_tokens,
            output_tokens=self.output_tokens + other.output_tokens,
            cache_read_tokens=self.cache_read_tokens + other.cache_read_tokens,
        )

    @property
    def total(self) -> int:
        return self.input_tokens + self.output_tokens + self.cache_read_tokens

    def to_dict(self) -> dict:
        return {
            "input_tokens": self.input_tokens,
            "output_tokens": self.output_tokens,
            "cache_read_tokens": self.cache_read_tokens,
        }


@dataclass(frozen=True)
class PromptSession:
    """One genuine user prompt and all assistant activity that followed it.

    Emitted sessions are immutable. The correlation fields
    (associated_commit_hashes through intent) are left at their defaults here
    and filled in later with dataclasses.replace().
    """

    session_id: str
    prompt_text: str
    timestamp: str
    associated_commit_hashes: tuple[str, ...] = ()
    associated_feature_ids: tuple[int, ...] = ()
    similarity_score: float = 0.0
    scope_match: float = 0.0
    intent: str | None = None
    files_touched: tuple[str, ...] = ()
    files_written: tuple[str, ...] = ()
    tool_call_count: int = 0
    model: str | None = None
    token_usage: TokenUsage = field(default_factory=TokenUsage)
    time_end: str | None = None

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict using the public field names."""
        return {
            "session_id": self.session_id,
            "prompt_text": self.prompt_text,
            "timestamp": self.timestamp,
            "associated_commit_hashes": list(self.associated_commit_hashes),
            "associated_feature_ids": list(self.associated_feature_ids),
            "similarity_score": self.similarity_score,
            "scope_match": self.scope_match,
            "intent": self.intent,
            "files_touched": list(self.files_touched),
            "files_written": list(self.files_written),
            "tool_call_count": self.tool_call_count,
            "model": self.model,
            "token_usage": self.token_usage.to_dict(),
            "time_end": self.time_end,
        }
