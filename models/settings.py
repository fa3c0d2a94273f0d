"""Chat settings snapshot."""

from dataclasses import asdict, dataclass, fields, replace
from typing import Any


@dataclass(frozen=True)
class Settings:
    """
    Immutable per-session chat settings.

    Readers take the current snapshot; updates build a new instance and swap
    it in whole, so a model round never sees a half-applied change.

    Attributes:
        streaming: Stream model replies into the UI as they arrive
        enable_cot: Ask for "Thinking:" / "Answer:" structured replies
        show_thinking: Show the reasoning segment, not only the answer
        auto_read: After a web search, let the model pick results to deep-read
    """

    streaming: bool = False
    enable_cot: bool = False
    show_thinking: bool = True
    auto_read: bool = True

    def with_update(self, **kwargs: Any) -> "Settings":
        """
        Return a new Settings with the given fields replaced.

        Unknown keys and values that are not booleans (None, "false", 1)
        are ignored, so a partial mapping never flips a flag by accident.
        """
        known = {f.name for f in fields(self)}
        changes = {k: v for k, v in kwargs.items() if k in known and isinstance(v, bool)}
        return replace(self, **changes)

    def to_dict(self) -> dict[str, bool]:
        return asdict(self)
