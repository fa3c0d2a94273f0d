"""
ChatSession - all mutable orchestration state of one conversation.

Components receive the session by reference instead of sharing module-level
globals. ``reset()`` is the single place that defines what survives a
conversation reset.
"""

from dataclasses import dataclass, field

from context.conversation_manager import ConversationManager
from models.settings import Settings
from orchestrator.loop_guard import LoopGuard
from orchestrator.prompts import SYSTEM_PROMPT
from orchestrator.response_classifier import ResponseClassifier
from orchestrator.tool_types import ToolCallHistoryEntry
from tools.web.cache import ReadCache
from tools.web.contracts import SearchResult
from utils.logger import get_logger
from utils.token_tracker import TokenTracker

logger = get_logger(__name__)


@dataclass
class ChatSession:
    """
    Owned by exactly one ChatOrchestrator and touched from one asyncio task
    at a time, so no locking is involved.

    Kept across ``reset()``: settings, the read cache and the tool-call
    audit log. Everything else starts over.
    """

    settings: Settings = field(default_factory=Settings)
    conversation: ConversationManager = field(
        default_factory=lambda: ConversationManager(SYSTEM_PROMPT)
    )
    token_tracker: TokenTracker = field(default_factory=TokenTracker)
    loop_guard: LoopGuard = field(default_factory=LoopGuard)
    classifier: ResponseClassifier = field(default_factory=ResponseClassifier)
    read_cache: ReadCache = field(default_factory=ReadCache)
    read_snippets: list[str] = field(default_factory=list)
    tool_call_history: list[ToolCallHistoryEntry] = field(default_factory=list)
    last_search_results: list[SearchResult] = field(default_factory=list)
    highlighted_indices: set[int] = field(default_factory=set)
    auto_read_in_progress: bool = False

    def reset(self) -> None:
        self.conversation.reset()
        self.token_tracker.reset()
        self.loop_guard.reset()
        self.classifier.reset()
        self.read_snippets.clear()
        self.last_search_results.clear()
        self.highlighted_indices.clear()
        self.auto_read_in_progress = False
        logger.info(
            "Session reset",
            extra={"extra_fields": {"audit_entries": len(self.tool_call_history)}},
        )
