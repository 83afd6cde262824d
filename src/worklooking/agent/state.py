"""In-flight resume / candidature config for the duration of one turn."""

from __future__ import annotations

from worklooking.models.candidature import CandidatureConfig
from worklooking.models.chat import DocumentMutation
from worklooking.models.resume import ResumeDocument


class DocumentStateTracker:
    """Current view of both documents plus the last mutation seen for each.

    Tools read ``resume`` / ``config``, which start as the turn snapshots and
    are replaced (never merged) by every mutation. ``final_*`` stay None until
    a tool mutates the corresponding document.
    """

    def __init__(
        self,
        resume: ResumeDocument | None = None,
        config: CandidatureConfig | None = None,
    ):
        self.resume = resume
        self.config = config
        self.final_resume: ResumeDocument | None = None
        self.final_config: CandidatureConfig | None = None

    def apply(self, mutation: DocumentMutation | None) -> None:
        if mutation is None:
            return
        if mutation.resume is not None:
            self.resume = mutation.resume
            self.final_resume = mutation.resume
        if mutation.config is not None:
            self.config = mutation.config
            self.final_config = mutation.config
