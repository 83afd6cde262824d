"""Data models for the worklooking agent core."""

from worklooking.models.candidature import (
    Application,
    Candidate,
    CandidatureConfig,
    Goals,
    TargetCompany,
)
from worklooking.models.chat import (
    ConversationMessage,
    DocumentMutation,
    ToolCall,
    ToolDefinition,
    ToolExecutionResult,
    ToolStatus,
    TurnResult,
)
from worklooking.models.resume import Basics, ResumeDocument

__all__ = [
    "Application",
    "Basics",
    "Candidate",
    "CandidatureConfig",
    "ConversationMessage",
    "DocumentMutation",
    "Goals",
    "ResumeDocument",
    "TargetCompany",
    "ToolCall",
    "ToolDefinition",
    "ToolExecutionResult",
    "ToolStatus",
    "TurnResult",
]
