"""Compose core: prompt buffer, orchestrator, attachments and projection."""

from agent_cowork.compose.attachments import AttachReport, ContextAttachmentPipeline, FileRef
from agent_cowork.compose.orchestrator import ComposeState, SendOutcome, SessionOrchestrator
from agent_cowork.compose.projection import ComposeAffordances, PrimaryAction, project
from agent_cowork.compose.state import ComposeContext, GlobalError, PendingStart, PromptBuffer

__all__ = [
    "AttachReport",
    "ComposeAffordances",
    "ComposeContext",
    "ComposeState",
    "ContextAttachmentPipeline",
    "FileRef",
    "GlobalError",
    "PendingStart",
    "PrimaryAction",
    "PromptBuffer",
    "SendOutcome",
    "SessionOrchestrator",
    "project",
]
