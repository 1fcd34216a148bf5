"""Synthesis audit logging for prompt/response debugging.

Writes every synthesis call as a markdown file, organized by generation run
and section, so fallback-heavy runs can be inspected after the fact.
"""

import asyncio
import contextvars
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from storyforge.llm.response_types import LLMResponse


@dataclass
class LLMAuditContext:
    """Context for an audit log entry.

    Attributes:
        run_id: Generation run identifier (None for ad-hoc calls).
        section_id: Section being generated, if any.
        call_type: Type of call (e.g., "core_narrative", "section_content").
    """

    run_id: str | None = None
    section_id: str | None = None
    call_type: str = "unknown"


@dataclass
class LLMAuditEntry:
    """Complete audit entry for a synthesis call."""

    timestamp: datetime
    context: LLMAuditContext
    provider: str
    model: str
    method: str
    system_prompt: str | None
    messages: list[dict[str, Any]]
    parameters: dict[str, Any]
    response: LLMResponse | None
    error: str | None
    duration_seconds: float


class LLMAuditLogger:
    """Async audit logger for synthesis calls.

    Args:
        log_dir: Directory to write log files to.
        enabled: Whether logging is enabled.
    """

    def __init__(
        self,
        log_dir: Path | str = "logs/llm",
        enabled: bool = True,
    ) -> None:
        self.log_dir = Path(log_dir)
        self.enabled = enabled

    async def log(self, entry: LLMAuditEntry) -> None:
        """Log an audit entry asynchronously."""
        if not self.enabled:
            return

        await self._write_async(self._get_file_path(entry), self._format_entry(entry))

    def _get_file_path(self, entry: LLMAuditEntry) -> Path:
        """Generate file path for an audit entry."""
        timestamp_str = entry.timestamp.strftime("%Y%m%d_%H%M%S_%f")
        ctx = entry.context

        run_dir = self.log_dir / (f"run_{ctx.run_id}" if ctx.run_id else "adhoc")
        if ctx.section_id:
            filename = f"{ctx.section_id}_{timestamp_str}_{ctx.call_type}.md"
        else:
            filename = f"{timestamp_str}_{ctx.call_type}.md"
        return run_dir / filename

    def _format_entry(self, entry: LLMAuditEntry) -> str:
        """Format entry as markdown."""
        lines = [f"# Synthesis Call: {entry.context.call_type}", ""]

        lines.append("## Metadata")
        lines.append(f"- **Timestamp**: {entry.timestamp.isoformat()}")
        if entry.context.run_id is not None:
            lines.append(f"- **Run ID**: {entry.context.run_id}")
        if entry.context.section_id is not None:
            lines.append(f"- **Section**: {entry.context.section_id}")
        lines.append(f"- **Provider**: {entry.provider}")
        lines.append(f"- **Model**: {entry.model}")
        lines.append(f"- **Method**: {entry.method}")
        lines.append("")

        if entry.parameters:
            lines.append("## Parameters")
            for key, value in entry.parameters.items():
                lines.append(f"- **{key}**: {value}")
            lines.append("")

        if entry.system_prompt:
            lines.extend(["## System Prompt", "```", entry.system_prompt, "```", ""])

        if entry.messages:
            lines.append("## Messages")
            for msg in entry.messages:
                lines.append(f"### [{msg.get('role', 'unknown').upper()}]")
                lines.extend(["```", str(msg.get("content", "")), "```", ""])

        if entry.error:
            lines.extend(["## Error", "```", entry.error, "```", ""])

        if entry.response:
            lines.extend(["## Response", "```", entry.response.content, "```", ""])
            if entry.response.usage:
                usage = entry.response.usage
                lines.append("## Usage")
                lines.append(f"- **Prompt Tokens**: {usage.prompt_tokens}")
                lines.append(f"- **Completion Tokens**: {usage.completion_tokens}")
                lines.append(f"- **Total Tokens**: {usage.total_tokens}")
                lines.append("")

        lines.append("## Duration")
        lines.append(f"- **Total Time**: {entry.duration_seconds:.2f}s")
        lines.append("")

        return "\n".join(lines)

    async def _write_async(self, path: Path, content: str) -> None:
        def write_file() -> None:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")

        await asyncio.to_thread(write_file)


_audit_context: contextvars.ContextVar[LLMAuditContext] = contextvars.ContextVar(
    "audit_context",
    default=LLMAuditContext(),
)


def set_audit_context(
    run_id: str | None = None,
    section_id: str | None = None,
    call_type: str = "unknown",
) -> contextvars.Token:
    """Set audit context for subsequent synthesis calls in this task.

    Returns:
        Token that can be passed to ``reset_audit_context``.
    """
    return _audit_context.set(
        LLMAuditContext(run_id=run_id, section_id=section_id, call_type=call_type)
    )


def reset_audit_context(token: contextvars.Token) -> None:
    """Restore the audit context that was active before ``set_audit_context``."""
    _audit_context.reset(token)


def get_audit_context() -> LLMAuditContext:
    """Get current audit context."""
    return _audit_context.get()


_audit_logger: LLMAuditLogger | None = None


def get_audit_logger() -> LLMAuditLogger:
    """Get or create the process-wide audit logger from settings."""
    global _audit_logger
    if _audit_logger is None:
        from storyforge.config import settings

        _audit_logger = LLMAuditLogger(
            log_dir=settings.llm_log_dir,
            enabled=settings.log_llm_calls,
        )
    return _audit_logger
