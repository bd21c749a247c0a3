"""Chat service: Claude API integration for the workflow assistant."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

import anthropic
from sqlalchemy.ext.asyncio import AsyncSession

from ..chat.messages import ChatReply, ChatRequest
from ..config import settings
from ..errors import ChatServiceError
from ..graph.canvas import Canvas
from ..models.tenant import Tenant
from ..models.workflow import Workflow
from . import workflow_svc

logger = logging.getLogger(__name__)

WORKFLOW_KEYWORDS = (
    "create", "build", "make", "add", "workflow", "automation", "when", "if", "trigger",
)
SEARCH_PHRASES = ("find", "search", "locate", "where is", "can't find", "cannot find")

_SEARCH_STRIP = re.compile(
    r"\b(?:where is|can't find|cannot find|find|search|locate|the|a|an)\b",
    re.IGNORECASE,
)
_JSON_BLOCK = re.compile(r"```json\n([\s\S]*?)\n```")

AVAILABLE_INTEGRATIONS = """\
- Triggers: webhook, form_submit, schedule, email_received, file_upload
- Communication: email, slack, teams, sms, discord
- CRM: salesforce, hubspot, pipedrive, airtable
- Database: mysql, postgresql, mongodb, supabase
- File Storage: google_drive, dropbox, aws_s3
- AI: openai, anthropic
- Analytics: google_analytics, mixpanel
- Payments: stripe, paypal
- Productivity: google_sheets, google_calendar, notion"""

BUILD_FORMAT = """\
```json
{
  "action": "build_workflow",
  "nodes": [
    {"id": "node_1", "type": "trigger", "integration": "webhook", "name": "Form Submission",
     "position": {"x": 100, "y": 100}, "config": {"method": "POST"}},
    {"id": "node_2", "type": "action", "integration": "email", "name": "Send Welcome Email",
     "position": {"x": 300, "y": 100}, "config": {"to": "{{form.email}}", "subject": "Welcome!"}}
  ],
  "connections": [{"source": "node_1", "target": "node_2"}]
}
```"""


# ── Intent detection ──────────────────────────────────────────────────────

def is_workflow_request(message: str) -> bool:
    words = set(re.findall(r"[a-z']+", message.lower()))
    return any(keyword in words for keyword in WORKFLOW_KEYWORDS)


def is_search_query(message: str) -> bool:
    lowered = message.lower()
    return any(phrase in lowered for phrase in SEARCH_PHRASES)


def extract_search_terms(message: str) -> str:
    stripped = _SEARCH_STRIP.sub(" ", message)
    return " ".join(stripped.replace("?", " ").split())


def extract_workflow_data(text: str) -> dict[str, Any] | None:
    """Return the first fenced ```json block of a reply, if it parses to an object."""
    match = _JSON_BLOCK.search(text or "")
    if not match:
        return None
    try:
        data = json.loads(match.group(1))
    except ValueError:
        logger.info("Assistant reply carried an unparseable workflow block")
        return None
    return data if isinstance(data, dict) else None


# ── Context and prompt ────────────────────────────────────────────────────

async def build_context(
    db: AsyncSession,
    tenant: Tenant,
    message: str = "",
    workflow: Workflow | None = None,
    canvas: Canvas | None = None,
) -> dict[str, Any]:
    """Collect tenant, workflow and canvas facts for the system prompt."""
    context: dict[str, Any] = {
        "tenant": {"id": str(tenant.id), "name": tenant.name},
        "stats": await workflow_svc.workflow_stats(db, tenant.id),
    }

    if workflow is not None:
        context["current_workflow"] = {
            "id": str(workflow.id),
            "name": workflow.name,
            "description": workflow.description,
            "step_count": len(workflow.steps or []),
        }
    if canvas is not None:
        context["canvas"] = {
            "node_names": [n.data.integration.name for n in canvas.nodes],
            "node_count": len(canvas.nodes),
            "connection_count": len(canvas.edges),
        }

    if message and is_search_query(message):
        terms = extract_search_terms(message)
        if terms:
            found = await workflow_svc.search_workflows(db, tenant.id, terms)
            context["search"] = {
                "terms": terms,
                "workflows": [
                    {"name": w.name, "status": w.status, "description": w.description}
                    for w in found
                ],
            }
    return context


def _format_stats(stats: dict[str, Any]) -> str:
    if not stats or not stats.get("total"):
        return ""
    recent = ", ".join(f"{w['name']} ({w['status']})" for w in stats.get("recent", []))
    return (
        "WORKFLOW STATISTICS:\n"
        f"- Total workflows: {stats['total']}\n"
        f"- Active workflows: {stats['active']}\n"
        f"- Total executions: {stats['executions']}\n"
        f"- Recent workflows: {recent}\n"
    )


def _format_current(context: dict[str, Any]) -> str:
    current = context.get("current_workflow")
    if not current:
        return ""
    canvas = context.get("canvas") or {}
    names = ", ".join(str(n) for n in canvas.get("node_names", []) if n) or "none"
    return (
        "CURRENT WORKFLOW ANALYSIS:\n"
        f"- Name: {current['name']}\n"
        f"- Description: {current.get('description') or 'No description'}\n"
        f"- Nodes: {canvas.get('node_count', 0)} ({names})\n"
        f"- Connections: {canvas.get('connection_count', 0)}\n"
        f"- Steps in database: {current.get('step_count', 0)}\n"
    )


def _format_search(context: dict[str, Any]) -> str:
    search = context.get("search")
    if not search:
        return ""
    if not search["workflows"]:
        return f'SEARCH RESULTS: No workflows found matching "{search["terms"]}".\n'
    lines = ["FOUND WORKFLOWS:"]
    for wf in search["workflows"]:
        lines.append(f'- "{wf["name"]}" ({wf["status"]})')
        if wf.get("description"):
            lines.append(f"  Description: {wf['description'][:100]}")
    return "\n".join(lines) + "\n"


def build_system_prompt(context: dict[str, Any], request_type: str = "chat") -> str:
    tenant = context.get("tenant") or {}
    session = "".join(
        part
        for part in (
            f"TENANT: {tenant['name']}\n" if tenant.get("name") else "",
            _format_stats(context.get("stats") or {}),
            _format_current(context),
            _format_search(context),
        )
        if part
    )
    return (
        "You are Resonant Directive, the AI workflow builder for HALO, a multi-tenant "
        "business automation platform.\n\n"
        f"CURRENT SESSION CONTEXT:\n{session or 'General consultation mode'}\n"
        "You build workflows from natural language, analyze existing workflows and "
        "suggest concrete improvements. Be concise and action-oriented.\n\n"
        f"AVAILABLE INTEGRATIONS:\n{AVAILABLE_INTEGRATIONS}\n\n"
        "When the user asks for a workflow, explain what it will do and include a JSON "
        f"block in exactly this format:\n{BUILD_FORMAT}\n\n"
        f"REQUEST TYPE: {request_type}"
    )


# ── Claude call ───────────────────────────────────────────────────────────

def _get_client(api_key: str) -> anthropic.AsyncAnthropic:
    return anthropic.AsyncAnthropic(api_key=api_key)


def _normalize_history(history: list[dict[str, str]], message: str) -> list[dict[str, str]]:
    """Alternate user/assistant turns, starting with a user turn."""
    turns: list[dict[str, str]] = []
    for turn in [*history, {"role": "user", "content": message}]:
        role = turn.get("role")
        content = turn.get("content") or ""
        if role not in {"user", "assistant"} or not content:
            continue
        if not turns and role != "user":
            continue
        if turns and turns[-1]["role"] == role:
            turns[-1] = {"role": role, "content": f"{turns[-1]['content']}\n\n{content}"}
        else:
            turns.append({"role": role, "content": content})
    return turns


async def generate_reply(request: ChatRequest) -> ChatReply:
    """Ask Claude for a reply and pull any workflow JSON out of it."""
    api_key = settings.anthropic_api_key
    if not api_key:
        raise ChatServiceError("Set HALO_ANTHROPIC_API_KEY environment variable.")

    request_type = request.request_type
    if request_type == "chat" and is_workflow_request(request.message):
        request_type = "build_workflow"

    client = _get_client(api_key)
    try:
        response = await client.messages.create(
            model=settings.chat_model,
            max_tokens=settings.chat_max_tokens,
            system=build_system_prompt(request.context, request_type),
            messages=_normalize_history(request.history, request.message),
        )
    except anthropic.APIError as exc:
        logger.error("Claude API error: %s", exc)
        raise ChatServiceError(f"AI service error: {exc}") from exc
    except Exception as exc:
        logger.exception("Unexpected failure calling Claude")
        raise ChatServiceError(f"AI service error: {exc}") from exc

    text = "".join(
        block.text for block in response.content if getattr(block, "type", None) == "text"
    )
    workflow_data = extract_workflow_data(text)
    action = None
    if workflow_data and workflow_data.get("action") == "build_workflow":
        action = "create_workflow"
    return ChatReply(message=text, workflow_data=workflow_data, action=action)
