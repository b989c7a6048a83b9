"""LLM chain for turning readiness signals into a prioritized plan."""

import json
from datetime import UTC, datetime
from typing import Any, Optional

from openai import OpenAI

from legate.core.config import Settings
from legate.core.logging import get_logger
from legate.core.readiness.plan_builder import estate_base_path, normalize_step
from legate.core.readiness.types import ReadinessPlan, ReadinessResult

logger = get_logger(__name__)


# ruff: noqa: E501
SYSTEM_PROMPT = """You are LegatePro Readiness Copilot.
Your job: turn readiness signals into a short, prioritized plan the user can execute.
Return STRICT JSON only. No markdown. No commentary.
Rules:
- Output must match the provided JSON schema exactly.
- Steps must be actionable verbs (Add, Create, Review, Collect, Verify, Pay, Notify, etc.).
- Keep titles short; details optional but helpful.
- Use the provided hrefs; do NOT invent routes.
- Prefer fixing HIGH severity first, then MEDIUM, then LOW.
- If there are zero signals, return 2-3 general steps."""

OUTPUT_SCHEMA = {
    "estateId": "string",
    "generatedAt": "ISO-8601 string",
    "generator": "string",
    "steps": [
        {
            "id": "string",
            "title": "string",
            "details": "string (optional)",
            "href": "string",
            "kind": '"missing" | "risk" | "general"',
            "severity": '"low" | "medium" | "high"',
            "count": "number (optional)",
        }
    ],
}

VALID_KINDS = ("missing", "risk", "general")
VALID_SEVERITIES = ("low", "medium", "high")


def build_user_prompt(
    estate_id: str,
    readiness: ReadinessResult,
    max_steps: int = 5,
    estate_label: Optional[str] = None,
    include_sensitive: bool = False,
) -> str:
    """
    Build the user prompt: instructions plus a compact JSON payload.

    The payload carries the signals, href hints for every estate page and
    the output schema.
    """
    max_steps = max(1, min(10, max_steps))
    base = estate_base_path(estate_id)

    payload = {
        "estateId": estate_id,
        "estateLabel": estate_label,
        "includeSensitive": include_sensitive,
        "score": max(0, min(100, readiness.score)),
        "maxSteps": max_steps,
        "estateBasePath": base,
        "signals": readiness.signals.to_wire(),
        "hrefHints": {
            "documents": f"{base}/documents#add-document",
            "tasks": f"{base}/tasks#add-task",
            "properties": f"{base}/properties#add-property",
            "contacts": f"{base}/contacts#add-contact",
            "invoices": f"{base}/invoices#add-invoice",
            "expenses": f"{base}/invoices#add-expense",
        },
        "outputSchema": OUTPUT_SCHEMA,
    }

    return "\n".join([
        f"Generate a readiness plan with up to {max_steps} steps.",
        "Return STRICT JSON that matches outputSchema.",
        "Do NOT include markdown.",
        "Do NOT include extra keys.",
        "Payload:",
        json.dumps(payload, separators=(",", ":")),
    ])


def build_messages(estate_id: str, readiness: ReadinessResult, max_steps: int = 5) -> list[dict[str, str]]:
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": build_user_prompt(estate_id, readiness, max_steps)},
    ]


def safe_parse_readiness_plan(text: Optional[str]) -> Optional[dict[str, Any]]:
    """
    Parse LLM output into a raw plan dict.

    Steps without a string id/title/href or with an unknown kind/severity
    are dropped.

    Returns:
        Plan dict with only well-formed steps, or None if the output is not
        a plan-shaped JSON object
    """
    if not text:
        return None

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        return None

    if not isinstance(parsed, dict):
        return None
    if not isinstance(parsed.get("estateId"), str):
        return None
    if not isinstance(parsed.get("generatedAt"), str):
        return None
    if not isinstance(parsed.get("generator"), str):
        return None
    if not isinstance(parsed.get("steps"), list):
        return None

    steps = []
    for step in parsed["steps"]:
        if not isinstance(step, dict):
            continue
        if not all(isinstance(step.get(field), str) for field in ("id", "title", "href")):
            continue
        if step.get("kind") not in VALID_KINDS or step.get("severity") not in VALID_SEVERITIES:
            continue

        count = step.get("count")
        steps.append({
            "id": step["id"],
            "title": step["title"],
            "details": step["details"] if isinstance(step.get("details"), str) else None,
            "href": step["href"],
            "kind": step["kind"],
            "severity": step["severity"],
            "count": count if isinstance(count, (int, float)) and not isinstance(count, bool) else None,
        })

    return {
        "estateId": parsed["estateId"],
        "generatedAt": parsed["generatedAt"],
        "generator": parsed["generator"],
        "steps": steps,
    }


def generate_plan_with_ai(
    estate_id: str,
    readiness: ReadinessResult,
    settings: Settings,
) -> Optional[ReadinessPlan]:
    """
    Generate a readiness plan with the configured OpenAI model.

    Never raises: any provider or parsing failure returns None so the caller
    can fall back to the rule-based plan.

    Args:
        estate_id: Estate identifier
        readiness: Current readiness result
        settings: Application settings

    Returns:
        ReadinessPlan, or None when no API key is set or generation failed
    """
    if not settings.OPENAI_API_KEY:
        return None

    model = settings.READINESS_PLAN_MODEL
    max_steps = settings.READINESS_PLAN_MAX_STEPS

    try:
        client = OpenAI(api_key=settings.OPENAI_API_KEY)

        logger.info(
            f"Calling LLM for readiness plan with model {model}",
            extra={"estate_id": estate_id},
        )

        response = client.chat.completions.create(
            model=model,
            messages=build_messages(estate_id, readiness, max_steps),
            temperature=settings.READINESS_PLAN_TEMPERATURE,
            response_format={"type": "json_object"},
        )

        raw_output = response.choices[0].message.content
        parsed = safe_parse_readiness_plan(raw_output)
        if parsed is None:
            logger.warning(f"Unparseable readiness plan output for estate {estate_id}")
            return None

        steps = [
            normalize_step(estate_id, step, idx, "ai")
            for idx, step in enumerate(parsed["steps"][:max_steps])
        ]

        logger.info(
            f"Generated AI readiness plan with {len(steps)} steps",
            extra={"estate_id": estate_id},
        )

        return ReadinessPlan(
            estate_id=estate_id,
            generated_at=datetime.now(UTC).isoformat(),
            generator=f"openai:{model}",
            steps=steps,
        )

    except Exception as e:
        logger.error(f"AI readiness plan generation failed for estate {estate_id}: {e}")
        return None
