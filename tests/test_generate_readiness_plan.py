"""Tests for the readiness plan LLM chain with mocked OpenAI API."""

import json
from unittest.mock import MagicMock, patch

import pytest

from legate.chains.generate_readiness_plan import (
    build_user_prompt,
    generate_plan_with_ai,
    safe_parse_readiness_plan,
)
from legate.core.config import Settings
from legate.core.readiness import compute_readiness

ESTATE_ID = "7d3f0a52-2a4e-4a7c-9f3b-0c2a6a1f5e11"


@pytest.fixture
def settings():
    return Settings(
        SUPABASE_URL="https://test.supabase.co",
        SUPABASE_SERVICE_ROLE_KEY="test-key",
        OPENAI_API_KEY="test-openai-key",
        LEGATE_ENV="test",
    )


@pytest.fixture
def readiness(now):
    return compute_readiness([], [], [], [], [], [], now=now)


@pytest.fixture
def mock_openai_response():
    """Create a mock chat completion response."""

    def _create_response(content):
        mock_response = MagicMock()
        mock_choice = MagicMock()
        mock_choice.message.content = content
        mock_response.choices = [mock_choice]
        return mock_response

    return _create_response


def plan_json(steps):
    return json.dumps({
        "estateId": ESTATE_ID,
        "generatedAt": "2025-06-15T12:00:00Z",
        "generator": "llm",
        "steps": steps,
    })


class TestSafeParse:
    def test_valid_plan(self):
        parsed = safe_parse_readiness_plan(plan_json([
            {"id": "a", "title": "Add a will", "href": "/x", "kind": "missing", "severity": "high", "count": 2},
        ]))

        assert parsed["estateId"] == ESTATE_ID
        assert parsed["steps"][0]["count"] == 2
        assert parsed["steps"][0]["details"] is None

    def test_drops_invalid_steps(self):
        parsed = safe_parse_readiness_plan(plan_json([
            {"id": "ok", "title": "T", "href": "/x", "kind": "risk", "severity": "low"},
            {"id": "bad-kind", "title": "T", "href": "/x", "kind": "urgent", "severity": "low"},
            {"id": "bad-severity", "title": "T", "href": "/x", "kind": "risk", "severity": "critical"},
            {"title": "no id", "href": "/x", "kind": "risk", "severity": "low"},
            {"id": "no-href", "title": "T", "kind": "risk", "severity": "low"},
            "not a step",
        ]))

        assert [s["id"] for s in parsed["steps"]] == ["ok"]

    @pytest.mark.parametrize(
        "text",
        [
            None,
            "",
            "not json",
            "[1, 2, 3]",
            json.dumps({"estateId": ESTATE_ID, "generatedAt": "t", "generator": "g"}),
            json.dumps({"estateId": 5, "generatedAt": "t", "generator": "g", "steps": []}),
        ],
    )
    def test_rejects_malformed_output(self, text):
        assert safe_parse_readiness_plan(text) is None


class TestPrompt:
    def test_user_prompt_payload(self, readiness):
        prompt = build_user_prompt(ESTATE_ID, readiness, max_steps=50)

        lines = prompt.split("\n")
        assert lines[0] == "Generate a readiness plan with up to 10 steps."
        payload = json.loads(lines[-1])
        assert payload["maxSteps"] == 10
        assert payload["score"] == readiness.score
        assert payload["hrefHints"]["expenses"] == f"/app/estates/{ESTATE_ID}/invoices#add-expense"
        assert len(payload["signals"]["missing"]) == 6
        assert "outputSchema" in payload


class TestGeneratePlanWithAI:
    def test_no_api_key_returns_none(self, settings, readiness):
        no_key = settings.model_copy(update={"OPENAI_API_KEY": None})

        with patch("legate.chains.generate_readiness_plan.OpenAI") as mock_openai:
            assert generate_plan_with_ai(ESTATE_ID, readiness, no_key) is None
            mock_openai.assert_not_called()

    def test_success(self, settings, readiness, mock_openai_response):
        content = plan_json([
            {"id": "", "title": "Add the will.", "href": "", "kind": "missing", "severity": "high"},
            {"id": "contacts", "title": "Add key contacts", "href": "/c", "kind": "missing", "severity": "high"},
        ])

        with patch("legate.chains.generate_readiness_plan.OpenAI") as mock_openai:
            mock_client = MagicMock()
            mock_client.chat.completions.create.return_value = mock_openai_response(content)
            mock_openai.return_value = mock_client

            plan = generate_plan_with_ai(ESTATE_ID, readiness, settings)

        assert plan.generator == "openai:gpt-4o-mini"
        assert plan.estate_id == ESTATE_ID
        # Generation time is ours, not the model's
        assert plan.generated_at != "2025-06-15T12:00:00Z"

        first = plan.steps[0]
        assert first.id.startswith("ai:0:")
        assert first.title == "Add the will"
        assert first.href == f"/app/estates/{ESTATE_ID}/documents"
        assert plan.steps[1].id == "contacts"

        call_kwargs = mock_client.chat.completions.create.call_args.kwargs
        assert call_kwargs["model"] == "gpt-4o-mini"
        assert call_kwargs["temperature"] == 0.2
        assert call_kwargs["messages"][0]["role"] == "system"

    def test_truncates_to_max_steps(self, settings, readiness, mock_openai_response):
        steps = [
            {"id": f"s{i}", "title": f"Step {i}", "href": "/x", "kind": "general", "severity": "low"}
            for i in range(8)
        ]

        with patch("legate.chains.generate_readiness_plan.OpenAI") as mock_openai:
            mock_openai.return_value.chat.completions.create.return_value = mock_openai_response(plan_json(steps))

            plan = generate_plan_with_ai(ESTATE_ID, readiness, settings)

        assert len(plan.steps) == 5

    def test_unparseable_output_returns_none(self, settings, readiness, mock_openai_response):
        with patch("legate.chains.generate_readiness_plan.OpenAI") as mock_openai:
            mock_openai.return_value.chat.completions.create.return_value = mock_openai_response("```json nope")

            assert generate_plan_with_ai(ESTATE_ID, readiness, settings) is None

    def test_provider_error_returns_none(self, settings, readiness):
        with patch("legate.chains.generate_readiness_plan.OpenAI") as mock_openai:
            mock_openai.return_value.chat.completions.create.side_effect = Exception("rate limited")

            assert generate_plan_with_ai(ESTATE_ID, readiness, settings) is None
