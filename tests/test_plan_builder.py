"""Tests for rule-based plan generation and plan normalization."""

from legate.core.readiness import build_plan_from_readiness, compute_readiness, normalize_cached_plan
from legate.core.readiness.plan_builder import (
    has_plan_shape,
    looks_missing_key,
    normalize_details,
    normalize_title,
    step_href_for_signal,
)

ESTATE_ID = "7d3f0a52-2a4e-4a7c-9f3b-0c2a6a1f5e11"
BASE = f"/app/estates/{ESTATE_ID}"


class TestHrefRouting:
    def test_missing_keys_jump_to_add_anchor(self):
        assert step_href_for_signal(ESTATE_ID, "missing_legal_documents") == f"{BASE}/documents#add-document"
        assert step_href_for_signal(ESTATE_ID, "no_tasks") == f"{BASE}/tasks#add-task"
        assert step_href_for_signal(ESTATE_ID, "no_contacts") == f"{BASE}/contacts#add-contact"
        assert step_href_for_signal(ESTATE_ID, "no_finances") == f"{BASE}/invoices#add-invoice"

    def test_risk_keys_go_to_page(self):
        assert step_href_for_signal(ESTATE_ID, "tasksOverdue") == f"{BASE}/tasks"
        assert step_href_for_signal(ESTATE_ID, "property_tax_due") == f"{BASE}/properties"

    def test_expenses_anchor_on_invoices_page(self):
        assert step_href_for_signal(ESTATE_ID, "unpaid_expense") == f"{BASE}/invoices#add-expense"

    def test_unknown_key_defaults_to_documents(self):
        assert step_href_for_signal(ESTATE_ID, "something_else") == f"{BASE}/documents"
        assert step_href_for_signal(ESTATE_ID, "need_review") == f"{BASE}/documents#add-document"

    def test_estate_id_is_url_encoded(self):
        assert step_href_for_signal("a/b", "docs").startswith("/app/estates/a%2Fb/")

    def test_looks_missing_key(self):
        assert looks_missing_key("missingStuff")
        assert looks_missing_key("requires_signature")
        assert not looks_missing_key("tasksOverdue")


class TestNormalization:
    def test_title(self):
        assert normalize_title("  Add   legal\n documents.  ") == "Add legal documents"
        assert normalize_title("Review:;-") == "Review"
        assert normalize_title("") == "Next step"
        assert normalize_title(None) == "Next step"
        assert normalize_title("...") == "Next step"

    def test_details(self):
        assert normalize_details("  one  \n\n\n\ntwo ") == "one\n\ntwo"
        assert normalize_details("   ") is None
        assert normalize_details(42) is None


class TestBuildPlan:
    def test_steps_follow_signal_ranking(self, now):
        readiness = compute_readiness([], [], [], [], [], [], now=now)

        plan = build_plan_from_readiness(ESTATE_ID, readiness, now=now)

        assert plan.generator == "heuristic-v1"
        assert plan.estate_id == ESTATE_ID
        assert plan.generated_at == now.isoformat()
        assert len(plan.steps) == 5
        # High severity first, then by label within a severity
        assert [s.id for s in plan.steps] == [
            "no_contacts",
            "missing_legal_documents",
            "no_finances",
            "missing_banking_documents",
            "missing_property_documents",
        ]
        assert all(s.kind == "missing" for s in plan.steps)

    def test_step_ids_are_stable_across_regenerations(self, now, complete_records):
        before = compute_readiness([], [], [], [], [], [], now=now)
        after = compute_readiness(complete_records["documents"][:1], [], [], [], [], [], now=now)

        ids_before = {s.id for s in build_plan_from_readiness(ESTATE_ID, before, now=now).steps}
        ids_after = {s.id for s in build_plan_from_readiness(ESTATE_ID, after, now=now).steps}

        assert "missing_legal_documents" in ids_before
        assert "missing_legal_documents" not in ids_after
        assert {"no_contacts", "no_finances"} <= ids_before & ids_after

    def test_risk_steps(self, now, complete_records):
        past = "2025-06-01T00:00:00+00:00"
        readiness = compute_readiness(
            complete_records["documents"],
            [{"due_date": past}],
            [],
            [{"id": 1}],
            [{"id": 1}],
            [],
            now=now,
        )

        plan = build_plan_from_readiness(ESTATE_ID, readiness, now=now)

        assert [(s.id, s.kind, s.severity) for s in plan.steps] == [("tasksOverdue", "risk", "medium")]
        assert plan.steps[0].href == f"{BASE}/tasks"

    def test_no_signals_returns_general_steps(self, now, complete_records):
        readiness = compute_readiness(*complete_records.values(), now=now)

        plan = build_plan_from_readiness(ESTATE_ID, readiness, now=now)

        assert [s.id for s in plan.steps] == ["general:review-documents", "general:review-tasks"]
        assert all(s.kind == "general" and s.severity == "low" for s in plan.steps)

    def test_max_steps(self, now):
        readiness = compute_readiness([], [], [], [], [], [], now=now)

        assert len(build_plan_from_readiness(ESTATE_ID, readiness, now=now, max_steps=2).steps) == 2


class TestCachedPlan:
    def test_has_plan_shape(self):
        assert has_plan_shape({"estateId": "x", "generatedAt": "t", "generator": "g", "steps": []})
        assert not has_plan_shape({"estateId": "x", "generatedAt": "t", "generator": "g"})
        assert not has_plan_shape(["not", "a", "dict"])

    def test_repairs_steps(self):
        raw = {
            "estateId": "other-estate",
            "generatedAt": "2025-06-15T12:00:00+00:00",
            "generator": "openai:gpt-4o-mini",
            "steps": [
                {"id": "keep", "title": "Add contacts.", "href": "/x", "kind": "missing", "severity": "high"},
                {"title": "Pay the property tax bill", "kind": "bogus", "severity": "urgent", "count": 2},
                "garbage",
            ],
            "meta": {"inputHash": "abc", "signals": {"missing": [], "atRisk": []}},
        }

        plan = normalize_cached_plan(ESTATE_ID, raw)

        assert plan.estate_id == ESTATE_ID
        assert plan.generator == "openai:gpt-4o-mini"
        assert plan.meta.input_hash == "abc"
        assert plan.steps[0].id == "keep"
        assert plan.steps[0].title == "Add contacts"

        repaired = plan.steps[1]
        assert repaired.id.startswith("cached:1:")
        assert len(repaired.id) == len("cached:1:") + 8
        assert repaired.kind == "general"
        assert repaired.severity == "medium"
        assert repaired.count == 2
        assert repaired.href == f"{BASE}/properties"

        assert plan.steps[2].title == "Next step"

    def test_not_a_dict(self):
        assert normalize_cached_plan(ESTATE_ID, None) is None
