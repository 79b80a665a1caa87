"""
Tests for the release status table and transition rules.
"""
import pytest

from prbuild import statuses
from prbuild.statuses import InvalidTransition


class TestStatusTable:

    def test_every_status_has_display_fields(self):
        for key, info in statuses.STATUSES.items():
            for field in ("label", "color", "priority", "client_label", "client_description"):
                assert field in info, f"{key} missing {field}"

    def test_unknown_status_falls_back(self):
        assert statuses.status_label("mystery") == "mystery"
        assert statuses.status_color("mystery") == statuses.DEFAULT_COLOR
        assert statuses.priority("mystery") == statuses.priority("submitted")

    def test_needs_revision_is_top_of_queue(self):
        assert statuses.priority("needs_revision") == 0
        assert statuses.priority("rejected") > statuses.priority("published")

    def test_publishable(self):
        assert statuses.is_publishable("client_approved")
        assert statuses.is_publishable("quality_review")
        assert not statuses.is_publishable("awaiting_client")
        assert not statuses.is_publishable("published")

    def test_client_view(self):
        view = statuses.client_view("awaiting_client")
        assert view["status"] == "awaiting_client"
        assert view["label"] == statuses.STATUSES["awaiting_client"]["client_label"]


class TestTransitions:

    def test_happy_path(self):
        path = ["submitted", "draft_generated", "panel_reviewed", "awaiting_client",
                "client_approved", "final_pending", "final_approved", "quality_review",
                "quality_approved", "published"]
        for current, target in zip(path, path[1:]):
            assert statuses.transition(current, target) == target

    def test_reruns_allowed(self):
        assert statuses.can_transition("draft_generated", "draft_generated")
        assert statuses.can_transition("panel_reviewed", "panel_reviewed")

    def test_cannot_skip_draft(self):
        with pytest.raises(InvalidTransition):
            statuses.transition("submitted", "awaiting_client")

    def test_terminal_states_are_final(self):
        for terminal in statuses.TERMINAL:
            for target in statuses.STATUSES:
                assert not statuses.can_transition(terminal, target)

    def test_admin_quick_actions_from_any_open_status(self):
        for current in statuses.STATUSES:
            if current in statuses.TERMINAL:
                continue
            assert statuses.can_transition(current, "needs_revision")
            assert statuses.can_transition(current, "rejected")

    def test_client_limited_to_feedback_and_approval(self):
        assert statuses.can_transition("awaiting_client", "client_approved", role="client")
        assert statuses.can_transition("awaiting_client", "client_feedback", role="client")
        assert not statuses.can_transition("awaiting_client", "rejected", role="client")
        assert not statuses.can_transition("submitted", "client_approved", role="client")

    def test_unknown_status(self):
        assert not statuses.can_transition("submitted", "teleported")

    def test_error_message(self):
        with pytest.raises(InvalidTransition) as exc:
            statuses.transition("published", "draft_generated")
        assert exc.value.current == "published"
        assert exc.value.target == "draft_generated"


def test_sort_queue():
    rows = [
        {"id": "a", "status": "published", "created_at": 5},
        {"id": "b", "status": "submitted", "created_at": 1},
        {"id": "c", "status": "needs_revision", "created_at": 2},
        {"id": "d", "status": "submitted", "created_at": 3},
    ]
    assert [r["id"] for r in statuses.sort_queue(rows)] == ["c", "d", "b", "a"]
