"""Tests for follow-up action derivation."""

from coach.chat.actions import GET_HELP, JOIN_COMMUNITY, VIEW_MATCHES, Action, derive_actions
from coach.retrieval.context import RetrievalContext
from coach.retrieval.scoring import RelevanceScore


def _labels(actions: list[Action]) -> list[str]:
    return [a.label for a in actions]


def test_no_context_no_topic() -> None:
    actions = derive_actions("hello", "Hi there!", None)
    assert actions == [JOIN_COMMUNITY, GET_HELP]


def test_candidates_add_view_matches(cs_fellowship) -> None:
    context = RetrievalContext(candidates=[RelevanceScore(cs_fellowship, 18)])
    actions = derive_actions("anything", "Here you go", context)
    assert actions[0] == VIEW_MATCHES
    assert JOIN_COMMUNITY in actions


def test_topic_from_query_and_response() -> None:
    actions = derive_actions("scholarship ideas", "Build your skills first", None)
    assert _labels(actions)[:2] == ["Application help", "Learning path"]
    assert JOIN_COMMUNITY in actions


def test_never_more_than_four(cs_fellowship) -> None:
    context = RetrievalContext(candidates=[RelevanceScore(cs_fellowship, 18)])
    actions = derive_actions("scholarship career skill roadmap", "", context)
    assert len(actions) == 4
    # a support action always takes a slot
    assert actions[-1] == JOIN_COMMUNITY
    assert actions[0] == VIEW_MATCHES


def test_at_least_three_when_one_topic() -> None:
    actions = derive_actions("career", "", None)
    assert _labels(actions) == ["Career roadmap", "Join community", "Get more help"]


def test_to_dict() -> None:
    assert JOIN_COMMUNITY.to_dict() == {
        "label": "Join community",
        "kind": "community",
        "payload": {"action": "join"},
    }
    assert Action("Docs", "link").to_dict() == {"label": "Docs", "kind": "link"}
