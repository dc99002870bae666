"""Follow-up action suggestions shown under an assistant reply."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal

if TYPE_CHECKING:
    from coach.retrieval.context import RetrievalContext

ActionKind = Literal["opportunity", "community", "expert", "link"]

MAX_ACTIONS = 4
MIN_ACTIONS = 3


@dataclass(frozen=True)
class Action:
    label: str
    kind: ActionKind
    payload: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"label": self.label, "kind": self.kind}
        if self.payload is not None:
            data["payload"] = self.payload
        return data


VIEW_MATCHES = Action("View all matches", "opportunity", {"action": "view_all"})
JOIN_COMMUNITY = Action("Join community", "community", {"action": "join"})
GET_HELP = Action("Get more help", "expert", {"action": "help"})

# (keyword, action) pairs checked against the query and the response, in order
TOPIC_ACTIONS: tuple[tuple[str, Action], ...] = (
    ("scholarship", Action("Application help", "expert", {"action": "application"})),
    ("career", Action("Career roadmap", "expert", {"action": "career_roadmap"})),
    ("skill", Action("Learning path", "expert", {"action": "learning_path"})),
    ("roadmap", Action("Create roadmap", "expert", {"action": "create_roadmap"})),
)


def _is_support(action: Action) -> bool:
    return action.kind == "community" or (action.payload or {}).get("action") == "help"


def derive_actions(
    query_text: str, response_text: str, context: RetrievalContext | None
) -> list[Action]:
    """Pick up to four actions for a reply.

    Matches come first, then topic actions, and a community or help action
    always takes a slot.
    """
    query = query_text.lower()
    response = response_text.lower()
    actions: list[Action] = []

    if context is not None and context.candidates:
        actions.append(VIEW_MATCHES)

    for keyword, action in TOPIC_ACTIONS:
        if keyword in query or keyword in response:
            actions.append(action)

    actions = actions[:MAX_ACTIONS]

    if len(actions) < MIN_ACTIONS:
        actions.append(JOIN_COMMUNITY)
    if len(actions) < MIN_ACTIONS:
        actions.append(GET_HELP)

    if not any(_is_support(action) for action in actions):
        if len(actions) >= MAX_ACTIONS:
            actions[-1] = JOIN_COMMUNITY
        else:
            actions.append(JOIN_COMMUNITY)
    return actions
