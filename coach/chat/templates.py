"""Deterministic local replies used when remote generation is unavailable.

``generate_local()`` lists the retrieved matches when there are any, and
otherwise answers from keyword-matched intent templates. ``MINIMAL_REPLY``
is the last resort and depends on nothing.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from coach.chat.actions import Action
from coach.opportunities.models import UNSPECIFIED_DEADLINES, parse_deadline
from coach.retrieval.scoring import education_matches

if TYPE_CHECKING:
    from coach.opportunities.models import OpportunityRecord, UserProfilePreferences
    from coach.retrieval.context import RetrievalContext

SHOWN_MATCHES = 3
SUMMARY_CHARS = 120


@dataclass
class LocalReply:
    content: str
    actions: list[Action] = field(default_factory=list)


# -- Helpers -------------------------------------------------------------------


def format_deadline(deadline: str | None) -> str:
    """Human-readable deadline, ``Check website`` when there is none."""
    parsed = parse_deadline(deadline)
    if parsed is not None:
        return parsed.strftime("%B %d, %Y")
    if deadline is None or deadline.strip().lower() in UNSPECIFIED_DEADLINES:
        return "Check website"
    return deadline.strip()


def _blurb(record: OpportunityRecord) -> str:
    if record.summary:
        return record.summary
    if record.description:
        text = record.description
        return text if len(text) <= SUMMARY_CHARS else text[:SUMMARY_CHARS].rstrip() + "..."
    return "A strong opportunity for your goals."


def _join(items: list[str]) -> str:
    return " and ".join(items)


def _display_name(user_name: str | None, profile: UserProfilePreferences | None) -> str:
    if user_name:
        return user_name
    if profile is not None and profile.name:
        return profile.name
    return "there"


def _words(text: str) -> set[str]:
    return set(re.findall(r"[a-z']+", text))


def _matches(query: str, keywords: tuple[str, ...], *, exact: bool = False) -> bool:
    """Keyword test on word boundaries; phrases match as substrings."""
    words = _words(query)
    for keyword in keywords:
        if " " in keyword:
            if keyword in query:
                return True
        elif exact:
            if keyword in words:
                return True
        elif any(word.startswith(keyword) for word in words):
            return True
    return False


# -- Retrieved matches ---------------------------------------------------------


def matches_reply(name: str, context: RetrievalContext) -> LocalReply:
    shown = [item.record for item in context.candidates[:SHOWN_MATCHES]]
    lines = [f"Hi {name}! Based on your interests and current opportunities, I found some strong matches:", ""]

    for index, record in enumerate(shown, start=1):
        lines.append(f"**{index}. {record.title or 'Untitled opportunity'}**")
        if record.provider:
            lines.append(f"Provider: {record.provider}")
        lines.append(f"Deadline: {format_deadline(record.deadline)}")
        lines.append(f"Funding: {record.amount or 'See provider for funding details'}")
        lines.append(_blurb(record))
        lines.append("")

    lines.append("**Why these fit you:**")
    profile = context.profile
    if profile is not None:
        shown_text = " ".join(record.searchable_text for record in shown)
        matched = [i for i in profile.interests if i.strip() and i.lower() in shown_text]
        if matched:
            lines.append(f"- Aligns with your interests in {_join(matched[:2])}")
        if profile.education_level and education_matches(profile.education_level, shown_text):
            lines.append(f"- Matches your {profile.education_level} education level")
    lines.append(f"- Selected from {len(context.candidates)} relevant opportunities in our database")
    lines += [
        "",
        "**Next steps:**",
        "- Open a match to review its application requirements",
        "- Start gathering the documents you will need",
        "- Set reminders for each deadline",
        "- Ask me for help with essays and applications",
    ]

    return LocalReply(
        content="\n".join(lines),
        actions=[
            Action("Application guide", "expert", {"action": "application_help"}),
            Action("More opportunities", "opportunity", {"action": "search_more"}),
            Action("Create roadmap", "expert", {"action": "create_roadmap"}),
            Action("Join community", "community", {"action": "join_community"}),
        ],
    )


# -- Intent templates ----------------------------------------------------------


def scholarship_reply(name: str, profile: UserProfilePreferences | None) -> LocalReply:
    lines = [
        f"Great question about scholarships, {name}! Here is where I would start looking.",
        "",
        "**Well-known programs for African students:**",
        "- Mastercard Foundation Scholars Program: full funding plus leadership development",
        "- Mandela Rhodes Scholarship: postgraduate study with mentorship",
        "- AAUW International Fellowships: graduate funding for women",
        "",
    ]
    if profile is not None and profile.interests:
        lines += [
            f"**For your interests ({', '.join(profile.interests[:2])}):**",
            "- I can look for field-specific scholarships",
            "- and help you plan each application",
            "",
        ]
    lines += [
        "**Application strategy:**",
        "- Start 6-8 months before the deadline",
        "- Show leadership and impact in your essays",
        "- Line up strong recommendation letters early",
        "",
        "Want me to build a personalized search and application plan?",
    ]
    return LocalReply(
        "\n".join(lines),
        [
            Action("Find field-specific scholarships", "opportunity", {"action": "field_specific"}),
            Action("Application strategy guide", "expert", {"action": "application_strategy"}),
            Action("Create application timeline", "expert", {"action": "timeline"}),
            Action("Join scholarship community", "community", {"action": "join"}),
        ],
    )


def career_reply(name: str, profile: UserProfilePreferences | None) -> LocalReply:
    lines = [
        f"Let's talk careers, {name}. These sectors are growing fastest across the continent:",
        "",
        "- **Technology:** software development, data science, cybersecurity, cloud",
        "- **Green economy:** renewable energy, sustainable agriculture, climate finance",
        "- **Healthcare innovation:** health tech, public health policy, medical devices",
        "- **FinTech:** mobile payments, digital banking, investment services",
        "",
    ]
    if profile is not None and profile.interests:
        lines += [
            f"**Since you are interested in {profile.interests[0]}:**",
            "- I can sketch a career roadmap",
            "- and find internships and mentors in that field",
            "",
        ]
    lines += [
        "**A path that works:**",
        "1. Pick the field that energizes you",
        "2. Build core technical and soft skills",
        "3. Create portfolio projects",
        "4. Network with people already doing the work",
        "5. Get experience through internships, freelancing or volunteering",
        "",
        "Which field interests you most?",
    ]
    return LocalReply(
        "\n".join(lines),
        [
            Action("Tech career roadmap", "expert", {"career": "technology"}),
            Action("Green jobs guide", "expert", {"career": "sustainability"}),
            Action("FinTech opportunities", "expert", {"career": "fintech"}),
            Action("Find career mentors", "community", {"action": "mentors"}),
        ],
    )


def skills_reply(name: str, profile: UserProfilePreferences | None) -> LocalReply:
    lines = [
        f"Smart move, {name}. Continuous learning is a real advantage. Skills worth investing in:",
        "",
        "- **Technical:** Python, JavaScript, SQL, data analysis, cloud basics",
        "- **Professional:** communication, leadership, problem solving",
        "- **Global:** remote collaboration, financial literacy, entrepreneurship",
        "",
    ]
    if profile is not None and profile.skills:
        lines += [
            f"**Building on what you know ({', '.join(profile.skills[:2])}):**",
            "- I can suggest complementary skills and courses",
            "",
        ]
    lines += [
        "**How to learn it:**",
        "1. Focus on one skill for 3-6 months",
        "2. Practice a little every day",
        "3. Apply it in a real project",
        "4. Earn a certificate to show it",
        "",
        "Which skill would you like to start with?",
    ]
    return LocalReply(
        "\n".join(lines),
        [
            Action("Start with Python", "expert", {"skill": "python"}),
            Action("Data analysis track", "expert", {"skill": "data_analysis"}),
            Action("Communication skills", "expert", {"skill": "communication"}),
            Action("Join learning community", "community", {"action": "learning"}),
        ],
    )


def roadmap_reply(name: str, profile: UserProfilePreferences | None) -> LocalReply:
    lines = [
        f"Planning is where progress starts, {name}. A roadmap in four weeks:",
        "",
        "1. **Vision:** define a clear 3-5 year goal",
        "2. **Gap analysis:** compare your skills and experience with what the goal needs",
        "3. **Milestones:** break the goal into 6-month milestones and monthly objectives",
        "4. **Resources:** list courses, mentors and funding you can use",
        "",
    ]
    if profile is not None and profile.interests:
        lines += [
            f"**For your goals in {profile.interests[0]}:** I can turn this into a specific plan.",
            "",
        ]
    lines += [
        "Popular roadmaps: scholarship applications (6 months), career transition (12 months),",
        "skill development (3-6 months) and entrepreneurship (18 months).",
        "",
        "Pick one and I will fill in the actions and deadlines.",
    ]
    return LocalReply(
        "\n".join(lines),
        [
            Action("Scholarship roadmap", "expert", {"roadmap": "scholarship"}),
            Action("Career transition plan", "expert", {"roadmap": "career"}),
            Action("Skill development path", "expert", {"roadmap": "skills"}),
            Action("Entrepreneurship journey", "expert", {"roadmap": "entrepreneurship"}),
        ],
    )


def networking_reply(name: str, profile: UserProfilePreferences | None) -> LocalReply:
    lines = [
        f"Networking opens a lot of doors, {name}. Here is a practical approach:",
        "",
        "- **Online:** a complete LinkedIn profile, thoughtful engagement, professional communities",
        "- **Programs:** YALI, the Tony Elumelu Foundation network, AfDB youth networks",
        "- **Events:** virtual conferences and local meetups",
        "",
        "**Habits that work:** give before you ask, follow up, and share opportunities with others.",
        "",
    ]
    if profile is not None and profile.interests:
        lines += [f"I can point you to communities focused on {profile.interests[0]}.", ""]
    lines.append("Want help finding mentors or communities to join?")
    return LocalReply(
        "\n".join(lines),
        [
            Action("LinkedIn strategy guide", "expert", {"action": "linkedin_guide"}),
            Action("Find mentors", "expert", {"action": "find_mentors"}),
            Action("Join professional communities", "community", {"action": "professional"}),
            Action("Networking events", "link", {"url": "#events"}),
        ],
    )


def greeting_reply(name: str, profile: UserProfilePreferences | None) -> LocalReply:
    lines = [
        f"Hello {name}! I'm your opportunity coach. I can help you with:",
        "",
        "- Scholarships and educational opportunities",
        "- Career guidance",
        "- Skill building and learning paths",
        "- Goal setting and roadmaps",
        "- Networking and mentorship",
        "",
    ]
    if profile is not None and profile.interests:
        lines += [f"I see you're interested in {_join(profile.interests[:2])}. Great fields to be in!", ""]
    lines.append("What would you like to explore first?")
    return LocalReply(
        "\n".join(lines),
        [
            Action("Find opportunities", "opportunity", {"action": "explore"}),
            Action("Create my roadmap", "expert", {"action": "roadmap"}),
            Action("Career guidance", "expert", {"action": "career"}),
            Action("Join community", "community", {"action": "welcome"}),
        ],
    )


def default_reply(name: str, query: str, profile: UserProfilePreferences | None) -> LocalReply:
    lines = [f"Thanks for your question, {name}!", ""]
    if _matches(query, ("help",)):
        lines += [
            "I can help you with:",
            "- Finding scholarships, grants and programs",
            "- Career planning and skill development",
            "- Application essays, timelines and requirements",
            "- Roadmaps and milestones",
            "",
        ]
    elif _matches(query, ("advice",)):
        lines += [
            "A few things that pay off for young professionals:",
            "- Build skills that solve real problems",
            "- Network with purpose",
            "- Apply for opportunities consistently",
            "",
        ]
    if profile is not None and profile.interests:
        lines += [f"Based on your interest in {profile.interests[0]}, I can find related opportunities.", ""]
    lines += [
        "To point you in the right direction, could you tell me more about:",
        "- the kind of opportunity you are looking for,",
        "- your current goals or challenges,",
        "- and the support that would help most?",
    ]
    return LocalReply(
        "\n".join(lines),
        [
            Action("Find scholarships", "opportunity", {"action": "search"}),
            Action("Get career advice", "expert", {"action": "career_advice"}),
            Action("Set goals", "expert", {"action": "goal_setting"}),
            Action("Join community", "community", {"action": "explore"}),
        ],
    )


IntentBuilder = Callable[[str, "UserProfilePreferences | None"], LocalReply]

# Checked in order; the first intent whose keywords appear wins.
INTENTS: tuple[tuple[str, tuple[str, ...], bool, IntentBuilder], ...] = (
    ("scholarship", ("scholarship", "funding", "financial aid", "grant", "bursar"), False, scholarship_reply),
    ("career", ("career", "job", "profession", "work"), False, career_reply),
    ("skills", ("skill", "learn", "course", "training", "study"), False, skills_reply),
    ("roadmap", ("roadmap", "plan", "goal", "strategy"), False, roadmap_reply),
    ("networking", ("network", "mentor", "community", "connect"), False, networking_reply),
    ("greeting", ("hello", "hi", "hey", "start", "good morning", "good afternoon"), True, greeting_reply),
)


def detect_intent(query_text: str) -> str | None:
    query = query_text.lower()
    for intent, keywords, exact, _ in INTENTS:
        if _matches(query, keywords, exact=exact):
            return intent
    return None


def generate_local(
    query_text: str, context: RetrievalContext, user_name: str | None = None
) -> LocalReply:
    """Build the enriched local reply for a turn."""
    name = _display_name(user_name, context.profile)
    if context.candidates:
        return matches_reply(name, context)

    intent = detect_intent(query_text)
    for candidate, _, _, builder in INTENTS:
        if candidate == intent:
            return builder(name, context.profile)
    return default_reply(name, query_text.lower(), context.profile)


# -- Last resort ---------------------------------------------------------------

MINIMAL_REPLY = LocalReply(
    content=(
        "Hi there! I'm having some technical difficulties right now, but I'm still here to help.\n\n"
        "I can help you find scholarships, plan your career and reach your goals. "
        "Could you rephrase your question, or pick one of the options below?"
    ),
    actions=[
        Action("Ask about scholarships", "opportunity"),
        Action("Career questions", "expert"),
        Action("Join community", "community"),
        Action("Try again", "link", {"action": "retry"}),
    ],
)
