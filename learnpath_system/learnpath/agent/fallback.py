"""
Network-free plan used when the generative backend cannot be reached.
The curriculum is generic; its resources are search-engine queries, not
curated links.
"""


from urllib.parse import quote_plus

from learnpath.llm.schemas import GoalRequest, Plan, Resource, Step

SEARCH_URL = "https://www.google.com/search?q="

# (title template, description template, minutes, [(kind, query suffix, resource title template)])
CURRICULUM = [
    (
        "Foundations of {t}",
        "Get oriented: what {t} is, the core vocabulary, and how the pieces fit together.",
        60,
        [
            ("article", "introduction for beginners", "Beginner introductions to {t}"),
            ("article", "glossary key terms", "Key terms and concepts in {t}"),
        ],
    ),
    (
        "Core Concepts",
        "Work through the central ideas of {t} one at a time and take notes on each.",
        120,
        [
            ("article", "core concepts explained", "Core concepts of {t} explained"),
            ("article", "tutorial step by step", "Step-by-step {t} tutorials"),
            ("exercise", "practice exercises", "Practice exercises for {t}"),
        ],
    ),
    (
        "Hands-on Practice",
        "Apply what you learned in short, focused exercises. Aim for daily repetition.",
        180,
        [
            ("exercise", "beginner exercises with solutions", "{t} exercises with solutions"),
            ("article", "common mistakes", "Common {t} mistakes to avoid"),
        ],
    ),
    (
        "Build a Project",
        "Pick a small real-world project that uses {t} end to end and finish it.",
        240,
        [
            ("article", "project ideas", "Project ideas for {t}"),
            ("exercise", "guided project walkthrough", "Guided {t} project walkthroughs"),
            ("article", "best practices", "{t} best practices"),
        ],
    ),
    (
        "Review and Next Steps",
        "Review weak spots, test yourself, and choose an intermediate topic to continue with.",
        90,
        [
            ("exercise", "quiz self assessment", "{t} self-assessment quizzes"),
            ("article", "intermediate learning roadmap", "Intermediate {t} roadmap"),
        ],
    ),
]


def search_resource(query: str, kind: str = "article", title: str | None = None) -> Resource:
    return Resource(
        kind=kind,
        title=title or f"Search: {query}",
        url=SEARCH_URL + quote_plus(query),
        source="Google Search",
        is_paid=False,
    )


def _short_title(title: str, max_words: int = 6) -> str:
    words = title.split()
    return " ".join(words[:max_words])


def build_fallback_plan(goal: GoalRequest) -> Plan:
    t = goal.title
    summary = f"A general five-step path for learning {t}, from fundamentals to a finished project."
    if goal.description:
        summary += f" Focus: {goal.description}"

    steps = []
    for i, (title, desc, minutes, resources) in enumerate(CURRICULUM, start=1):
        steps.append(
            Step(
                id=f"step-{i}",
                title=title.format(t=t),
                description=desc.format(t=t),
                duration_minutes=minutes,
                resources=[
                    search_resource(f"{t} {suffix}", kind=kind, title=rtitle.format(t=t))
                    for kind, suffix, rtitle in resources
                ],
            )
        )

    return Plan(
        title=_short_title(t),
        category=None,
        difficulty=1,
        summary=summary,
        steps=steps,
    )
