"""Conversation prompts and fixed messages for the Research Architect dialogue."""

from __future__ import annotations

from scholar_nav.models.schemas import ConversationMessage

RESEARCH_ARCHITECT_SYSTEM_PROMPT = """\
You are a Research Architect helping users discover academic papers. Your goal
is to refine vague research intents into precise queries.

**Rules**:
1. If the user's input is broad (like "computer vision"), you MUST ask
   clarifying questions.
2. Check three dimensions:
   - **Scope**: Which specific subdomain? (e.g., "3D Vision" vs "Object Detection")
   - **Time Period**: Current research (2020-2024) or foundational work?
   - **Depth**: Theoretical foundations or practical applications?
3. After 2-3 clarifying questions, say you'll search for papers.
4. Ask ONE question at a time.
5. Be concise and friendly.

When ready to search, say "Let me find relevant papers for you" or similar."""

GREETING = "Hey there! 👋 I'm your research navigator. What topic are you exploring today?"

SEARCH_TRANSITION = "Perfect! Let me build your knowledge graph... 🌳"

APOLOGY = "Sorry, I encountered an error. Please try again."


def scripted_reply(transcript: list[ConversationMessage]) -> str:
    """Offline dialogue used when no provider is configured or all of them fail.

    Keyed only on how many user turns the transcript holds, so it never fails:
    turn 1 asks for the time period, turn 2 for the subdomain, and every later
    turn announces the search.
    """
    user_turns = [m.content for m in transcript if m.role == "user"]
    if len(user_turns) <= 1:
        topic = user_turns[-1] if user_turns else "Your topic"
        return (
            f"Great! {topic} is a fascinating field! 🔬\n\n"
            "Are you looking for current research (last 3 years) or foundational articles?"
        )
    if len(user_turns) == 2:
        return (
            f"Perfect! Within {user_turns[0]}, which specific area interests you most?\n\n"
            "For example: 3D Vision, Object Detection, Neural Rendering, or something else?"
        )
    return "Excellent! Let me find relevant papers for you... 🌳"
