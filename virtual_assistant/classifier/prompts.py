"""
Classifier prompt template.

The template names the assistant and its creator, lists the allowed command
types with examples, and asks for a bare JSON object. The user's command is
placed on the final line as a JSON string so it cannot break the template.
"""

import json
from typing import Optional

from virtual_assistant.core.intents import IntentKind

COMMAND_MARKER = "User input: "

# ── COMMAND TYPES ──────────────────────────────────────────────────────────────
# (type, when to use it)

COMMAND_TYPES: list[tuple[IntentKind, str]] = [
    (IntentKind.GOOGLE_SEARCH, 'for general search queries (e.g., "search Python tutorials", "who is the president of France?")'),
    (IntentKind.YOUTUBE_SEARCH, 'to search on YouTube (e.g., "search cat videos on YouTube")'),
    (IntentKind.YOUTUBE_PLAY, 'to play specific videos (e.g., "play latest song on YouTube")'),
    (IntentKind.CALCULATOR_OPEN, 'to open calculator (e.g., "open calculator")'),
    (IntentKind.WEATHER_SHOW, 'to show weather (e.g., "show me the weather")'),
    (IntentKind.INSTAGRAM_OPEN, 'to open Instagram (e.g., "open Instagram")'),
    (IntentKind.FACEBOOK_OPEN, 'to open Facebook (e.g., "open Facebook")'),
    (IntentKind.MAPS_OPEN, 'to open Google Maps (e.g., "open maps")'),
    (IntentKind.LINKEDIN_OPEN, 'to open LinkedIn (e.g., "open LinkedIn")'),
    (IntentKind.GITHUB_OPEN, 'to open GitHub (e.g., "open GitHub")'),
    (IntentKind.WHATSAPP_OPEN, 'to open WhatsApp (e.g., "open WhatsApp")'),
    (IntentKind.GET_DATE, 'when the user asks for today\'s date (e.g., "what is the date today")'),
    (IntentKind.GET_TIME, 'when the user asks for the current time (e.g., "what time is it")'),
    (IntentKind.GET_DAY, 'when the user asks which day it is (e.g., "what day is it")'),
    (IntentKind.GET_MONTH, 'when the user asks for the current month (e.g., "which month is this")'),
    (IntentKind.GENERAL, "for direct knowledge-based questions that can be answered comprehensively, or general conversation."),
]

# ── EXAMPLES ───────────────────────────────────────────────────────────────────

EXAMPLES: list[tuple[str, str, str]] = [
    (
        "general",
        "JavaScript kya hai?",
        "JavaScript ek lightweight, interpreted programming language hai jo web pages ko "
        "interactive banane ke liye use hoti hai. Yeh HTML aur CSS ke saath web development "
        "ki core technology hai, aur front-end, back-end (Node.js) aur mobile apps mein use hoti hai.",
    ),
    ("google-search", "search latest news", "Searching for the latest news."),
    ("calculator-open", "open calculator", "Opening calculator."),
    (
        "general",
        "Bharat ki rajdhani kya hai?",
        "Bharat ki rajdhani New Delhi hai. Yeh desh ke uttar mein sthit ek mahanagar hai "
        "aur Bharat Sarkar ki seat hai.",
    ),
]

RESPONSE_RULES = """
**Important Rules for "response" field:**
1. If the "type" is "general" and the question is knowledge-based (e.g., "What is JavaScript?", "Tell me about the history of India?"), provide a **detailed and comprehensive answer** in the "response" field. The response should be informative and can be longer.
2. If the "type" is an action/search command (e.g., "google-search", "youtube-play"), provide a **short and concise confirmation** in the "response" field (e.g., "Searching for JavaScript definition.", "Opening YouTube.").
3. "userInput" must repeat the user's input exactly.
""".strip()


def build_prompt(command: str, assistant_name: str, user_name: str) -> str:
    """
    Build the classification prompt for one command.

    Args:
        command: Trimmed user command
        assistant_name: Assistant's display name
        user_name: Account owner's display name

    Returns:
        Complete prompt text
    """
    types = "\n".join(f'- "{kind.value}" → {usage}' for kind, usage in COMMAND_TYPES)
    examples = "\n\n".join(
        f"- Input: {json.dumps(text, ensure_ascii=False)}\n"
        f"  Output: {json.dumps({'type': kind, 'userInput': text, 'response': reply}, ensure_ascii=False)}"
        for kind, text, reply in EXAMPLES
    )

    return f"""
You are a helpful and knowledgeable assistant named {assistant_name}, created by {user_name}.
Your goal is to provide accurate and helpful responses.

Based on the user's input, determine if it's a direct knowledge-based question or an action/search command.

Respond ONLY in **valid JSON** format as below:

{{
  "type": "<command-type>",
  "userInput": "<the user's input>",
  "response": "<Your spoken response>"
}}

Available command types:
{types}

{RESPONSE_RULES}

Examples:
{examples}

Don't include any markdown, explanation, or extra characters outside the JSON.

{COMMAND_MARKER}{json.dumps(command, ensure_ascii=False)}
""".strip()


def extract_command(prompt: str) -> Optional[str]:
    """Recover the user command from a prompt built by build_prompt()."""
    last_line = prompt.rstrip().rsplit("\n", 1)[-1]
    if not last_line.startswith(COMMAND_MARKER):
        return None
    try:
        command = json.loads(last_line[len(COMMAND_MARKER):])
    except json.JSONDecodeError:
        return None
    return command if isinstance(command, str) else None
