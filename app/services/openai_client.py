"""
OpenAI API helpers — moderator-facing analysis of an attendee feedback batch.

Single JSON-mode chat completion per batch; no retries.
"""
import logging
import re
from typing import List

from app import config
from app.errors import BatchAnalysisError, MalformedModelOutput
from app.extensions import get_openai_client

logger = logging.getLogger('services.openai')

FEEDBACK_SYSTEM_PROMPT = "\n".join([
    "You are a senior data analyst working live at a professional conference.",
    "Your job: give the on-stage moderator clear insight so they can react quickly and correctly.",
    "Return ONLY valid JSON, no markdown and no commentary.",
    "Answer in the language the feedback is written in.",
    "JSON schema:",
    "{",
    '  "sentiment": { "positive": number, "neutral": number, "negative": number },',
    '  "top_topics": [string, string, string],',
    '  "summary": string,',
    '  "moderator_brief": {',
    '    "room_mood": string,',
    '    "audience_priorities": [string, string, string],',
    '    "critical_questions": [string, string, string],',
    '    "recommended_actions": [string, string, string],',
    '    "confidence_0_100": number',
    "  }",
    "}",
    "Rules:",
    "- sentiment percentages are between 0 and 100 and add up to roughly 100.",
    "- top_topics names the 3 most discussed themes, short and precise.",
    "- summary is one actionable sentence for the moderator.",
    "- moderator_brief items are short, practical and do not repeat each other.",
    "- If the data is thin, say so explicitly in summary and moderator_brief.",
])


def format_feedback_batch(messages: List[str]) -> str:
    """Numbered list, one whitespace-collapsed message per line."""
    lines = []
    for index, message in enumerate(messages, 1):
        collapsed = re.sub(r'\s+', ' ', message).strip()
        lines.append(f"{index}. {collapsed}")
    return "\n".join(lines)


def request_feedback_analysis(messages: List[str]) -> str:
    """Send one feedback batch to the model and return the raw JSON text."""
    client = get_openai_client()
    if client is None:
        raise BatchAnalysisError("OPENAI_API_KEY is not configured.")

    try:
        response = client.chat.completions.create(
            model=config.OPENAI_MODEL,
            response_format={"type": "json_object"},
            messages=[
                {"role": "system", "content": FEEDBACK_SYSTEM_PROMPT},
                {"role": "user", "content": f"Feedback batch:\n{format_feedback_batch(messages)}"},
            ],
        )
    except Exception as e:
        logger.error("OpenAI completion failed: %s", e, exc_info=True)
        raise BatchAnalysisError(f"Language model request failed: {e}") from e

    content = response.choices[0].message.content if response.choices else None
    if not content:
        raise MalformedModelOutput("The language model returned an empty response.")

    logger.debug("Feedback analysis raw reply: %s", content)
    return content
