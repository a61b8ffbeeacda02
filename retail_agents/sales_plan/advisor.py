"""
Advisory text client: free-text observations in, recommendations out.

Callers get plain strings back in every case; LLM failures degrade to a
fallback message and are logged.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any

import litellm

from .settings import load_env, model_name

logger = logging.getLogger(__name__)

API_KEY_ENV = "OPENAI_API_KEY"

NO_KEY_MESSAGE = "Configure an API key to get planning advice."
NO_ADVICE_MESSAGE = "No advice generated."
ADVICE_UNAVAILABLE_MESSAGE = "Planning advice is temporarily unavailable, please try again later."
ANALYSIS_FAILED_MESSAGE = "Could not analyze the data; check the format and try again."

LLM_ERRORS = (
    litellm.APIError,
    litellm.APIConnectionError,
    litellm.AuthenticationError,
    litellm.BadRequestError,
    litellm.RateLimitError,
    litellm.Timeout,
)


def _has_api_key() -> bool:
    load_env()
    if os.getenv(API_KEY_ENV):
        return True
    logger.warning(f"{API_KEY_ENV} is not set; advisor calls are disabled.")
    return False


def _complete(prompt: str, **kwargs: Any) -> str:
    response = litellm.completion(
        model=model_name(),
        messages=[{"role": "user", "content": prompt}],
        **kwargs,
    )
    return (response.choices[0].message.content or "").strip()


def _format_records(records: list[dict[str, str]]) -> str:
    if not records:
        return "(No observations recorded yet; rely on general retail experience.)"
    return "\n".join(f"- [{r.get('category', 'Note')}] {r.get('content', '')}" for r in records)


def get_planning_advice(
    title: str,
    period: str,
    tags: list[str],
    records: list[dict[str, str]],
) -> str:
    """Summarize past observations for a retail event and suggest replenishment actions."""
    if not _has_api_key():
        return NO_KEY_MESSAGE

    prompt = f"""
    You are a senior retail merchandise planner and store replenishment expert.
    The user wants a more accurate replenishment plan based on past reviews.

    Event: {title}
    Period: {period}
    Tags: {", ".join(tags)}

    Recorded observations:
    \"\"\"
    {_format_records(records)}
    \"\"\"

    Tasks:
    1. Review summary: if observations exist, distill the core sales pattern,
       pain points or opportunities from them.
    2. Replenishment advice: concrete actions covering initial order depth,
       replenishment frequency, size mix or logistics cut-off times.

    Output format:
    **Review summary**
    ... (omit this section when there are no observations)

    **Replenishment advice**
    ...

    Keep it under 150 words.
    """
    try:
        text = _complete(prompt)
    except LLM_ERRORS:
        logger.exception("Planning advice request failed")
        return ADVICE_UNAVAILABLE_MESSAGE
    return text or NO_ADVICE_MESSAGE


def _strip_fences(text: str) -> str:
    return text.replace("```json", "").replace("```", "").strip()


def analyze_sales_data(data_string: str, user_prompt: str) -> list[str]:
    """Turn pasted spreadsheet data into short review bullet points."""
    if not _has_api_key():
        return ["Configure an API key to use data analysis."]

    prompt = f"""
    You are a data analyst. The user pasted sales data copied from a spreadsheet.

    Tasks:
    1. Identify the key metrics (total sales, YoY, MoM, sell-through, category performance).
    2. Extract significant trends (a category surging, overall miss against plan).
    3. Address the user's extra instructions.

    User instructions: "{user_prompt}"

    Raw data:
    \"\"\"
    {data_string}
    \"\"\"

    Respond with JSON only, no markdown, shaped as {{"points": [...]}} with one
    concise review point (at most 30 words) per string.
    """
    try:
        text = _complete(prompt, response_format={"type": "json_object"})
    except LLM_ERRORS:
        logger.exception("Sales data analysis request failed")
        return [ANALYSIS_FAILED_MESSAGE]
    if not text:
        return []

    try:
        parsed = json.loads(_strip_fences(text))
    except json.JSONDecodeError:
        logger.exception("Sales data analysis returned non-JSON output")
        return [ANALYSIS_FAILED_MESSAGE]
    if isinstance(parsed, dict):
        parsed = next((v for v in parsed.values() if isinstance(v, list)), [])
    if not isinstance(parsed, list):
        return [ANALYSIS_FAILED_MESSAGE]
    return [str(item) for item in parsed]
