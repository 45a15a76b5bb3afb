"""
Parser for evaluator (LLM) output.

Handles the shapes models actually return:
- Clean JSON
- JSON in ```json blocks or bare ``` blocks
- JSON embedded in prose
- "Score: 85" style markdown (last resort)
"""

import json
import re
from typing import Any


def extract_json_object(text: str) -> dict | None:
    """
    Pull the first JSON object out of a model response.

    Args:
        text: Raw model response

    Returns:
        Parsed dict or None if nothing usable was found
    """
    if not text or not text.strip():
        return None

    for strategy in (_try_clean_json, _try_fenced, _try_balanced_object):
        result = strategy(text)
        if isinstance(result, dict):
            return result

    return None


def _try_clean_json(text: str) -> Any:
    try:
        return json.loads(text.strip())
    except json.JSONDecodeError:
        return None


def _try_fenced(text: str) -> Any:
    """JSON inside ``` fences, with or without a language tag."""
    for match in re.findall(r"```(?:json|\w*)\s*([\s\S]*?)\s*```", text, re.IGNORECASE):
        try:
            return json.loads(match.strip())
        except json.JSONDecodeError:
            continue
    return None


def _try_balanced_object(text: str) -> Any:
    start = text.find("{")
    while start != -1:
        candidate = _balanced(text, start)
        if candidate:
            try:
                return json.loads(candidate)
            except json.JSONDecodeError:
                pass
        start = text.find("{", start + 1)
    return None


def _balanced(text: str, start: int) -> str | None:
    """Slice from ``start`` to its matching close brace, skipping string contents."""
    depth = 0
    in_string = False
    escape_next = False

    for i, char in enumerate(text[start:], start):
        if escape_next:
            escape_next = False
            continue
        if char == "\\" and in_string:
            escape_next = True
            continue
        if char == '"':
            in_string = not in_string
            continue
        if in_string:
            continue

        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start:i + 1]

    return None


def parse_evaluation_response(text: str) -> dict:
    """
    Parse a candidate evaluation from model output.

    Returns dict with: score, match_percentage, strengths, concerns,
    explanation, recommendation

    Raises:
        ValueError: no score could be found
    """
    data = extract_json_object(text)
    if data is None:
        data = _parse_evaluation_markdown(text)

    score = _to_percent(data.get("score", data.get("overall_score")))
    if score is None:
        raise ValueError("Evaluator response has no score")

    match_percentage = _to_percent(data.get("match_percentage", data.get("matchPercentage")))

    return {
        "score": score,
        "match_percentage": score if match_percentage is None else match_percentage,
        "strengths": _to_list(data.get("strengths")),
        "concerns": _to_list(data.get("concerns") or data.get("weaknesses")),
        "explanation": str(data.get("explanation") or data.get("summary") or "").strip(),
        "recommendation": str(data.get("recommendation") or "").strip(),
    }


def _to_percent(value: Any) -> int | None:
    """Accept 85, 85.4, "85", "85%", "85/100" and clamp to 0..100."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = re.search(r"\d+(?:\.\d+)?", str(value))
        if not match:
            return None
        number = float(match.group())
    return max(0, min(100, round(number)))


def _to_list(value: Any) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [part.strip(" -•") for part in re.split(r"[\n;]", value) if part.strip(" -•")]
    if isinstance(value, (list, tuple)):
        return [str(item).strip() for item in value if str(item).strip()]
    return [str(value)]


def _parse_evaluation_markdown(text: str) -> dict:
    """Fallback: **Score:** 85 / Recommendation: ... style answers."""
    result: dict[str, Any] = {}

    score_match = re.search(r"score\W*(\d+(?:\.\d+)?)", text, re.IGNORECASE)
    if score_match:
        result["score"] = score_match.group(1)

    for key in ("recommendation", "explanation"):
        match = re.search(rf"\*?\*?{key}:?\*?\*?:?\s*([^\n]+)", text, re.IGNORECASE)
        if match:
            result[key] = match.group(1).strip()

    for key in ("strengths", "concerns"):
        block = re.search(rf"{key}:?\*?\*?:?\s*\n((?:\s*[-•*]\s+[^\n]+\n?)+)", text, re.IGNORECASE)
        if block:
            result[key] = [line.strip(" -•*") for line in block.group(1).splitlines() if line.strip()]

    return result
