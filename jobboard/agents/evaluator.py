"""
Candidate Evaluator.

LLM-backed evaluation provider: reads a job and an application and returns
a structured fit assessment. Any failure surfaces as UpstreamUnavailable so
the scoring engine can fall back.
"""

import logging

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_deepseek import ChatDeepSeek
from pydantic import ValidationError as PydanticValidationError

from jobboard.config import Settings
from jobboard.errors import UpstreamUnavailable
from jobboard.services.scoring import JobBrief, ScoreResult
from jobboard.utils.parser import parse_evaluation_response

logger = logging.getLogger(__name__)

MAX_RESUME_CHARS = 6000
MAX_COVER_LETTER_CHARS = 3000

EVALUATOR_PROMPT = """You are a recruiter screening applications. Compare the candidate with the job.

## Output Format (JSON only, no explanation)
```json
{
    "score": 78,
    "match_percentage": 72,
    "strengths": ["5 years of Python", "Led a platform team"],
    "concerns": ["No Kubernetes experience"],
    "explanation": "Solid backend profile, light on infrastructure.",
    "recommendation": "Recommended for interview"
}
```

## Rules
- score and match_percentage: integers 0-100
- MAX 4 strengths and 4 concerns, each under 15 words
- explanation: MAX 60 words
- recommendation: one of "Highly recommended for interview", "Recommended for interview",
  "Consider for interview", "May not be the best fit"
- Judge only what is written. Do not invent experience.
- Return ONLY the JSON, no other text
"""


def truncate_text(text: str, max_chars: int) -> str:
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + "\n[truncated]"


def build_evaluation_message(resume_text: str, cover_letter: str | None, job: JobBrief) -> str:
    return f"""JOB DETAILS:
Job Title: {job.title}
Job Description: {job.description}
Job Requirements: {job.requirements}

CANDIDATE APPLICATION:
Candidate Resume: {truncate_text(resume_text, MAX_RESUME_CHARS)}
Candidate Cover Letter: {truncate_text(cover_letter, MAX_COVER_LETTER_CHARS) if cover_letter else 'Not Provided'}"""


class DeepSeekEvaluator:
    """Evaluation provider backed by DeepSeek chat."""

    name = "deepseek"

    def __init__(self, model):
        self.model = model

    @classmethod
    def from_settings(cls, settings: Settings) -> "DeepSeekEvaluator":
        if not settings.deepseek_api_key:
            raise ValueError("DEEPSEEK_API_KEY not set")
        model = ChatDeepSeek(
            model=settings.deepseek_model,
            api_key=settings.deepseek_api_key,
            temperature=0.1,
            timeout=settings.evaluator_timeout,
            max_retries=1,
        )
        return cls(model)

    def evaluate(self, resume_text: str, cover_letter: str | None, job: JobBrief) -> ScoreResult:
        messages = [
            SystemMessage(content=EVALUATOR_PROMPT),
            HumanMessage(content=build_evaluation_message(resume_text, cover_letter, job)),
        ]
        try:
            response = self.model.invoke(messages)
        except Exception as e:
            raise UpstreamUnavailable(f"Evaluator call failed: {e}") from e

        content = getattr(response, "content", "") or ""
        try:
            return ScoreResult(**parse_evaluation_response(str(content)), source="provider")
        except (ValueError, PydanticValidationError) as e:
            logger.debug(f"Unparseable evaluator response: {str(content)[:500]}")
            raise UpstreamUnavailable(f"Evaluator returned an unusable response: {e}") from e


def build_evaluator(settings: Settings) -> DeepSeekEvaluator | None:
    """Provider for the configured key, or None to run heuristic-only."""
    if not settings.deepseek_api_key:
        logger.warning("AI evaluator disabled: DEEPSEEK_API_KEY not set, using heuristic scoring")
        return None
    return DeepSeekEvaluator.from_settings(settings)
