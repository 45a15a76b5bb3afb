"""
Fit scoring for applications.

ScoringEngine turns a submission plus a job into a ScoreResult, either by
delegating to an external evaluator or with a keyword-overlap heuristic.
ScoringDispatcher runs the engine off the request path and merges the
result back onto the stored application.
"""

import hashlib
import logging
import random
import re
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Literal, Protocol

from pydantic import BaseModel, Field

from jobboard.db.base import Database
from jobboard.db.tables import Application

logger = logging.getLogger(__name__)

MIN_KEYWORD_LENGTH = 4
FALLBACK_SCORE_FLOOR = 30
FALLBACK_MATCH_CEILING = 95
FALLBACK_JITTER = 20


class ScoreResult(BaseModel):
    """Complete evaluation of one application."""

    score: int = Field(ge=0, le=100)
    match_percentage: int = Field(ge=0, le=100)
    strengths: list[str] = Field(default_factory=list)
    concerns: list[str] = Field(default_factory=list)
    explanation: str = ""
    recommendation: str = ""
    source: Literal["provider", "fallback"] = "fallback"


@dataclass(frozen=True)
class JobBrief:
    """The parts of a job the evaluators look at."""

    title: str
    description: str
    requirements: str


class EvaluationProvider(Protocol):
    name: str

    def evaluate(self, resume_text: str, cover_letter: str | None, job: JobBrief) -> ScoreResult:
        """Return a complete result or raise."""
        ...


def recommendation_for(score: int) -> str:
    if score > 80:
        return "Highly recommended for interview"
    if score > 60:
        return "Recommended for interview"
    if score > 40:
        return "Consider for interview"
    return "May not be the best fit"


def job_keywords(job: JobBrief) -> list[str]:
    words = job.title.lower().split(" ") + re.split(r"[,\s]+", job.requirements.lower())
    return [word for word in words if len(word) >= MIN_KEYWORD_LENGTH]


class ScoringEngine:
    """Never raises: provider trouble degrades to the heuristic."""

    def __init__(self, provider: EvaluationProvider | None = None):
        self.provider = provider

    @property
    def enabled(self) -> bool:
        return self.provider is not None

    def status(self) -> dict:
        return {
            "enabled": self.enabled,
            "provider": self.provider.name if self.provider else "heuristic",
        }

    def evaluate(self, resume_text: str, cover_letter: str | None, job: JobBrief) -> ScoreResult:
        if self.provider is not None:
            try:
                result = self.provider.evaluate(resume_text, cover_letter, job)
                return result.model_copy(update={"source": "provider"})
            except Exception as e:
                logger.warning(f"Evaluator {self.provider.name} failed, using heuristic: {e}")

        try:
            return self.fallback(resume_text, job)
        except Exception:
            logger.exception("Heuristic scoring failed")
            return ScoreResult(
                score=FALLBACK_SCORE_FLOOR,
                match_percentage=0,
                concerns=["Automatic evaluation unavailable"],
                explanation="The application could not be evaluated automatically.",
                recommendation=recommendation_for(FALLBACK_SCORE_FLOOR),
            )

    def fallback(self, resume_text: str, job: JobBrief) -> ScoreResult:
        """Keyword overlap between the job and the resume, banded to 30-100."""
        keywords = job_keywords(job)
        resume = resume_text.lower()
        matching = [keyword for keyword in keywords if keyword in resume]

        match_percentage = min(
            round(len(matching) / max(len(keywords), 1) * 100),
            FALLBACK_MATCH_CEILING,
        )

        # Same inputs, same jitter
        seed = hashlib.sha256(f"{job.title}\x00{job.requirements}\x00{resume_text}".encode("utf-8")).hexdigest()
        jitter = random.Random(seed).random() * FALLBACK_JITTER
        score = min(round(max(FALLBACK_SCORE_FLOOR, match_percentage + jitter)), 100)

        strengths: list[str] = []
        concerns: list[str] = []
        if len(matching) > 3:
            strengths.append(f"Strong match for key skills: {', '.join(matching[:3])}")
        if score > 70:
            strengths.append("Relevant experience for the position")
            strengths.append("Good technical background")
        else:
            concerns.append("Limited match with key requirements")
            concerns.append("May need additional training")

        alignment = "strong" if score > 70 else "moderate"
        explanation = f"Based on the analysis, this candidate shows {alignment} alignment with the job requirements."
        if matching:
            explanation += f" Key matching areas include: {', '.join(matching[:3])}."

        return ScoreResult(
            score=score,
            match_percentage=match_percentage,
            strengths=strengths,
            concerns=concerns,
            explanation=explanation,
            recommendation=recommendation_for(score),
            source="fallback",
        )


class ScoringDispatcher:
    """Detached evaluation jobs with a fixed deadline.

    Each job gets its own session and writes only ``score``,
    ``score_detail`` and ``updated_at``, so a concurrent status change is
    never overwritten. Every evaluation runs on its own daemon thread, so
    the deadline starts when the evaluation does and a hung provider call
    cannot hold up the evaluations queued after it.
    """

    def __init__(
        self,
        engine: ScoringEngine,
        database: Database,
        deadline_seconds: float = 30.0,
        workers: int = 4,
    ):
        self.engine = engine
        self.database = database
        self.deadline_seconds = deadline_seconds
        self._jobs = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="scoring")

    def schedule(
        self,
        application_id: str,
        resume_text: str,
        cover_letter: str | None,
        job: JobBrief,
    ) -> Future:
        """Queue an evaluation; the returned future resolves to the stored score or None."""
        return self._jobs.submit(self.run, application_id, resume_text, cover_letter, job)

    def run(
        self,
        application_id: str,
        resume_text: str,
        cover_letter: str | None,
        job: JobBrief,
    ) -> ScoreResult | None:
        try:
            pending = self._start_evaluation(application_id, resume_text, cover_letter, job)
            try:
                result = pending.result(timeout=self.deadline_seconds)
            except FutureTimeout:
                logger.warning(
                    f"[{application_id}] Evaluation exceeded {self.deadline_seconds}s deadline, leaving unscored"
                )
                return None

            if not self.merge(application_id, result):
                logger.warning(f"[{application_id}] Application vanished before its score was stored")
                return None

            logger.info(f"[{application_id}] Scored {result.score} ({result.source})")
            return result
        except Exception:
            logger.exception(f"[{application_id}] Scoring job failed")
            return None

    def _start_evaluation(
        self,
        application_id: str,
        resume_text: str,
        cover_letter: str | None,
        job: JobBrief,
    ) -> Future:
        pending: Future = Future()
        pending.set_running_or_notify_cancel()

        def evaluate() -> None:
            try:
                pending.set_result(self.engine.evaluate(resume_text, cover_letter, job))
            except Exception as e:
                pending.set_exception(e)

        # Abandoned on timeout; the provider call is bounded by its own timeout
        threading.Thread(target=evaluate, name=f"evaluator-{application_id}", daemon=True).start()
        return pending

    def merge(self, application_id: str, result: ScoreResult) -> bool:
        """Partial update of the score fields. False if the row is gone."""
        with self.database.session() as db:
            updated = (
                db.query(Application)
                .filter(Application.id == application_id)
                .update(
                    {
                        Application.score: result.score,
                        Application.score_detail: result.model_dump(),
                        Application.updated_at: datetime.now(UTC),
                    },
                    synchronize_session=False,
                )
            )
            db.commit()
        return updated > 0

    def shutdown(self, wait: bool = True) -> None:
        self._jobs.shutdown(wait=wait, cancel_futures=not wait)
