"""
Compatibility Scorer.

Estimates how well the user's selected resume matches a vacancy (0-100) and
buckets the score into green/yellow/red. Upstream failures degrade to a
neutral result instead of propagating.

Batch scoring reads and fills the per-user cache in the ai_compatibility
collection and caps concurrent LLM calls with a semaphore.
"""

import asyncio
import logging
import re
from typing import Any, Dict, List, Optional

from langchain_core.messages import HumanMessage, SystemMessage

from jobswipe.common.config import Config
from jobswipe.common.errors import NoResumeSelectedError
from jobswipe.common.json_utils import parse_llm_json
from jobswipe.common.models import (
    CompatibilityColor,
    CompatibilityResult,
    CompatibilityScore,
    Vacancy,
)
from jobswipe.common.repositories import (
    CompatibilityRepositoryInterface,
    ResumeRepositoryInterface,
)
from jobswipe.common.text_sanitizer import sanitize_llm_text
from jobswipe.services.llm import create_openrouter_llm

logger = logging.getLogger(__name__)

NEUTRAL_SCORE = 50

EXPLANATION_NOT_ENOUGH_DATA = "Недостаточно данных для анализа совместимости."
EXPLANATION_DEFAULT = "Анализ выполнен."
EXPLANATION_REGEX_DEFAULT = "Анализ на основе навыков и опыта."
EXPLANATION_UNPARSEABLE = "Не удалось извлечь оценку совместимости."
EXPLANATION_CALL_FAILED = "Ошибка при расчёте совместимости."
EXPLANATION_BATCH_ERROR = "Ошибка расчёта."

SYSTEM_PROMPT = (
    'Ты — HR-аналитик. Отвечай ТОЛЬКО JSON: {"score": число, "explanation": "текст"}'
)

USER_PROMPT_TEMPLATE = """
Оцени по шкале 0–100%, насколько кандидат из РЕЗЮМЕ подходит на ВАКАНСИЮ.

Учитывай:
- совпадение навыков и технологий;
- релевантность опыта работы;
- соответствие уровня позиции;
- отраслевой опыт.

Опирайся ТОЛЬКО на резюме. Не придумывай факты.

=== ВАКАНСИЯ ===
{vacancy_block}

=== РЕЗЮМЕ ===
{resume}

Верни ТОЛЬКО валидный JSON без markdown:
{{"score": <число 0-100>, "explanation": "<1-2 предложения почему такой score>"}}
""".strip()

_SCORE_PATTERNS = [
    re.compile(r'["\']?score["\']?\s*[:=]\s*(\d+)', re.IGNORECASE),
    re.compile(r'(\d{1,3})\s*[%％]'),
    re.compile(r'совместимость[^\d]*(\d{1,3})', re.IGNORECASE),
    re.compile(r'оценк[аи][^\d]*(\d{1,3})', re.IGNORECASE),
]

_EXPLANATION_PATTERNS = [
    re.compile(r'["\']?explanation["\']?\s*[:=]\s*["\']([^"\']+)["\']', re.IGNORECASE),
    re.compile(r'потому что[:\s]*(.+?)(?:\.|$)', re.IGNORECASE),
    re.compile(r'так как[:\s]*(.+?)(?:\.|$)', re.IGNORECASE),
]


def score_to_color(score: int) -> CompatibilityColor:
    """Bucket a 0-100 score: >=75 green, >=40 yellow, else red."""
    if score >= Config.GREEN_THRESHOLD:
        return CompatibilityColor.GREEN
    if score >= Config.YELLOW_THRESHOLD:
        return CompatibilityColor.YELLOW
    return CompatibilityColor.RED


def clamp_score(value: Any) -> int:
    return max(0, min(100, int(round(float(value)))))


def neutral_result(vacancy_id: str, explanation: str) -> CompatibilityResult:
    return CompatibilityResult(
        vacancy_id=vacancy_id,
        score=NEUTRAL_SCORE,
        color=CompatibilityColor.YELLOW,
        explanation=explanation,
    )


def build_vacancy_block(vacancy: Vacancy) -> str:
    tags = ", ".join(vacancy.tags) if vacancy.tags else "—"
    return "\n".join([
        f"Название: {vacancy.title}",
        f"Компания: {vacancy.company}",
        f"Зарплата: {vacancy.salary or '—'}",
        f"Описание: {vacancy.prompt_description or '—'}",
        f"Теги: {tags}",
    ])


def parse_compatibility_response(vacancy_id: str, text: str) -> CompatibilityResult:
    """
    Turn a raw completion into a CompatibilityResult.

    Tries a JSON object first, then regex extraction from prose, then gives up
    with a neutral result.
    """
    try:
        parsed = parse_llm_json(text)
        if "score" in parsed:
            score = clamp_score(parsed["score"])
            explanation = sanitize_llm_text(str(parsed.get("explanation") or EXPLANATION_DEFAULT))
            return CompatibilityResult(vacancy_id, score, score_to_color(score), explanation)
    except (ValueError, TypeError):
        logger.info(f"JSON parse failed for vacancy {vacancy_id}, trying regex extraction")

    for pattern in _SCORE_PATTERNS:
        score_match = pattern.search(text)
        if score_match:
            score = clamp_score(score_match.group(1))
            explanation = EXPLANATION_REGEX_DEFAULT
            for expl_pattern in _EXPLANATION_PATTERNS:
                expl_match = expl_pattern.search(text)
                if expl_match:
                    explanation = sanitize_llm_text(expl_match.group(1))
                    break
            return CompatibilityResult(vacancy_id, score, score_to_color(score), explanation)

    logger.error(f"Could not extract score for vacancy {vacancy_id}: {text[:200]}")
    return neutral_result(vacancy_id, EXPLANATION_UNPARSEABLE)


class CompatibilityScorer:
    """
    LLM-backed resume/vacancy compatibility scorer.

    Usage:
        scorer = CompatibilityScorer(resumes=repos.resumes, cache=repos.compatibility)
        results = await scorer.compute_batch(user_id, vacancies)
    """

    def __init__(
        self,
        resumes: ResumeRepositoryInterface,
        cache: CompatibilityRepositoryInterface,
        llm: Optional[Any] = None,
        api_key: Optional[str] = None,
        concurrency: Optional[int] = None,
    ):
        self.resumes = resumes
        self.cache = cache
        self.llm = llm or create_openrouter_llm(
            temperature=Config.COMPATIBILITY_TEMPERATURE,
            max_tokens=Config.COMPATIBILITY_MAX_TOKENS,
            api_key=api_key,
        )
        self.concurrency = concurrency or Config.COMPATIBILITY_CONCURRENCY

    async def calculate(self, resume_text: str, vacancy: Vacancy) -> CompatibilityResult:
        """Score one vacancy against resume text. Never raises on LLM failures."""
        vacancy_id = str(vacancy.id)

        if (
            self.llm is None
            or not resume_text
            or len(resume_text.strip()) < Config.COMPATIBILITY_MIN_RESUME_LENGTH
        ):
            return neutral_result(vacancy_id, EXPLANATION_NOT_ENOUGH_DATA)

        prompt = USER_PROMPT_TEMPLATE.format(
            vacancy_block=build_vacancy_block(vacancy),
            resume=resume_text[:Config.COMPATIBILITY_RESUME_CHARS],
        )

        try:
            response = await self.llm.ainvoke([
                SystemMessage(content=SYSTEM_PROMPT),
                HumanMessage(content=prompt),
            ])
        except Exception as e:
            logger.error(f"OpenRouter call failed for vacancy {vacancy_id}: {e}")
            return neutral_result(vacancy_id, EXPLANATION_CALL_FAILED)

        text = getattr(response, "content", "") or ""
        return parse_compatibility_response(vacancy_id, text)

    async def compute_batch(self, user_id: str, vacancies: List[Vacancy]) -> List[CompatibilityResult]:
        """
        Score a batch of vacancies for a user.

        Cached scores are returned without calling the LLM. Fresh results are
        appended in completion order and written to the cache.

        Raises:
            NoResumeSelectedError: If the user has no selected resume with content
        """
        resume = await asyncio.to_thread(self.resumes.get_selected, user_id)
        if resume is None or not resume.content:
            raise NoResumeSelectedError("No resume found. Please sync your resume first.")

        results: List[CompatibilityResult] = []
        to_compute: List[Vacancy] = []

        cached_scores = await asyncio.to_thread(self._cached_for, user_id, vacancies)
        for vacancy in vacancies:
            cached = cached_scores.get(str(vacancy.id))
            if cached is not None:
                results.append(cached.to_result())
            else:
                to_compute.append(vacancy)

        if not to_compute:
            return results

        semaphore = asyncio.Semaphore(self.concurrency)

        async def score_one(vacancy: Vacancy) -> CompatibilityResult:
            vacancy_id = str(vacancy.id)
            try:
                async with semaphore:
                    result = await self.calculate(resume.content, vacancy)
                result.vacancy_id = vacancy_id
                await asyncio.to_thread(self.cache.save, CompatibilityScore.from_result(user_id, result))
                return result
            except Exception as e:
                logger.error(f"Compatibility failed for vacancy {vacancy_id}: {e}")
                return neutral_result(vacancy_id, EXPLANATION_BATCH_ERROR)

        tasks = [asyncio.create_task(score_one(v)) for v in to_compute]
        for finished in asyncio.as_completed(tasks):
            results.append(await finished)

        logger.info(
            f"Compatibility batch for user {user_id}: "
            f"{len(vacancies) - len(to_compute)} cached, {len(to_compute)} computed"
        )
        return results

    def _cached_for(self, user_id: str, vacancies: List[Vacancy]) -> Dict[str, CompatibilityScore]:
        cached = {}
        for vacancy in vacancies:
            score = self.cache.get(user_id, str(vacancy.id))
            if score is not None:
                cached[str(vacancy.id)] = score
        return cached

    def list_cached(self, user_id: str) -> List[CompatibilityResult]:
        return [score.to_result() for score in self.cache.list_for_user(user_id)]

    def invalidate(self, user_id: str, vacancy_id: str) -> None:
        self.cache.delete(user_id, vacancy_id)
