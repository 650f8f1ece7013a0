"""
Cover Letter Generator.

Writes a short Russian cover letter for one vacancy, grounded strictly in the
candidate's resume text. Never raises on upstream problems: a missing API key,
an empty completion or a failed call all produce the fixed fallback letter.
"""

import logging
from typing import Any, Optional

from langchain_core.messages import HumanMessage, SystemMessage

from jobswipe.common.config import Config
from jobswipe.common.models import Vacancy
from jobswipe.common.text_sanitizer import sanitize_llm_text
from jobswipe.services.llm import create_openrouter_llm

logger = logging.getLogger(__name__)


SYSTEM_PROMPT = (
    "Ты — эксперт по сопроводительным письмам. "
    "Строго соблюдай правила из сообщения пользователя."
)

USER_PROMPT_TEMPLATE = """
Напиши короткое сопроводительное письмо под КОНКРЕТНУЮ вакансию, опираясь только на резюме кандидата.

Порядок работы:
1) Выдели в ВАКАНСИИ 3–7 ключевых требований и задач: нужный опыт, тип проектов, инструменты, уровень ответственности.
2) Найди в РЕЗЮМЕ только те факты, кейсы, навыки и результаты, которые отвечают этим требованиям.
3) Напиши письмо так, чтобы было видно, что кандидат уже делал похожую работу и понимает, какой вклад внесёт.

Правила:
1) Не придумывай факты, цифры, компании, навыки и достижения. Используй только то, что есть в резюме.
2) Если в резюме нет цифр, не используй цифры.
3) Только plain-text: без markdown, символов *, #, -, _, списков и заголовков.
4) Без обращений и приветствий ("уважаемый", "добрый день", "меня зовут").
5) Не называй компанию и название вакансии.
6) Не повторяй название должности из резюме.
7) 3–5 предложений, коротко и по делу.
8) Опирайся прежде всего на свежий опыт последних 2–3 лет; старый опыт упоминай, только если он прямо совпадает с требованиями.
9) Без фраз "готов обсудить", "буду рад стать частью команды" и похожих.
10) Пиши от первого лица ("Имею опыт...", "Занимался...").

Структура:
1) Одно предложение о профиле кандидата и его релевантном фокусе.
2) 1–3 предложения с конкретными примерами из опыта.
3) Одно завершающее предложение о том, чем кандидат будет полезен.

Источники информации:

{vacancy_block}

=== РЕЗЮМЕ НАЧАЛО ===
{resume}
=== РЕЗЮМЕ КОНЕЦ ===

Выведи только текст письма, без пояснений.
""".strip()

FALLBACK_LETTER = (
    "Имею релевантный опыт работы и занимался развитием маркетинговых и продуктовых "
    "направлений. Работал с аналитикой, гипотезами, процессами и улучшением метрик.\n\n"
    "Мой опыт и навыки позволяют закрывать задачи по развитию продукта и маркетинговых "
    "направлений."
)


def build_vacancy_block(vacancy: Vacancy) -> str:
    tags = ", ".join(vacancy.tags) if vacancy.tags else "—"
    return "\n".join([
        "=== ВАКАНСИЯ НАЧАЛО ===",
        f"Название вакансии: {vacancy.title}",
        f"Компания: {vacancy.company}",
        f"Зарплата: {vacancy.salary or '—'}",
        "Краткое описание / обязанности:",
        vacancy.prompt_description or "—",
        "Ключевые теги/направления:",
        tags,
        "=== ВАКАНСИЯ КОНЕЦ ===",
    ])


def build_prompt(resume_text: str, vacancy: Vacancy) -> str:
    return USER_PROMPT_TEMPLATE.format(
        vacancy_block=build_vacancy_block(vacancy),
        resume=resume_text,
    )


class CoverLetterGenerator:
    """
    OpenRouter-backed cover letter writer.

    Usage:
        generator = CoverLetterGenerator()
        letter = await generator.generate(resume_text, vacancy)
    """

    def __init__(self, llm: Optional[Any] = None, api_key: Optional[str] = None):
        """
        Args:
            llm: Chat model exposing ainvoke (default: OpenRouter ChatOpenAI)
            api_key: Override for OPENROUTER_API_KEY when llm is not given
        """
        self.llm = llm or create_openrouter_llm(
            temperature=Config.COVER_LETTER_TEMPERATURE,
            max_tokens=Config.COVER_LETTER_MAX_TOKENS,
            api_key=api_key,
        )

    async def generate(self, resume_text: str, vacancy: Vacancy) -> str:
        """
        Generate a cover letter.

        Returns:
            Sanitized plain-text letter, or FALLBACK_LETTER on any upstream failure
        """
        if self.llm is None:
            logger.error("OPENROUTER_API_KEY not found, using fallback letter")
            return FALLBACK_LETTER

        prompt = build_prompt(resume_text, vacancy)
        logger.debug(
            "Cover letter prompt built",
            extra={"vacancy_id": vacancy.id, "prompt": prompt, "resume_length": len(resume_text)},
        )

        try:
            response = await self.llm.ainvoke([
                SystemMessage(content=SYSTEM_PROMPT),
                HumanMessage(content=prompt),
            ])
        except Exception as e:
            logger.error(f"OpenRouter call failed for vacancy {vacancy.id}: {e}")
            return FALLBACK_LETTER

        text = (getattr(response, "content", "") or "").strip()
        if not text:
            logger.warning(f"Empty cover letter from LLM for vacancy {vacancy.id}")
            return FALLBACK_LETTER

        return sanitize_llm_text(text)
