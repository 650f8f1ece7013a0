"""
Unit tests for jobswipe/services/cover_letter_service.py
"""

import pytest
from langchain_core.messages import HumanMessage, SystemMessage

from jobswipe.common.models import Vacancy
from jobswipe.services.cover_letter_service import (
    FALLBACK_LETTER,
    CoverLetterGenerator,
    build_prompt,
    build_vacancy_block,
)


@pytest.fixture
def vacancy():
    return Vacancy(
        id="101",
        title="Маркетолог",
        company="Ромашка",
        salary="120–180k ₽",
        description="Короткое описание",
        description_full="Полное описание: контекстная реклама, аналитика",
        tags=["SEO", "Яндекс Директ"],
    )


class TestPrompt:

    def test_vacancy_block_prefers_full_description(self, vacancy):
        block = build_vacancy_block(vacancy)
        assert "Полное описание: контекстная реклама" in block
        assert "Короткое описание" not in block
        assert "SEO, Яндекс Директ" in block

    def test_vacancy_block_placeholders(self):
        block = build_vacancy_block(Vacancy(id="1", title="SMM", company="Лютик"))
        assert "Зарплата: —" in block
        assert "Ключевые теги/направления:\n—" in block

    def test_prompt_embeds_resume_between_markers(self, vacancy):
        prompt = build_prompt("Пять лет в digital", vacancy)
        assert "=== РЕЗЮМЕ НАЧАЛО ===\nПять лет в digital\n=== РЕЗЮМЕ КОНЕЦ ===" in prompt
        assert "=== ВАКАНСИЯ НАЧАЛО ===" in prompt


class TestGenerate:

    @pytest.mark.asyncio
    async def test_sanitizes_llm_output(self, vacancy, fake_llm_factory):
        llm = fake_llm_factory("**Имею опыт** в B2B-маркетинге.\n\n- Запускал кампании.")
        generator = CoverLetterGenerator(llm=llm)

        letter = await generator.generate("резюме", vacancy)

        assert letter == "Имею опыт в B2B маркетинге. Запускал кампании."
        messages = llm.ainvoke.await_args.args[0]
        assert isinstance(messages[0], SystemMessage)
        assert isinstance(messages[1], HumanMessage)
        assert "резюме" in messages[1].content

    @pytest.mark.asyncio
    async def test_no_api_key_returns_fallback(self, vacancy):
        generator = CoverLetterGenerator(api_key="")
        assert generator.llm is None
        assert await generator.generate("резюме", vacancy) == FALLBACK_LETTER

    @pytest.mark.asyncio
    async def test_llm_failure_returns_fallback(self, vacancy, fake_llm_factory):
        generator = CoverLetterGenerator(llm=fake_llm_factory(side_effect=TimeoutError("slow")))
        assert await generator.generate("резюме", vacancy) == FALLBACK_LETTER

    @pytest.mark.asyncio
    async def test_empty_completion_returns_fallback(self, vacancy, fake_llm_factory):
        generator = CoverLetterGenerator(llm=fake_llm_factory("   "))
        assert await generator.generate("резюме", vacancy) == FALLBACK_LETTER
