"""
LLM Factory Module.

Creates ChatOpenAI instances pointed at OpenRouter's OpenAI-compatible
endpoint. Cover letter generation and compatibility scoring both go through
here so model, headers and timeout are configured in one place.

Usage:
    from jobswipe.services.llm import create_openrouter_llm

    llm = create_openrouter_llm(temperature=0.3, max_tokens=700)
    response = await llm.ainvoke(messages)
"""

import logging
from typing import Optional

from langchain_openai import ChatOpenAI

from jobswipe.common.config import Config

logger = logging.getLogger(__name__)


def create_openrouter_llm(
    temperature: float,
    max_tokens: int,
    model: Optional[str] = None,
    api_key: Optional[str] = None,
) -> Optional[ChatOpenAI]:
    """
    Create an OpenRouter chat model.

    Args:
        temperature: Sampling temperature
        max_tokens: Completion token limit
        model: Model id (default: Config.LLM_MODEL)
        api_key: OpenRouter key (default: Config.OPENROUTER_API_KEY)

    Returns:
        Configured ChatOpenAI, or None when no API key is configured
    """
    key = api_key if api_key is not None else Config.OPENROUTER_API_KEY
    if not key:
        logger.warning("OPENROUTER_API_KEY not configured, LLM calls will use fallbacks")
        return None

    effective_model = model or Config.LLM_MODEL
    llm = ChatOpenAI(
        model=effective_model,
        temperature=temperature,
        max_tokens=max_tokens,
        api_key=key,
        base_url=Config.OPENROUTER_BASE_URL,
        timeout=Config.LLM_TIMEOUT_SECONDS,
        max_retries=0,
        default_headers={
            "HTTP-Referer": Config.APP_REFERER,
            "X-Title": Config.APP_TITLE,
        },
    )

    logger.debug(
        f"Created OpenRouter LLM: model={effective_model}, "
        f"temperature={temperature}, max_tokens={max_tokens}"
    )
    return llm
