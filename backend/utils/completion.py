from typing import Optional, Protocol
import asyncio
import logging

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from config.env import CompletionConfig

logger = logging.getLogger(__name__)

FLASHCARD_SYSTEM_PROMPT = (
    "You are an educational assistant that creates clear, concise flashcards. "
    "Each flashcard should have a term or concept on one side and a clear, "
    "educational description on the other."
)

DISTRACTOR_SYSTEM_PROMPT = (
    "You are an educational assistant that generates plausible but incorrect "
    "answers for multiple choice questions."
)

STUDY_ADVICE_SYSTEM_PROMPT = "You are an educational expert that provides practical study advice."

class CompletionError(Exception):
    """The completion service failed, timed out or is not configured."""

class CompletionClient(Protocol):
    async def complete(
        self,
        prompt: str,
        system: Optional[str] = None,
        temperature: Optional[float] = None
    ) -> str:
        ...

class LangChainCompletionClient:
    """Completion client backed by a LangChain chat model."""

    def __init__(self, config: CompletionConfig, llm: Optional[ChatOpenAI] = None):
        self.config = config
        self.llm = llm or ChatOpenAI(
            model=config.model,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            timeout=config.timeout_seconds,
            max_retries=0,
            api_key=config.api_key
        )

    async def complete(
        self,
        prompt: str,
        system: Optional[str] = None,
        temperature: Optional[float] = None
    ) -> str:
        messages = []
        if system:
            messages.append(SystemMessage(content=system))
        messages.append(HumanMessage(content=prompt))

        llm = self.llm
        if temperature is not None:
            llm = llm.bind(temperature=temperature)

        try:
            response = await asyncio.wait_for(
                asyncio.to_thread(llm.invoke, messages),
                timeout=self.config.timeout_seconds
            )
        except asyncio.TimeoutError as e:
            logger.warning(f"Completion timed out after {self.config.timeout_seconds}s")
            raise CompletionError("Completion service timed out") from e
        except Exception as e:
            logger.error(f"Completion request failed: {str(e)}")
            raise CompletionError(f"Completion service error: {type(e).__name__}") from e

        content = response.content if hasattr(response, 'content') else str(response)
        if not isinstance(content, str):
            content = str(content)
        return content

def build_completion_client(config: CompletionConfig) -> Optional[CompletionClient]:
    """Return a completion client, or None when no API key is configured."""
    if not config.api_key:
        logger.info("No completion API key configured; generation uses delimiter parsing only")
        return None
    return LangChainCompletionClient(config)
