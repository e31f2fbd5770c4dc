from sqlalchemy.orm import Session
from typing import List, Optional
import logging
import random

from models.flashcard import Flashcard
from models.enums import AccessLevel
from services.access_control import AccessControlService
from services.flashcard import FlashcardService
from services.study_progress import StudyProgressService
from utils.completion import (
    CompletionClient,
    CompletionError,
    DISTRACTOR_SYSTEM_PROMPT,
    FLASHCARD_SYSTEM_PROMPT,
    STUDY_ADVICE_SYSTEM_PROMPT
)
from utils.text_processing import (
    CardPair,
    DEFAULT_DELIMITER,
    clean_option_lines,
    parse_completion_output,
    parse_pairs
)
from config.env import CompletionConfig
from api.errors import NotFound, UpstreamUnavailable
from api.models.requests.flashcard_set import FlashcardContent
from api.models.responses.ai_generation import (
    CardPairResponse,
    FlashcardGenerationResponse,
    MultipleChoiceOption,
    MultipleChoiceResponse,
    ParsedFlashcardsResponse,
    StudySuggestionsResponse
)

logger = logging.getLogger(__name__)

GENERATION_PROMPT = """Generate {count} educational flashcards from the following text.
Each flashcard should have a clear term/concept and a concise description/definition.
Format each flashcard on its own line as: "Term: Description"

Text: {text}

Generate {count} flashcards:"""

DISTRACTOR_PROMPT = """Generate {count} plausible but incorrect answers for this question, one per line.

Question: {term}
Correct Answer: {answer}

Generate {count} incorrect but plausible answers:"""

SUGGESTIONS_PROMPT = """Based on these flashcards, suggest {count} effective study strategies:

Flashcards: {cards}

Suggest {count} specific study strategies:"""

MAX_SUGGESTIONS = 3
MAX_RECOMMENDED_CARDS = 5

class AIFlashcardService:
    """Generates flashcards and study aids from source text and existing sets.

    The completion client is optional. Without it, generation only returns
    what the delimiter parser finds and questions only use distractors taken
    from the same set.
    """

    def __init__(
        self,
        db: Session,
        completion: Optional[CompletionClient] = None,
        config: Optional[CompletionConfig] = None
    ):
        self.db = db
        self.completion = completion
        self.config = config or CompletionConfig()
        self.access = AccessControlService(db)

    async def _complete_pairs(self, text: str, count: int) -> List[CardPair]:
        prompt = GENERATION_PROMPT.format(
            count=count,
            text=text[:self.config.max_source_chars]
        )
        output = await self.completion.complete(
            prompt,
            system=FLASHCARD_SYSTEM_PROMPT,
            temperature=self.config.temperature
        )
        # The prompt always asks for "Term: Description" lines
        return parse_completion_output(output, DEFAULT_DELIMITER)

    async def generate_pairs(self, text: str, delimiter: str = DEFAULT_DELIMITER, count: int = 10) -> ParsedFlashcardsResponse:
        """Parse pairs from text and fill any remaining slots from the completion service.

        Parsed pairs always come first, in their original order, and the result
        is cut to ``count``.

        Raises:
            UpstreamUnavailable: If nothing could be parsed and the completion
                service is unavailable or failed
        """
        parsed = parse_pairs(text, delimiter)[:count]
        generated: List[CardPair] = []

        remaining = count - len(parsed)
        if remaining > 0:
            if self.completion is None:
                if not parsed:
                    raise UpstreamUnavailable("No flashcards found in text and text completion is not configured")
                logger.info(f"Completion not configured; returning {len(parsed)} parsed pairs")
            else:
                try:
                    generated = (await self._complete_pairs(text, remaining))[:remaining]
                except CompletionError as e:
                    if not parsed:
                        raise UpstreamUnavailable(f"No flashcards found in text and {str(e)}")
                    logger.warning(f"Completion failed, returning {len(parsed)} parsed pairs: {str(e)}")

        return ParsedFlashcardsResponse(
            flashcards=[CardPairResponse(**pair.to_dict()) for pair in parsed + generated],
            parsed_count=len(parsed),
            generated_count=len(generated)
        )

    async def generate_into_set(
        self,
        user_id: str,
        set_id: int,
        text: str,
        delimiter: str = DEFAULT_DELIMITER,
        count: int = 10
    ) -> FlashcardGenerationResponse:
        """Generate cards from text and save them to a set the caller can edit."""
        self.access.get_set_for(user_id, set_id, AccessLevel.EDITOR)

        result = await self.generate_pairs(text, delimiter, count)
        saved = []
        if result.flashcards:
            saved = FlashcardService(self.db).bulk_create(
                user_id,
                set_id,
                [FlashcardContent(term=p.term, description=p.description) for p in result.flashcards]
            )

        return FlashcardGenerationResponse(
            message=f"Generated {len(saved)} flashcards",
            flashcards=saved,
            parsed_count=result.parsed_count,
            generated_count=result.generated_count
        )

    async def _complete_distractors(self, flashcard: Flashcard, count: int) -> List[str]:
        prompt = DISTRACTOR_PROMPT.format(
            count=count,
            term=flashcard.term,
            answer=flashcard.description
        )
        output = await self.completion.complete(
            prompt,
            system=DISTRACTOR_SYSTEM_PROMPT,
            temperature=self.config.distractor_temperature
        )
        return clean_option_lines(output)

    async def multiple_choice(self, user_id: str, flashcard_id: int, count: int = 3) -> MultipleChoiceResponse:
        """Build a question from a card with up to ``count`` wrong options.

        Wrong options come from other cards in the same set first and are
        topped up by the completion service. The correct answer appears once.
        """
        flashcard, _ = self.access.get_flashcard_for(user_id, flashcard_id, AccessLevel.VIEWER)
        correct = flashcard.description

        candidates = _unique_options(
            [
                description for (description,) in self.db.query(Flashcard.description).filter(
                    Flashcard.set_id == flashcard.set_id,
                    Flashcard.id != flashcard.id
                ).all()
            ],
            exclude=correct
        )
        distractors = random.sample(candidates, min(count, len(candidates)))

        missing = count - len(distractors)
        if missing > 0 and self.completion is not None:
            try:
                extra = await self._complete_distractors(flashcard, missing)
                distractors += _unique_options(extra, exclude=correct, seen=distractors)[:missing]
            except CompletionError as e:
                logger.warning(f"Distractor completion failed for card {flashcard_id}: {str(e)}")

        options = [MultipleChoiceOption(text=correct, correct=True)]
        options += [MultipleChoiceOption(text=text, correct=False) for text in distractors]
        random.shuffle(options)

        return MultipleChoiceResponse(
            question=flashcard.term,
            options=options,
            correct_answer=correct
        )

    async def study_suggestions(self, user_id: str, set_id: int) -> StudySuggestionsResponse:
        """Study strategies for a set plus the cards the caller should practise first.

        Suggestions come from the completion service and are left empty when
        it is not configured or fails; the card recommendations never depend on it.

        Raises:
            NotFound: If the set is not visible to the caller or has no cards
        """
        self.access.get_set_for(user_id, set_id, AccessLevel.VIEWER)

        cards = self.db.query(Flashcard.term, Flashcard.description).filter(
            Flashcard.set_id == set_id
        ).order_by(Flashcard.id).all()
        if not cards:
            raise NotFound("No flashcards found")

        needs_practice = StudyProgressService(self.db).recommend_for_review(user_id, set_id)

        suggestions: List[str] = []
        if self.completion is not None:
            prompt = SUGGESTIONS_PROMPT.format(
                count=MAX_SUGGESTIONS,
                cards="\n".join(f"{term}: {description}" for term, description in cards)[:self.config.max_source_chars]
            )
            try:
                output = await self.completion.complete(
                    prompt,
                    system=STUDY_ADVICE_SYSTEM_PROMPT,
                    temperature=self.config.temperature
                )
                suggestions = clean_option_lines(output)[:MAX_SUGGESTIONS]
            except CompletionError as e:
                logger.warning(f"Study suggestion completion failed for set {set_id}: {str(e)}")

        return StudySuggestionsResponse(
            total_cards=len(cards),
            needs_practice=len(needs_practice),
            suggestions=suggestions,
            recommended_cards=needs_practice[:MAX_RECOMMENDED_CARDS]
        )

def _unique_options(texts: List[str], exclude: str, seen: Optional[List[str]] = None) -> List[str]:
    """Drop blanks, duplicates and anything equal to the correct answer, keeping order."""
    taken = {_normalize(exclude)}
    taken.update(_normalize(text) for text in seen or [])
    unique = []
    for text in texts:
        key = _normalize(text)
        if not key or key in taken:
            continue
        taken.add(key)
        unique.append(text.strip())
    return unique

def _normalize(text: str) -> str:
    return " ".join((text or "").split()).casefold()
