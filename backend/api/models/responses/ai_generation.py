from pydantic import BaseModel, Field
from typing import List
from api.models.responses.flashcard import FlashcardResponse
from api.models.responses.study_session import CardProgressResponse

class CardPairResponse(BaseModel):
    term: str
    description: str

class ParsedFlashcardsResponse(BaseModel):
    flashcards: List[CardPairResponse] = Field(default_factory=list)
    parsed_count: int = Field(..., description="Pairs taken directly from the text")
    generated_count: int = Field(..., description="Pairs filled in by the completion service")

class FlashcardGenerationResponse(BaseModel):
    message: str
    flashcards: List[FlashcardResponse] = Field(default_factory=list)
    parsed_count: int
    generated_count: int

class MultipleChoiceOption(BaseModel):
    text: str
    correct: bool

class MultipleChoiceResponse(BaseModel):
    question: str
    options: List[MultipleChoiceOption]
    correct_answer: str

class StudySuggestionsResponse(BaseModel):
    total_cards: int
    needs_practice: int = Field(..., description="Cards that still qualify for review")
    suggestions: List[str] = Field(default_factory=list, description="Up to three study strategies; empty without a completion service")
    recommended_cards: List[CardProgressResponse] = Field(default_factory=list, description="First five cards to review")
