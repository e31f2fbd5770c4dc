from pydantic import BaseModel, Field, field_validator


class TextParseRequest(BaseModel):
    text: str = Field(..., description="Source text, one term/description pair per line")
    delimiter: str = Field(default=":", min_length=1, description="Separator between term and description")
    count: int = Field(default=10, ge=1, le=100, description="Number of flashcards wanted")

    @field_validator('text')
    @classmethod
    def validate_text(cls, v):
        if not v.strip():
            raise ValueError('Text content is required')
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "text": "Mitochondria: powerhouse of the cell\nDNA: genetic code",
                "delimiter": ":",
                "count": 10
            }
        }

class FlashcardGenerationRequest(TextParseRequest):
    set_id: int = Field(..., gt=0, description="Set receiving the generated cards")

class MultipleChoiceRequest(BaseModel):
    flashcard_id: int = Field(..., gt=0, description="Flashcard the question is built from")
    count: int = Field(default=3, ge=1, le=10, description="Number of incorrect options")

class StudySuggestionsRequest(BaseModel):
    set_id: int = Field(..., gt=0, description="Set to suggest study strategies for")
