"""Schemas for the assessment generation endpoint."""

from typing import Dict, Literal, Optional

from pydantic import BaseModel, Field, model_validator

from testgen.services.question_kinds import QuestionKind


class AssessmentRequest(BaseModel):
    topic: str = Field(..., min_length=1, description="Topic printed on the assessment and used in the prompt")
    source_text: str = Field(..., description="Learning material the questions are generated from")
    grade: str = Field(..., min_length=1, description="Grade (class) the assessment is intended for")
    lesson: Optional[str] = Field(default=None, description="Optional lesson number")
    single_choice: int = Field(default=0, ge=0, description="Questions with one correct answer out of four")
    multiple_choice: int = Field(default=0, ge=0, description="Questions with two correct answers out of five")
    matching: int = Field(default=0, ge=0, description="Matching questions with four pairs")
    sorting: int = Field(default=0, ge=0, description="Questions asking to order four items")
    output_format: Literal["pdf", "html"] = Field(default="pdf", description="Format of the returned document")

    @model_validator(mode="after")
    def validate_content(self) -> "AssessmentRequest":
        if not self.source_text.strip():
            raise ValueError("Будь ласка, введіть текст для генерації")
        if sum(self.kind_counts().values()) == 0:
            raise ValueError("Будь ласка, оберіть хоча б один тип питання")
        return self

    def kind_counts(self) -> Dict[QuestionKind, int]:
        return {
            QuestionKind.single_choice: self.single_choice,
            QuestionKind.multiple_choice: self.multiple_choice,
            QuestionKind.matching: self.matching,
            QuestionKind.sorting: self.sorting,
        }
