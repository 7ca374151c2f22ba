from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List


class AnalysisRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Blank defaults so a missing field is reported as 400, not 422
    text: str = ""
    job_title: str = Field(default="", alias="jobTitle")


class AnalysisResult(BaseModel):
    score: int = 0
    keywords: List[str] = []
    suggestions: List[str] = []
    revised_text: str = ""

    @field_validator("score")
    @classmethod
    def clamp_score(cls, v: int) -> int:
        return max(0, min(100, v))


class AnalysisResponse(AnalysisResult):
    model_used: str


class ExtractionResult(BaseModel):
    text: str


class ApiStatus(BaseModel):
    message: str
    status: str
