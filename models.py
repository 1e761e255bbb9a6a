from pydantic import BaseModel, Field, StrictFloat, StrictInt, StrictStr, model_validator
from typing import Any, Dict, List, Literal, Optional, Union


class Question(BaseModel):
    type: Literal["multiple"] = "multiple"
    question: str
    options: List[str] = Field(min_length=4, max_length=4)
    answer: str
    source: Optional[str] = None

    @model_validator(mode="after")
    def _check_options(self):
        if len(set(self.options)) != len(self.options):
            raise ValueError("options must be distinct")
        if self.options.count(self.answer) != 1:
            raise ValueError("answer must appear exactly once in options")
        return self

    def dedup_key(self) -> tuple:
        return self.question, tuple(sorted(self.options))


class QuizResult(BaseModel):
    title: str
    count: int
    questions: List[Question]

    @classmethod
    def from_questions(cls, title: str, questions: List[Question]) -> "QuizResult":
        return cls(title=title, count=len(questions), questions=questions)


class SearchHit(BaseModel):
    title: str
    snippet: str = ""
    pageid: Optional[int] = None


class SearchResponse(BaseModel):
    query: str
    results: List[SearchHit]


class SummaryResponse(BaseModel):
    title: str
    description: str = ""
    extract: str = ""
    content_urls: Optional[Dict[str, Any]] = None


class ScoreBody(BaseModel):
    user: StrictStr = Field(min_length=1)
    score: Union[StrictInt, StrictFloat]


class MessageResponse(BaseModel):
    message: str
