"""Data models for topics, questions, the catalog and test history.

Content documents keep the field names of the static JSON files (``question``,
``answer``, ``file``, ``weightage`` ...). Aliases map them onto Python names,
and ``populate_by_name`` lets code build models with either form.
"""
from enum import Enum
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

QuestionKey = tuple[Optional[str], int | str]


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class Topic(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    name: str
    content_ref: str = Field(alias="file")
    weight: float = Field(default=0, alias="weightage")


class Question(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int | str
    topic_id: Optional[str] = Field(default=None, alias="topic")
    prompt: str = Field(alias="question")
    options: list[str] = Field(min_length=2)
    correct_answer: str = Field(alias="answer")
    explanation: str = ""
    marks: int = Field(default=1, ge=1)
    difficulty: Optional[Difficulty] = None
    question_type: Optional[str] = None
    year_asked: Optional[int | str] = None

    @field_validator("explanation", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return v if v is not None else ""

    @field_validator("marks", mode="before")
    @classmethod
    def none_to_one(cls, v):
        return v if v is not None else 1

    @field_validator("difficulty", mode="before")
    @classmethod
    def normalize_difficulty(cls, v):
        if isinstance(v, str):
            return v.strip().lower() or None
        return v

    @model_validator(mode="after")
    def check_answer_in_options(self):
        if self.correct_answer not in self.options:
            raise ValueError(f"answer {self.correct_answer!r} is not one of the options")
        return self

    @property
    def key(self) -> QuestionKey:
        return (self.topic_id, self.id)


class PaperConfig(BaseModel):
    distribution: dict[str, Annotated[int, Field(ge=0)]] = Field(default_factory=dict)


class PaperConfigs(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    full_test: PaperConfig = Field(default_factory=PaperConfig, alias="fullTest")


class Catalog(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    topics: list[Topic] = Field(min_length=1)
    test_configs: PaperConfigs = Field(default_factory=PaperConfigs, alias="testConfigs")

    @model_validator(mode="after")
    def check_unique_topic_ids(self):
        ids = [t.id for t in self.topics]
        if len(ids) != len(set(ids)):
            raise ValueError("topic ids must be unique")
        return self

    @property
    def distribution(self) -> dict[str, int]:
        return self.test_configs.full_test.distribution

    def get_topic(self, topic_id: str) -> Topic | None:
        for topic in self.topics:
            if topic.id == topic_id:
                return topic
        return None

    def has_topic(self, topic_id: str) -> bool:
        return self.get_topic(topic_id) is not None

    def topic_name(self, topic_id: str | None) -> str:
        if not topic_id or topic_id == "unknown":
            return "General"
        topic = self.get_topic(topic_id)
        return topic.name if topic else topic_id


class HistoryRecord(BaseModel):
    """Snapshot of a submitted test, stored in the original history shape."""
    model_config = ConfigDict(populate_by_name=True)

    id: int
    date: str
    topic_scope: str = Field(default="all", alias="topic")
    score: int
    total_marks: int = Field(alias="total")
    question_ids: list[int | str] = Field(alias="questionIds")
    # None marks a record written before topics were stored; it cannot be replayed.
    question_topics: Optional[list[Optional[str]]] = Field(default=None, alias="questionTopics")
    user_answers: list[Optional[str]] = Field(default_factory=list, alias="userAnswers")
    correct_answers: list[Optional[str]] = Field(default_factory=list, alias="correctAnswers")

    @property
    def is_replayable(self) -> bool:
        return self.question_topics is not None

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
