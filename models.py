from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

UNSET_ANSWER = "未设置"


class QuestionType(str, enum.Enum):
    SINGLE = "single"
    MULTIPLE = "multiple"
    JUDGMENT = "judgment"
    FILL = "fill"
    ESSAY = "essay"


TYPE_LABELS = {
    QuestionType.SINGLE: "单选题",
    QuestionType.MULTIPLE: "多选题",
    QuestionType.JUDGMENT: "判断题",
    QuestionType.FILL: "填空题",
    QuestionType.ESSAY: "简答题",
}


class SessionKind(str, enum.Enum):
    STUDY = "study"
    SEQUENTIAL_EXAM = "sequential"
    RANDOM_EXAM = "random"


class SessionState(str, enum.Enum):
    ACTIVE = "active"
    SUBMITTED = "submitted"
    DISCARDED = "discarded"


@dataclass
class Question:
    id: str
    content: str
    answer: str
    type: QuestionType
    category_id: str
    options: List[str] = field(default_factory=list)
    explanation: Optional[str] = None


@dataclass
class Category:
    id: str
    name: str


@dataclass(frozen=True)
class ExamResult:
    id: str
    timestamp: datetime
    score: int
    total: int
    kind: str  # "random" | "sequential"


@dataclass(frozen=True)
class SubmissionResult:
    score: int
    total: int
    wrong_ids: tuple[str, ...]
    correctness: dict[str, bool]
