from __future__ import annotations

import logging
import re
import uuid
from collections import Counter
from dataclasses import dataclass, field
from functools import reduce
from pathlib import Path
from typing import Callable, Iterable, Optional

from docx import Document

from core.errors import UnsupportedFormatError
from models import UNSET_ANSWER, Question, QuestionType

log = logging.getLogger(__name__)

# "1." "1、" "1)" "1．" "1 " or "(1)"
QUESTION_MARKER_RE = re.compile(r"^([0-9]+[.、)\s．、]|\([0-9]+\))")
QUESTION_PREFIX_RE = re.compile(r"^([0-9]+[.、)\s．、]|\([0-9]+\))\s*")

# Capital letters only: "A." "B、" "C)" "D " "(E)"
OPTION_MARKER = r"(?:[A-Z][.、)\s．、]|\([A-Z]\))"
OPTION_MARKER_RE = re.compile(OPTION_MARKER)
OPTION_START_RE = re.compile("^" + OPTION_MARKER)
# Packed "A. x B. y" lines are split on whitespace that precedes a marker.
# Option text containing "<space>X." style fragments gets split too; this is
# the accepted behaviour for existing question banks.
OPTION_SPLIT_RE = re.compile(r"\s+(?=" + OPTION_MARKER + ")")

ANSWER_LABELS = r"(答案|Answer|Ans|参考答案|【答案】)"
ANSWER_RE = re.compile("^" + ANSWER_LABELS + r"[:：]?")
ANSWER_PREFIX_RE = re.compile("^" + ANSWER_LABELS + r"[:：]?\s*")

TYPE_TAG_RE = re.compile(r"^\[(判断|选择|单选|多选|填空|问答|简答).{0,2}\]")

JUDGMENT_ANSWER_TOKENS = frozenset(
    {"对", "错", "正确", "错误", "T", "F", "√", "×", "TRUE", "FALSE"}
)

ANSWER_LETTERS_RE = re.compile(r"^[A-Z\s,]+", re.IGNORECASE)
NON_LETTER_RE = re.compile(r"[^A-Za-z]")

TEXT_SUFFIXES = {".txt", ".md"}
DOCX_SUFFIXES = {".docx"}


def new_question_id() -> str:
    return uuid.uuid4().hex


@dataclass
class Draft:
    """A question being accumulated while scanning lines."""

    content: str
    options: list[str] = field(default_factory=list)
    answer: Optional[str] = None
    type: Optional[QuestionType] = None


@dataclass
class ScanState:
    category_id: str
    id_factory: Callable[[], str] = new_question_id
    draft: Optional[Draft] = None
    finished: list[Question] = field(default_factory=list)


def type_from_tag(tag_line: str) -> Optional[QuestionType]:
    if "判断" in tag_line:
        return QuestionType.JUDGMENT
    if "填空" in tag_line:
        return QuestionType.FILL
    if "问答" in tag_line or "简答" in tag_line:
        return QuestionType.ESSAY
    if "多选" in tag_line:
        return QuestionType.MULTIPLE
    if "单选" in tag_line:
        return QuestionType.SINGLE
    # "[选择题]" says nothing about single vs multiple
    return None


def infer_question_type(options: list[str], answer: Optional[str]) -> QuestionType:
    if not options:
        return QuestionType.ESSAY
    match = ANSWER_LETTERS_RE.match(answer or "")
    letters = NON_LETTER_RE.sub("", match.group(0)).upper() if match else ""
    return QuestionType.MULTIPLE if len(letters) > 1 else QuestionType.SINGLE


def finalize_draft(
    draft: Draft,
    category_id: str,
    id_factory: Callable[[], str] = new_question_id,
) -> Optional[Question]:
    """Turn a draft into a Question, or None when it has no content."""
    if not draft.content:
        return None
    question_type = draft.type or infer_question_type(draft.options, draft.answer)
    return Question(
        id=id_factory(),
        content=draft.content,
        answer=draft.answer or UNSET_ANSWER,
        type=question_type,
        category_id=category_id,
        options=list(draft.options),
    )


def _close_draft(state: ScanState) -> ScanState:
    if state.draft is not None:
        question = finalize_draft(state.draft, state.category_id, state.id_factory)
        if question is not None:
            state.finished.append(question)
    state.draft = None
    return state


def _split_packed_options(line: str) -> list[str]:
    return [part for part in OPTION_SPLIT_RE.split(line) if OPTION_START_RE.match(part)]


def consume_line(state: ScanState, line: str) -> ScanState:
    if QUESTION_MARKER_RE.match(line):
        state = _close_draft(state)
        state.draft = Draft(content=QUESTION_PREFIX_RE.sub("", line, count=1))
        return state

    draft = state.draft
    if draft is None:
        return state

    if OPTION_START_RE.match(line) and len(OPTION_MARKER_RE.findall(line)) > 1:
        draft.options.extend(_split_packed_options(line))
    elif OPTION_START_RE.match(line):
        draft.options.append(line)
    elif ANSWER_RE.match(line):
        answer = ANSWER_PREFIX_RE.sub("", line, count=1).strip()
        draft.answer = answer
        if answer.upper() in JUDGMENT_ANSWER_TOKENS:
            draft.type = QuestionType.JUDGMENT
    elif TYPE_TAG_RE.match(line):
        draft.type = type_from_tag(line) or draft.type
    elif not draft.options and not draft.answer:
        draft.content = f"{draft.content}\n{line}" if draft.content else line
    return state


def iter_clean_lines(text: str) -> Iterable[str]:
    for raw in text.splitlines():
        line = raw.replace("\ufeff", "").strip()
        if line:
            yield line


def parse_text_to_questions(
    text: str,
    category_id: str,
    id_factory: Callable[[], str] = new_question_id,
) -> list[Question]:
    """Parse loosely formatted question text.

    Never raises on malformed input: text without any question marker simply
    yields an empty list.
    """
    state = ScanState(category_id=category_id, id_factory=id_factory)
    state = reduce(consume_line, iter_clean_lines(text or ""), state)
    return _close_draft(state).finished


class QuestionTextExtractor:
    def __init__(self, file_path: Path, category_id: str):
        self.file_path = Path(file_path)
        self.category_id = category_id
        self.logs: list[str] = []

    def _read_docx(self) -> str:
        doc = Document(self.file_path)
        chunks = [paragraph.text for paragraph in doc.paragraphs]
        for table in doc.tables:
            for row in table.rows:
                for cell in row.cells:
                    chunks.append(cell.text)
        log.debug(
            "DOCX loaded: paragraphs=%d tables=%d", len(doc.paragraphs), len(doc.tables)
        )
        return "\n".join(chunks)

    def read_text(self) -> str:
        suffix = self.file_path.suffix.lower()
        if suffix in TEXT_SUFFIXES:
            return self.file_path.read_text(encoding="utf-8-sig")
        if suffix in DOCX_SUFFIXES:
            return self._read_docx()
        raise UnsupportedFormatError()

    def extract(self) -> list[Question]:
        log.info("=== EXTRACT START: %s ===", self.file_path)
        self.logs.clear()
        self.logs.append(f"文件: {self.file_path.name}")

        text = self.read_text()
        line_count = sum(1 for _ in iter_clean_lines(text))
        self.logs.append(f"有效行数: {line_count}")

        questions = parse_text_to_questions(text, self.category_id)
        counts = Counter(question.type.value for question in questions)
        self.logs.append(f"识别题目: {len(questions)}")
        for question_type in QuestionType:
            if counts.get(question_type.value):
                self.logs.append(f"  {question_type.value}: {counts[question_type.value]}")

        log.info("Lines: %d, questions parsed: %d", line_count, len(questions))
        log.info("=== EXTRACT END ===")
        return questions
