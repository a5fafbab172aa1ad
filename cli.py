import argparse
import logging
from pathlib import Path

from api.utils.json_utils import json_dump, read_json_file, write_json_file
from core.context import QuizContext
from core.errors import QuizError
from core.logging_setup import setup_console_logging
from serialization import deserialize_snapshot, serialize_snapshot
from text_extract import QuestionTextExtractor

log = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Parse a question file (.txt, .md, .docx) into a quiz backup document"
    )
    parser.add_argument("file", type=Path, help="Path to the question file")
    parser.add_argument(
        "--category",
        type=str,
        default=None,
        help="Category name (defaults to the file name); an existing one is merged into",
    )
    parser.add_argument(
        "--snapshot",
        type=Path,
        default=None,
        help="Existing backup to add the questions to",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write JSON here instead of printing it",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def load_base_context(snapshot_path: Path | None) -> QuizContext:
    if snapshot_path is None:
        return QuizContext()
    document = read_json_file(
        snapshot_path, {"questions": [], "categories": [], "userState": {}}
    )
    return deserialize_snapshot(document)


def import_file(
    context: QuizContext, file_path: Path, category_name: str | None = None
) -> list[str]:
    """Parse ``file_path`` into ``context``. Returns the extractor log lines."""
    category, created = context.resolve_import_category(
        category_name or file_path.stem, merge=True
    )
    extractor = QuestionTextExtractor(file_path, category.id)
    questions = extractor.extract()
    if not questions:
        raise QuizError(f"No questions recognised in {file_path}")
    if created:
        context.add_category(category.name, category_id=category.id)
    context.import_questions(questions)
    return extractor.logs


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_console_logging(logging.DEBUG if args.verbose else logging.INFO)
    try:
        context = load_base_context(args.snapshot)
        for line in import_file(context, args.file, args.category):
            log.info(line)
    except (QuizError, OSError, ValueError) as exc:
        log.error("Cannot import %s: %s", args.file, exc)
        return 1

    payload = serialize_snapshot(context)
    if args.output is None:
        print(json_dump(payload))
    else:
        write_json_file(args.output, payload)
        print(f"Saved {len(payload['questions'])} questions to {args.output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
