"""CSV export and import of a user's word list."""

import csv
import io
import logging
from dataclasses import dataclass, field
from datetime import date

from pydantic import ValidationError

from backend.api.schemas import WordCreate
from backend.models.word import Word

logger = logging.getLogger(__name__)

EXPORT_FIELDS = [
    "mainWord",
    "translation1",
    "translation2",
    "exampleSentence",
    "notes",
    "section",
    "important",
    "createdAt",
    "updatedAt",
]

REQUIRED_COLUMNS = {"mainWord", "section"}

UTF8_BOM = "\ufeff"

TRUE_VALUES = {"true", "1", "yes", "y"}


class CsvImportError(Exception):
    """The uploaded file is not a usable word list."""

    def __init__(self, message: str, details: list[str] | None = None) -> None:
        super().__init__(message)
        self.details = details or []


@dataclass
class ParsedCsv:
    rows: list[dict] = field(default_factory=list)  # WordCreate fields plus ``important``


def export_filename(today: date) -> str:
    return f"recallio-words-{today.isoformat()}.csv"


def export_words(words: list[Word]) -> str:
    """Render words as CSV text, prefixed with a BOM so spreadsheets detect UTF-8."""
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=EXPORT_FIELDS, lineterminator="\n")
    writer.writeheader()
    for word in words:
        writer.writerow(
            {
                "mainWord": word.main_word,
                "translation1": word.translation1 or "",
                "translation2": word.translation2 or "",
                "exampleSentence": word.example_sentence or "",
                "notes": word.notes or "",
                "section": word.section,
                "important": "true" if word.important else "false",
                "createdAt": word.created_at.isoformat() if word.created_at else "",
                "updatedAt": word.updated_at.isoformat() if word.updated_at else "",
            }
        )
    return UTF8_BOM + buffer.getvalue()


def parse_words_csv(content: bytes | str) -> ParsedCsv:
    """Parse and validate an uploaded word list.

    Every row must validate; otherwise CsvImportError lists the bad rows
    (numbered from 2, the header being row 1).
    """
    if isinstance(content, bytes):
        try:
            text = content.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise CsvImportError("File is not valid UTF-8") from exc
    else:
        text = content.removeprefix(UTF8_BOM)

    reader = csv.DictReader(io.StringIO(text))
    columns = {name.strip() for name in reader.fieldnames or [] if name}
    missing = REQUIRED_COLUMNS - columns
    if missing:
        raise CsvImportError(f"Missing required columns: {', '.join(sorted(missing))}")

    parsed = ParsedCsv()
    errors: list[str] = []
    for row_number, raw in enumerate(reader, 2):
        record = {
            (key or "").strip(): value.strip() if isinstance(value, str) else ""
            for key, value in raw.items()
        }
        if not any(record.values()):
            continue
        try:
            word = WordCreate.model_validate(record)
        except ValidationError as exc:
            messages = "; ".join(err["msg"] for err in exc.errors())
            errors.append(f"Row {row_number}: {messages}")
            continue
        row = word.model_dump()
        row["important"] = record.get("important", "").lower() in TRUE_VALUES
        parsed.rows.append(row)

    if errors:
        raise CsvImportError("Invalid data format", errors)

    logger.info("Parsed %d words from CSV", len(parsed.rows))
    return parsed
