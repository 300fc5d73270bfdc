"""Language preferences, learning directions and batch text parsing."""

from dataclasses import dataclass, field
from enum import Enum

SUPPORTED_LANGUAGES = [
    "German",
    "English",
    "Spanish",
    "French",
    "Italian",
    "Portuguese",
    "Dutch",
    "Swedish",
    "Norwegian",
    "Danish",
    "Polish",
    "Russian",
    "Chinese",
    "Japanese",
    "Korean",
    "Hindi",
    "Bengali",
    "Bangla",
    "Arabic",
    "Turkish",
]


class Direction(str, Enum):
    """Which side of a word is shown and which side is asked for."""

    MAIN_TO_TRANS1 = "main_to_trans1"
    TRANS1_TO_MAIN = "trans1_to_main"
    MAIN_TO_TRANS2 = "main_to_trans2"
    TRANS2_TO_MAIN = "trans2_to_main"


DEFAULT_DIRECTION = Direction.MAIN_TO_TRANS1

# Directions stored before languages became configurable
LEGACY_DIRECTIONS = {
    "german_to_english": Direction.MAIN_TO_TRANS1,
    "english_to_german": Direction.TRANS1_TO_MAIN,
    "german_to_bangla": Direction.MAIN_TO_TRANS2,
    "bangla_to_german": Direction.TRANS2_TO_MAIN,
}


def normalize_direction(value: str) -> str:
    """Map a legacy direction label to its generic form; pass others through."""
    legacy = LEGACY_DIRECTIONS.get(value)
    return legacy.value if legacy else value


def parse_direction(value: str) -> Direction:
    """Return the Direction for a generic or legacy label.

    Raises:
        ValueError: If the label is neither.
    """
    return Direction(normalize_direction(value))


def check_language(value: str) -> str:
    """Strip a language name and check it is supported."""
    value = value.strip()
    if value not in SUPPORTED_LANGUAGES:
        raise ValueError(f"Unsupported language: {value}")
    return value


@dataclass
class LanguageLabels:
    main: str
    translation1: str
    translation2: str


def language_labels(main_language: str, translation_languages: list[str]) -> LanguageLabels:
    """Return display names for the three word columns."""
    return LanguageLabels(
        main=main_language,
        translation1=translation_languages[0] if translation_languages else "Language 1",
        translation2=translation_languages[1] if len(translation_languages) > 1 else "Language 2",
    )


def direction_options(main_language: str, translation_languages: list[str]) -> list[dict[str, str]]:
    """Return ``{value, label}`` pairs for the four learning directions."""
    labels = language_labels(main_language, translation_languages)
    return [
        {"value": Direction.MAIN_TO_TRANS1.value, "label": f"{labels.main} → {labels.translation1}"},
        {"value": Direction.TRANS1_TO_MAIN.value, "label": f"{labels.translation1} → {labels.main}"},
        {"value": Direction.MAIN_TO_TRANS2.value, "label": f"{labels.main} → {labels.translation2}"},
        {"value": Direction.TRANS2_TO_MAIN.value, "label": f"{labels.translation2} → {labels.main}"},
    ]


def prompt_and_answer(
    direction: str,
    main_word: str,
    translation1: str | None,
    translation2: str | None,
) -> tuple[str, str]:
    """Return the (shown, expected) pair for a word in a learning direction.

    Falls back to whichever translation exists when the requested one is empty.
    """
    direction = normalize_direction(direction)
    first = translation1 or translation2 or ""
    second = translation2 or translation1 or ""
    if direction == Direction.TRANS1_TO_MAIN:
        return first, main_word
    if direction == Direction.MAIN_TO_TRANS2:
        return main_word, second
    if direction == Direction.TRANS2_TO_MAIN:
        return second, main_word
    return main_word, first


@dataclass
class ParsedBatch:
    words: list[dict] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


def parse_batch_text(text: str, section: str, labels: LanguageLabels) -> ParsedBatch:
    """Parse ``main-translation1-translation2[-sentence]`` lines.

    Blank lines are ignored. Lines with the wrong number of parts, or with an
    empty word or translation, are reported in ``errors`` with their line number.
    """
    result = ParsedBatch()
    lines = [line.strip() for line in text.splitlines()]
    lines = [line for line in lines if line]

    for index, line in enumerate(lines, 1):
        parts = [part.strip() for part in line.split("-")]
        if len(parts) < 3 or len(parts) > 4:
            result.errors.append(
                f"Line {index}: Invalid format. Expected "
                f'"{labels.main}-{labels.translation1}-{labels.translation2}-[optional sentence]", '
                f'got "{line}"'
            )
            continue
        if not all(parts[:3]):
            result.errors.append(
                f"Line {index}: {labels.main}, {labels.translation1} and "
                f'{labels.translation2} are required, got "{line}"'
            )
            continue
        result.words.append(
            {
                "main_word": parts[0],
                "translation1": parts[1],
                "translation2": parts[2],
                "example_sentence": parts[3] if len(parts) == 4 and parts[3] else None,
                "section": section,
            }
        )

    return result
