"""
Deck import from YAML word lists.

Expected shape:

    deck: IELTS Core
    description: Band 7 vocabulary
    words:
      - term: ubiquitous
        definition: present everywhere
        example: Smartphones are ubiquitous.
        phonetic: /juːˈbɪkwɪtəs/
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml  # type: ignore
import yaml.constructor

from vocabmaster.domain.errors import ValidationError
from vocabmaster.domain.ports import DeckRepository

logger = logging.getLogger(__name__)


class UniqueKeyLoader(yaml.SafeLoader):
    """Custom YAML loader that forbids duplicate keys."""

    def construct_mapping(self, node, deep=False):
        mapping = set()
        for key_node, _ in node.value:
            key = self.construct_object(key_node, deep=deep)
            if key in mapping:
                raise yaml.constructor.ConstructorError(
                    None, None, f"found duplicate key '{key}'", key_node.start_mark
                )
            mapping.add(key)
        return super().construct_mapping(node, deep)


@dataclass
class WordEntry:
    term: str
    definition: str
    example: str | None = None
    phonetic: str | None = None


@dataclass
class DeckFile:
    name: str
    description: str | None = None
    words: list[WordEntry] = field(default_factory=list)


@dataclass
class ImportResult:
    deck_id: int
    deck_name: str
    imported: int
    skipped: list[str]  # Human-readable reasons, one per skipped entry


def parse_deck_yaml(text: str, default_name: str | None = None) -> tuple[DeckFile, list[str]]:
    """
    Parse a YAML deck document.

    Returns the parsed deck and a list of problems for entries that were
    skipped. A document that is not a mapping, or has no deck name and no
    default, raises ValidationError.
    """
    text = text.lstrip("\ufeff")
    if "\t" in text:
        text = text.replace("\t", "  ")

    try:
        meta = yaml.load(text, Loader=UniqueKeyLoader) or {}
    except yaml.YAMLError as e:
        raise ValidationError(f"Invalid deck file: {e}") from e

    if not isinstance(meta, dict):
        raise ValidationError("Deck file must be a mapping with 'deck' and 'words' keys")

    name = meta.get("deck") or default_name
    if not name or not isinstance(name, str):
        raise ValidationError("Deck file has no 'deck' name")

    raw_words = meta.get("words", [])
    if not isinstance(raw_words, list):
        raise ValidationError("'words' must be a list")

    words: list[WordEntry] = []
    problems: list[str] = []
    for index, raw in enumerate(raw_words, start=1):
        entry = _parse_word(raw)
        if entry is None:
            problems.append(f"entry {index}: needs non-empty 'term' and 'definition'")
            continue
        words.append(entry)

    return DeckFile(name=name.strip(), description=meta.get("description"), words=words), problems


def _parse_word(raw: Any) -> WordEntry | None:
    if not isinstance(raw, dict):
        return None
    term = str(raw.get("term") or "").strip()
    definition = str(raw.get("definition") or "").strip()
    if not term or not definition:
        return None
    return WordEntry(
        term=term,
        definition=definition,
        example=raw.get("example"),
        phonetic=raw.get("phonetic"),
    )


async def import_deck_file(
    repo: DeckRepository, path: Path, deck_name: str | None = None
) -> ImportResult:
    """
    Import a YAML deck file into the collection.

    Args:
        repo: Deck repository (port) to write into.
        path: YAML file to read.
        deck_name: Overrides the name in the file.

    Returns:
        ImportResult with counts and skipped-entry reasons.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ValidationError(f"Cannot read {path}: {e}") from e

    deck, problems = parse_deck_yaml(text, default_name=path.stem)
    name = deck_name or deck.name

    deck_id = await repo.add_deck(name, deck.description)
    for word in deck.words:
        await repo.add_item(deck_id, word.term, word.definition, word.example, word.phonetic)

    for problem in problems:
        logger.warning(f"{path.name}: skipped {problem}")
    logger.info(f"Imported {len(deck.words)} words into '{name}'")

    return ImportResult(
        deck_id=deck_id, deck_name=name, imported=len(deck.words), skipped=problems
    )
