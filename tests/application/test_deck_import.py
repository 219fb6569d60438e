from unittest.mock import AsyncMock, MagicMock

import pytest

from vocabmaster.application.deck_import import import_deck_file, parse_deck_yaml
from vocabmaster.domain.errors import ValidationError
from vocabmaster.domain.ports import DeckRepository

DECK_YAML = """\
deck: IELTS Core
description: Band 7 vocabulary
words:
  - term: ubiquitous
    definition: present everywhere
    example: Smartphones are ubiquitous.
  - term: mitigate
    definition: make less severe
    phonetic: /ˈmɪtɪɡeɪt/
  - term: orphan
  - just a string
"""


def test_parse_deck_yaml():
    deck, problems = parse_deck_yaml(DECK_YAML)

    assert deck.name == "IELTS Core"
    assert deck.description == "Band 7 vocabulary"
    assert [w.term for w in deck.words] == ["ubiquitous", "mitigate"]
    assert deck.words[0].example == "Smartphones are ubiquitous."
    assert deck.words[1].phonetic == "/ˈmɪtɪɡeɪt/"
    assert len(problems) == 2
    assert problems[0].startswith("entry 3")


def test_parse_uses_default_name():
    deck, _ = parse_deck_yaml("words: []", default_name="verbs")
    assert deck.name == "verbs"
    assert deck.words == []


def test_parse_strips_bom_and_tabs():
    text = "\ufeffdeck: Tabs\nwords:\n\t- term: a\n\t  definition: b\n"
    deck, problems = parse_deck_yaml(text)
    assert deck.name == "Tabs"
    assert len(deck.words) == 1
    assert problems == []


@pytest.mark.parametrize(
    "text, message",
    [
        ("- a\n- b\n", "mapping"),
        ("words: []\n", "no 'deck' name"),
        ("deck: X\nwords: nope\n", "must be a list"),
        ("deck: X\ndeck: Y\n", "Invalid deck file"),
        ("deck: [unclosed\n", "Invalid deck file"),
    ],
)
def test_parse_rejects_malformed_documents(text, message):
    with pytest.raises(ValidationError, match=message):
        parse_deck_yaml(text)


@pytest.mark.asyncio
async def test_import_deck_file(tmp_path):
    path = tmp_path / "ielts.yaml"
    path.write_text(DECK_YAML, encoding="utf-8")
    repo = MagicMock(spec=DeckRepository)
    repo.add_deck = AsyncMock(return_value=7)
    repo.add_item = AsyncMock(side_effect=[101, 102])

    result = await import_deck_file(repo, path)

    repo.add_deck.assert_awaited_once_with("IELTS Core", "Band 7 vocabulary")
    assert repo.add_item.await_count == 2
    repo.add_item.assert_any_await(
        7, "ubiquitous", "present everywhere", "Smartphones are ubiquitous.", None
    )
    assert result.deck_id == 7
    assert result.imported == 2
    assert len(result.skipped) == 2


@pytest.mark.asyncio
async def test_import_name_override(tmp_path):
    path = tmp_path / "verbs.yaml"
    path.write_text("words:\n  - term: go\n    definition: move\n", encoding="utf-8")
    repo = MagicMock(spec=DeckRepository)
    repo.add_deck = AsyncMock(return_value=1)
    repo.add_item = AsyncMock(return_value=1)

    result = await import_deck_file(repo, path, deck_name="Irregular")

    repo.add_deck.assert_awaited_once_with("Irregular", None)
    assert result.deck_name == "Irregular"


@pytest.mark.asyncio
async def test_import_missing_file(tmp_path):
    repo = MagicMock(spec=DeckRepository)
    with pytest.raises(ValidationError, match="Cannot read"):
        await import_deck_file(repo, tmp_path / "missing.yaml")
