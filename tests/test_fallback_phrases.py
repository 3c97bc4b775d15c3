import json

import pytest

from buzzword.fallback_phrases import (
    DEFAULT_PHRASES,
    bucket_for_tier,
    get_default_phrase,
    load_offline_table,
    parse_offline_records,
)


@pytest.mark.unit
@pytest.mark.parametrize("tier,bucket", [(-1, "low"), (0, "low"), (1, "low"), (2, "mid"), (3, "high"), (10, "high")])
def test_bucket_for_tier(tier, bucket):
    assert bucket_for_tier(tier) == bucket


@pytest.mark.unit
def test_default_phrases():
    assert get_default_phrase(1, "en").target_word == "cat"
    assert get_default_phrase(2, "es").target_word == "acúfeno"
    assert get_default_phrase(7, "en").target_word == "hippopotomonstrosesquippedaliophobia"
    assert get_default_phrase(1, "pt").language == "en"


@pytest.mark.unit
def test_every_bucket_has_every_language():
    for bucket in ("low", "mid", "high"):
        assert set(DEFAULT_PHRASES[bucket]) == {"en", "es"}


@pytest.mark.unit
def test_parse_offline_records_skips_invalid():
    records = [
        {"phrase": "A pet", "targetWord": "cat", "acceptedAnswers": ["kitty"], "language": "en", "difficulty": 1},
        {"phrase": "No target", "language": "en", "difficulty": 1},
        {"phrase": "Bad tier", "targetWord": "x", "difficulty": 0},
        "not a record",
    ]
    table = parse_offline_records(records)
    assert len(table) == 1
    assert table[0].target_word == "cat"


@pytest.mark.unit
def test_load_bundled_table():
    table = load_offline_table()
    assert len(table) >= 30
    combos = {(p.difficulty, p.language) for p in table}
    for tier in (1, 2, 3):
        for lang in ("en", "es"):
            assert (tier, lang) in combos


@pytest.mark.unit
def test_load_table_from_file(tmp_path):
    path = tmp_path / "prompts.json"
    path.write_text(json.dumps({"prompts": [
        {"phrase": "Big grey animal", "targetWord": "elephant", "acceptedAnswers": [], "language": "en", "difficulty": 2},
    ]}), encoding="utf-8")
    table = load_offline_table(path)
    assert [p.target_word for p in table] == ["elephant"]


@pytest.mark.unit
def test_load_table_accepts_bare_list(tmp_path):
    path = tmp_path / "prompts.json"
    path.write_text(json.dumps([{"phrase": "p", "targetWord": "t"}]), encoding="utf-8")
    assert len(load_offline_table(path)) == 1


@pytest.mark.unit
def test_missing_or_broken_table_is_empty(tmp_path):
    assert load_offline_table(tmp_path / "missing.json") == ()
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    assert load_offline_table(broken) == ()
