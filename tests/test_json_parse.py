import json

import pytest

from learnpath.core.errors import ExtractionError
from learnpath.llm.json_parse import extract_json
from tests.fakes import fenced, plan_dict


def test_fenced_json_block_is_preferred():
    text = 'Sure! Here is {not json} your plan:\n' + fenced({"a": 1}) + "\nHope it helps {x}"
    assert extract_json(text) == {"a": 1}


def test_unlabeled_fence():
    assert extract_json('```\n{"a": [1, 2]}\n```') == {"a": [1, 2]}


def test_fence_of_other_language_is_skipped():
    text = '```yaml\n{a: 1}\n```\nand as JSON:\n```json\n{"ok": true}\n```'
    assert extract_json(text) == {"ok": True}


def test_brace_span_without_fence():
    assert extract_json('The plan is {"title": "x", "n": {"k": 2}} done.') == {"title": "x", "n": {"k": 2}}


def test_round_trip_through_fence_and_bare_text():
    obj = plan_dict(steps=3)
    raw = json.dumps(obj)
    assert extract_json(fenced(obj)) == json.loads(raw)
    assert extract_json(raw) == obj
    assert extract_json(json.dumps(extract_json(raw))) == obj


def test_no_object_raises_with_preview():
    with pytest.raises(ExtractionError) as exc:
        extract_json("I cannot help with that.")
    assert exc.value.preview.startswith("I cannot help")
    assert exc.value.status_code == 500


def test_malformed_json_raises_with_short_preview():
    bad = "{" + '"title": "x", ' * 100 + "}"
    with pytest.raises(ExtractionError) as exc:
        extract_json(bad)
    assert len(exc.value.preview) <= 200
    assert exc.value.preview.startswith('{"title"')


def test_fenced_array_is_not_an_object():
    with pytest.raises(ExtractionError):
        extract_json('```json\n[{"a": 1}]\n```')


def test_backticks_inside_string_values_are_not_fences():
    obj = plan_dict(steps=2)
    obj["steps"][1]["description"] = "Write a dict literal like ```{'a': 1}``` in the REPL."
    assert extract_json(json.dumps(obj)) == obj
    assert extract_json(fenced(obj)) == obj


def test_fenced_plan_with_inline_backticks():
    obj = plan_dict()
    obj["steps"][0]["description"] = "Run ```pip install requests``` first."
    assert extract_json("Here you go:\n" + fenced(obj)) == obj


def test_unparseable_fence_body_falls_back_to_brace_span():
    assert extract_json('```\njson\n{"a": 1}\n```') == {"a": 1}
