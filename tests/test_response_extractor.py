import pytest

from app.services.errors import MalformedResponse
from app.services.response_extractor import extract_json, strip_code_fences


PAYLOAD = '{"gaps": [{"skill": "Docker", "priority": "critical"}], "summary": "Learn {containers}"}'


def test_fenced_response_matches_unfenced():
    fenced = f"Here is the analysis you asked for:\n```json\n{PAYLOAD}\n```\nLet me know if you need more."
    assert extract_json(fenced) == extract_json(PAYLOAD)


def test_untagged_fence_and_uppercase_tag():
    assert extract_json(f"```\n{PAYLOAD}\n```") == extract_json(PAYLOAD)
    assert extract_json(f"```JSON\n{PAYLOAD}```") == extract_json(PAYLOAD)


def test_prose_around_bare_object():
    result = extract_json(f"Sure! {PAYLOAD} Hope that helps.")
    assert result["gaps"][0]["skill"] == "Docker"


def test_no_json_raises():
    with pytest.raises(MalformedResponse, match="no JSON found"):
        extract_json("I cannot help with that.")


def test_invalid_json_raises_with_snippet():
    with pytest.raises(MalformedResponse) as exc_info:
        extract_json('```json\n{"gaps": [1, 2,}\n```')
    assert "Failed to parse JSON response" in str(exc_info.value)
    assert exc_info.value.snippet.startswith('{"gaps"')


def test_empty_response_raises():
    with pytest.raises(MalformedResponse):
        extract_json("")
    with pytest.raises(MalformedResponse):
        extract_json(None)


def test_strip_code_fences():
    assert strip_code_fences("```python\nprint(1)\n```") == "print(1)\n"
