import json

import pytest

from resume_optimizer.analysis import analyze_resume, build_messages, build_result
from resume_optimizer.errors import EmptyReply, ProviderError, UnparseableResponse

from .conftest import WELL_FORMED, StubChatClient

RESUME = "Jane Doe\nPlatform engineer, 6 years of AWS."


def test_messages_embed_job_title_and_resume():
    system, user = build_messages(RESUME, "Site Reliability Engineer")

    assert system["role"] == "system"
    assert '"optimized_text"' in system["content"]
    assert "ATS score (0-100)" in system["content"]
    assert user["role"] == "user"
    assert "Job Title: Site Reliability Engineer" in user["content"]
    assert RESUME in user["content"]


def test_missing_fields_fall_back_to_defaults():
    result = build_result({}, RESUME, "m")

    assert result.score == 0
    assert result.keywords == []
    assert result.suggestions == []
    assert result.revised_text == RESUME
    assert result.model_used == "m"


@pytest.mark.parametrize(
    "raw, expected",
    [
        (85, 85), ("64", 64), (77.9, 77), (140, 100), (-5, 0), ("high", 0), (None, 0), (True, 0),
        (10**400, 100), (-(10**400), 0), ("1e400", 100), (float("inf"), 100), (float("nan"), 0),
    ],
)
def test_score_is_coerced_and_clamped(raw, expected):
    assert build_result({"score": raw}, RESUME, "m").score == expected


def test_list_fields_are_cleaned():
    result = build_result(
        {"keywords": ["Go", "", None, 3], "suggestions": "not a list"},
        RESUME,
        "m",
    )
    assert result.keywords == ["Go", "3"]
    assert result.suggestions == []


def test_revised_text_falls_back_to_alternate_key_then_input():
    assert build_result({"revised_text": "new"}, RESUME, "m").revised_text == "new"
    assert build_result({"optimized_text": "   "}, RESUME, "m").revised_text == RESUME


@pytest.mark.asyncio
async def test_well_formed_reply_passes_through():
    client = StubChatClient(json.dumps(WELL_FORMED))

    result = await analyze_resume(client, RESUME, "Platform Engineer", model="some/model")

    assert result.model_dump() == {
        "model_used": "some/model",
        "score": 72,
        "keywords": WELL_FORMED["keywords"],
        "suggestions": WELL_FORMED["suggestions"],
        "revised_text": WELL_FORMED["optimized_text"],
    }
    call = client.calls[0]
    assert call["model"] == "some/model"
    assert call["temperature"] == 0.7
    assert call["max_tokens"] == 4000


@pytest.mark.asyncio
async def test_rate_limited_call_is_retried():
    waits = []

    async def sleep(seconds):
        waits.append(seconds)

    client = StubChatClient(
        ProviderError("OpenRouter API error (429): slow down", upstream_status=429),
        json.dumps(WELL_FORMED),
    )

    result = await analyze_resume(client, RESUME, "Platform Engineer", model="m", sleep=sleep)

    assert result.score == 72
    assert len(client.calls) == 2
    assert waits == [5.0]


@pytest.mark.asyncio
async def test_blank_reply_raises_empty_reply():
    with pytest.raises(EmptyReply):
        await analyze_resume(StubChatClient("  \n"), RESUME, "PM", model="m")


@pytest.mark.asyncio
async def test_prose_reply_raises_unparseable():
    with pytest.raises(UnparseableResponse):
        await analyze_resume(StubChatClient("I cannot do that."), RESUME, "PM", model="m")
