import asyncio
import json

import pytest

from journal.constants import EMPTY_REPORT, TRENDS_EMPTY_MESSAGE
from journal.errors import NarrationError, NotConfiguredError
from journal.models import EmotionEntry, ReportAnalysis
from journal.services.narration import NarrationService, format_entries, insight_prompt


class FakeResponse:
    def __init__(self, text):
        self.text = text


class FakeModel:
    def __init__(self, text="", error=None):
        self.text = text
        self.error = error
        self.calls = []

    async def generate_content_async(self, prompt, generation_config=None):
        self.calls.append((prompt, generation_config))
        if self.error is not None:
            raise self.error
        return FakeResponse(self.text)


ENTRIES = [
    EmotionEntry(date="2024-04-01", emotion="calm", intensity=3, notes="Slow morning"),
    EmotionEntry(date="2024-04-02", emotion="anxious", intensity=8),
]


def test_empty_inputs_never_reach_the_model():
    model = FakeModel("unused")
    service = NarrationService(api_key="key", model=model)

    assert asyncio.run(service.get_trends_summary([])) == TRENDS_EMPTY_MESSAGE
    report = asyncio.run(service.get_report_analysis([], "2024-01-01", "2024-01-31"))
    assert report == ReportAnalysis.model_validate(EMPTY_REPORT)
    assert model.calls == []


def test_insight_returns_model_text():
    model = FakeModel("You seem at peace today.")
    service = NarrationService(api_key="key", model=model)

    text = asyncio.run(service.get_emotion_insight(ENTRIES[0]))

    assert text == "You seem at peace today."
    prompt, config = model.calls[0]
    assert "Slow morning" in prompt
    assert config.temperature == 0.7
    assert config.top_k == 32


def test_trends_use_warmer_sampling():
    model = FakeModel("A steady month.")
    asyncio.run(NarrationService(api_key="key", model=model).get_trends_summary(ENTRIES))
    prompt, config = model.calls[0]
    assert "2024-04-02" in prompt
    assert config.temperature == 0.8
    assert config.top_k == 40


def test_report_is_parsed_from_json():
    payload = {
        "summary": "Mostly calm.",
        "emotionFrequency": "Calm once, anxious once.",
        "intensityTrend": "Average 5.5.",
        "insights": "Keep the slow mornings.",
    }
    model = FakeModel(json.dumps(payload))
    service = NarrationService(api_key="key", model=model)

    report = asyncio.run(service.get_report_analysis(ENTRIES, "2024-04-01", "2024-04-30"))

    assert report.summary == "Mostly calm."
    assert report.intensity_trend == "Average 5.5."
    assert model.calls[0][1].response_mime_type == "application/json"


def test_malformed_report_fails():
    model = FakeModel('{"summary": "only this"}')
    with pytest.raises(NarrationError, match="wellness report"):
        asyncio.run(NarrationService(api_key="key", model=model).get_report_analysis(ENTRIES, "a", "b"))


def test_model_failures_name_the_report_type():
    model = FakeModel(error=RuntimeError("quota exceeded"))
    with pytest.raises(NarrationError) as excinfo:
        asyncio.run(NarrationService(api_key="key", model=model).get_emotion_insight(ENTRIES[1]))
    assert "emotion insight" in str(excinfo.value)
    assert "quota exceeded" in str(excinfo.value)


def test_empty_model_reply_is_an_error():
    with pytest.raises(NarrationError):
        asyncio.run(NarrationService(api_key="key", model=FakeModel("")).get_trends_summary(ENTRIES))


def test_missing_api_key_is_not_configured():
    with pytest.raises(NotConfiguredError):
        asyncio.run(NarrationService(api_key=None).get_emotion_insight(ENTRIES[0]))


def test_prompts_fill_in_missing_notes():
    assert "No notes were provided." in insight_prompt(ENTRIES[1])
    assert format_entries(ENTRIES).splitlines()[1] == (
        '- On 2024-04-02, felt anxious (Intensity: 8/10). Notes: "No notes."'
    )
