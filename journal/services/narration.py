from __future__ import annotations

import json
import logging
from typing import Iterable

import google.generativeai as genai
from pydantic import ValidationError as PydanticValidationError

from journal.constants import EMPTY_REPORT, TRENDS_EMPTY_MESSAGE
from journal.errors import NarrationError, NotConfiguredError
from journal.models import EmotionEntry, ReportAnalysis

logger = logging.getLogger(__name__)

INSIGHT = "emotion insight"
TRENDS = "trends summary"
REPORT = "wellness report"

REPORT_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "summary": {
            "type": "STRING",
            "description": "High-level overview of the user's emotional state in this period, 2-3 sentences.",
        },
        "emotionFrequency": {
            "type": "STRING",
            "description": "The most common emotions with counts or percentages and what the pattern says, 2-3 sentences.",
        },
        "intensityTrend": {
            "type": "STRING",
            "description": "Average intensity, whether it ran high or low, and any spikes, 2-3 sentences.",
        },
        "insights": {
            "type": "STRING",
            "description": "Two or three supportive, actionable insights or reflective questions, 3-4 sentences.",
        },
    },
    "required": ["summary", "emotionFrequency", "intensityTrend", "insights"],
}


def format_entries(entries: Iterable[EmotionEntry]) -> str:
    lines = []
    for entry in entries:
        notes = entry.notes or "No notes."
        lines.append(f'- On {entry.date}, felt {entry.emotion} (Intensity: {entry.intensity}/10). Notes: "{notes}"')
    return "\n".join(lines)


def insight_prompt(entry: EmotionEntry) -> str:
    notes = entry.notes or "No notes were provided."
    return (
        "You are an empathetic, insightful companion inside the Deltajournal emotion journal.\n"
        "A user logged this entry:\n"
        f"- Emotion: {entry.emotion}\n"
        f"- Intensity (1-10): {entry.intensity}\n"
        f'- Notes: "{notes}"\n\n'
        "Reply with a short (2-3 sentences), constructive and supportive reflection, "
        "the way a wise and caring friend would. No markdown, no lists, one gentle paragraph. "
        "If there are no notes, reflect on the emotion and its intensity."
    )


def trends_prompt(entries: list[EmotionEntry]) -> str:
    return (
        "You are a mental wellness and data analyst looking at a month of Deltajournal entries.\n"
        f"Entries:\n{format_entries(entries)}\n\n"
        "Write a friendly, encouraging summary of the emotional trends: open with an overall "
        "observation, name the most frequent emotions, point out any patterns you notice, and "
        "close on a positive note. Keep it to 4-5 sentences in a single paragraph without markdown."
    )


def report_prompt(entries: list[EmotionEntry], start_date: str, end_date: str) -> str:
    return (
        f"Analyze these Deltajournal entries from {start_date} to {end_date} and write a wellness report.\n"
        f"Entries:\n{format_entries(entries)}"
    )


class NarrationService:
    """Turns journal entries into AI-written reflections, summaries and reports.

    Each call is a fresh round trip to the model: nothing is cached and nothing
    is retried. Empty inputs to the summary and report short-circuit with canned
    text and never reach the model.
    """

    def __init__(self, api_key: str | None, model_name: str = "gemini-2.5-flash", model=None):
        self.api_key = api_key
        self.model_name = model_name
        self._model = model

    def _get_model(self):
        if self._model is None:
            if not self.api_key:
                raise NotConfiguredError("GEMINI_API_KEY not configured; AI features are unavailable.")
            genai.configure(api_key=self.api_key)
            self._model = genai.GenerativeModel(self.model_name)
        return self._model

    async def _generate(self, report_type: str, prompt: str, config) -> str:
        model = self._get_model()
        try:
            response = await model.generate_content_async(prompt, generation_config=config)
            text = response.text
        except Exception as exc:
            logger.error("Error generating %s: %s", report_type, exc)
            raise NarrationError(report_type, str(exc)) from exc
        if not text:
            raise NarrationError(report_type, "model returned an empty response")
        return text

    async def get_emotion_insight(self, entry: EmotionEntry) -> str:
        config = genai.GenerationConfig(temperature=0.7, top_p=1, top_k=32)
        return await self._generate(INSIGHT, insight_prompt(entry), config)

    async def get_trends_summary(self, entries: list[EmotionEntry]) -> str:
        if not entries:
            return TRENDS_EMPTY_MESSAGE
        config = genai.GenerationConfig(temperature=0.8, top_p=1, top_k=40)
        return await self._generate(TRENDS, trends_prompt(entries), config)

    async def get_report_analysis(self, entries: list[EmotionEntry], start_date: str, end_date: str) -> ReportAnalysis:
        if not entries:
            return ReportAnalysis.model_validate(EMPTY_REPORT)
        config = genai.GenerationConfig(
            temperature=0.7,
            response_mime_type="application/json",
            response_schema=REPORT_SCHEMA,
        )
        text = await self._generate(REPORT, report_prompt(entries, start_date, end_date), config)
        try:
            return ReportAnalysis.model_validate(json.loads(text))
        except (ValueError, PydanticValidationError) as exc:
            logger.error("Malformed %s response: %s", REPORT, exc)
            raise NarrationError(REPORT, f"response is not a valid report: {exc}") from exc
