"""
ai_service.py — AI-assisted writing
SMART-goal rewriting, milestone suggestions, achievement classification,
report drafting and the monthly reflection. Every call site has a fixed
fallback, so a failing or misbehaving model never blocks the user and never
touches stored data.
"""

import logging
from datetime import date
from typing import Any, Iterable, Protocol

from pydantic import TypeAdapter
from pydantic import ValidationError as SchemaError

from goalforge.config import AI_CACHE_TTL
from goalforge.errors import AIServiceError
from goalforge.schemas import (
    Achievement,
    AchievementClassification,
    AchievementType,
    Goal,
    Habit,
    MilestoneDraft,
    ReportConfig,
    Task,
)

logger = logging.getLogger(__name__)

REPORT_FALLBACK = "Error generating report. Please check your API key and try again."
REFLECTION_FALLBACK = "Great job staying consistent! Keep tracking to see AI insights."

MILESTONE_SCHEMA = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "description": {"type": "STRING"},
            "status": {"type": "STRING", "enum": ["pending"]},
            "due_date": {"type": "STRING", "description": "YYYY-MM-DD format"},
        },
        "required": ["description", "status", "due_date"],
    },
}

CLASSIFICATION_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "classification": {"type": "STRING", "enum": [t.value for t in AchievementType]},
        "summary": {"type": "STRING"},
    },
    "required": ["classification", "summary"],
}

_milestone_list = TypeAdapter(list[MilestoneDraft])


class TextGenerator(Protocol):
    async def generate_text(self, prompt: str, cache_ttl: int = 0) -> str: ...

    async def generate_structured(self, prompt: str, schema: dict, cache_ttl: int = 0) -> Any: ...


def _completed_between(task: Task, start: date, end: date) -> bool:
    if task.status != "completed" or task.completed_at is None:
        return False
    return start <= task.completed_at.date() <= end


class AIService:
    def __init__(self, generator: TextGenerator):
        self.generator = generator

    async def generate_smart_goal(self, raw_text: str) -> str:
        prompt = (
            "Rewrite the following goal to be SMART (Specific, Measurable, Achievable, Relevant, Time-bound).\n"
            "Return only the rewritten goal description text, no explanations.\n\n"
            f'Original Goal: "{raw_text}"'
        )
        try:
            text = (await self.generator.generate_text(prompt)).strip()
            return text or raw_text
        except AIServiceError as e:
            logger.error(f"Error generating SMART goal: {e}")
            return raw_text

    async def generate_milestones(self, goal_text: str, timeframe: str) -> list[MilestoneDraft]:
        prompt = (
            f'Generate 3 to 5 key milestones for the goal: "{goal_text}" '
            f"which needs to be completed by {timeframe}.\n"
            "Ensure deadlines are spaced out logically."
        )
        try:
            data = await self.generator.generate_structured(prompt, MILESTONE_SCHEMA)
            return _milestone_list.validate_python(data)
        except (AIServiceError, SchemaError) as e:
            logger.error(f"Error generating milestones: {e}")
            return []

    async def classify_achievement(self, title: str, description: str) -> AchievementClassification:
        prompt = (
            "Analyze this professional achievement.\n"
            "1. Classify it into one of: Leadership, Delivery, Communication, Impact, Other.\n"
            "2. Write a 1-sentence executive summary suitable for a performance review (manager-ready tone).\n\n"
            f"Title: {title}\n"
            f"Description: {description}"
        )
        try:
            data = await self.generator.generate_structured(prompt, CLASSIFICATION_SCHEMA)
            return AchievementClassification.model_validate(data)
        except (AIServiceError, SchemaError) as e:
            logger.error(f"Error classifying achievement: {e}")
            return AchievementClassification(classification=AchievementType.OTHER, summary=description)

    @staticmethod
    def build_report_prompt(
        config: ReportConfig,
        goals: Iterable[Goal],
        achievements: Iterable[Achievement],
        tasks: Iterable[Task],
    ) -> str:
        goals = list(goals)
        if config.goal_ids:
            goals = [g for g in goals if g.id in config.goal_ids]
        relevant_goals = "; ".join(f"{g.title} ({g.progress}% complete)" for g in goals)
        relevant_achievements = "\n".join(
            f"- {a.title} ({a.classification.value}): {a.summary}"
            for a in achievements
            if config.start_date <= a.date <= config.end_date
        )
        relevant_tasks = "\n".join(
            f"- [Completed Task] {t.title}"
            for t in tasks
            if _completed_between(t, config.start_date, config.end_date)
        )
        return (
            f"Write a {config.report_type} Professional Performance Report.\n"
            f"Date Range: {config.start_date.isoformat()} to {config.end_date.isoformat()}\n"
            f"Tone: {config.tone}\n\n"
            f"Key Goals Context:\n{relevant_goals}\n\n"
            f"Achievements Logged:\n{relevant_achievements}\n\n"
            f"Completed Tasks (Ad-hoc items):\n{relevant_tasks}\n\n"
            "Structure the report with these Markdown headers:\n"
            "## Executive Summary\n"
            "## Key Achievements\n"
            "## Operational Execution (Tasks & Milestones)\n"
            "## Progress on Goals\n"
            "## Focus for Next Period\n\n"
            "Keep it professional and actionable."
        )

    async def generate_report(
        self,
        config: ReportConfig,
        goals: Iterable[Goal],
        achievements: Iterable[Achievement],
        tasks: Iterable[Task],
    ) -> str:
        prompt = self.build_report_prompt(config, goals, achievements, tasks)
        try:
            return await self.generator.generate_text(prompt, cache_ttl=AI_CACHE_TTL)
        except AIServiceError as e:
            logger.error(f"Error generating report: {e}")
            return REPORT_FALLBACK

    async def generate_reflection(self, habits: Iterable[Habit], goals: Iterable[Goal]) -> str:
        habit_summary = ", ".join(f"{h.name}: Streak {h.streak_count}" for h in habits)
        goal_summary = ", ".join(f"{g.title} is {g.progress}% done" for g in goals)
        prompt = (
            "Write a short, encouraging monthly reflection for a user based on this data:\n"
            f"Habits: {habit_summary}\n"
            f"Goals: {goal_summary}\n\n"
            "Give 3 bullet points on what went well and 1 suggestion for improvement."
        )
        try:
            return await self.generator.generate_text(prompt, cache_ttl=AI_CACHE_TTL)
        except AIServiceError as e:
            logger.error(f"Error generating reflection: {e}")
            return REFLECTION_FALLBACK
