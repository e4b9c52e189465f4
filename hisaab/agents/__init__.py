"""AI Agents package."""

from hisaab.agents.ai_agents import (
    GeminiUtteranceClassifier,
    build_prompt,
    extract_json,
)

__all__ = [
    "GeminiUtteranceClassifier",
    "build_prompt",
    "extract_json",
]
