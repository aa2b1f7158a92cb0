"""Prompt templates for case generation."""

from __future__ import annotations

from simcase.prompts.case_generation import CASE_GENERATION_PROMPT, CASE_SYSTEM_PROMPT, build_case_prompt

__all__ = [
    "CASE_GENERATION_PROMPT",
    "CASE_SYSTEM_PROMPT",
    "build_case_prompt",
]
