"""Prompt templates for each content kind."""

from lessongen.prompts.lesson_prompts import build_prompt

__all__ = ["build_prompt"]
