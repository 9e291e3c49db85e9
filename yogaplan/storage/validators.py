"""Field validation for incoming card, session and collection data.

Every validator takes the raw mapping from a form or CLI and returns a list
of human-readable messages; an empty list means valid.
"""

from __future__ import annotations

import math
from typing import Any, List, Mapping

MIN_CARD_TIME_MINUTES = 0.5


def _is_text(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _require_text(data: Mapping[str, Any], name: str, errors: List[str]) -> None:
    if not _is_text(data.get(name)):
        errors.append(f"{name} is required and must be a non-empty string")


def _optional_text(data: Mapping[str, Any], name: str, errors: List[str]) -> None:
    value = data.get(name)
    if value and not isinstance(value, str):
        errors.append(f"{name} must be a string")


def _check_tags(data: Mapping[str, Any], errors: List[str]) -> None:
    tags = data.get("tags")
    if not isinstance(tags, list):
        errors.append("tags is required and must be an array")
    elif any(not isinstance(tag, str) for tag in tags):
        errors.append("all tags must be strings")
    elif any(tag.strip() == "" for tag in tags):
        errors.append("tags must not contain empty strings")


def _check_id_list(data: Mapping[str, Any], name: str, noun: str, errors: List[str]) -> None:
    ids = data.get(name)
    if not isinstance(ids, list):
        errors.append(f"{name} is required and must be an array")
    elif any(not isinstance(i, str) for i in ids):
        errors.append(f"all {noun} must be strings")


def validate_exercise(data: Mapping[str, Any]) -> List[str]:
    errors: List[str] = []
    _require_text(data, "title", errors)
    _require_text(data, "description", errors)
    _require_text(data, "category", errors)
    _check_tags(data, errors)
    minutes = data.get("duration_minutes")
    if not _is_number(minutes) or minutes <= 0:
        errors.append("duration_minutes is required and must be a positive number")
    return errors


def _check_card_time(data: Mapping[str, Any], errors: List[str]) -> None:
    time = data.get("time")
    if not _is_number(time) or time < MIN_CARD_TIME_MINUTES:
        errors.append(f"time is required and must be at least {MIN_CARD_TIME_MINUTES} minutes")


def validate_story(data: Mapping[str, Any]) -> List[str]:
    errors: List[str] = []
    _require_text(data, "title", errors)
    _require_text(data, "text", errors)
    _optional_text(data, "mood", errors)
    _check_tags(data, errors)
    _check_card_time(data, errors)
    return errors


def validate_practical(data: Mapping[str, Any]) -> List[str]:
    errors: List[str] = []
    _require_text(data, "title", errors)
    _require_text(data, "instruction", errors)
    _check_tags(data, errors)
    _check_card_time(data, errors)
    return errors


def validate_session(data: Mapping[str, Any]) -> List[str]:
    errors: List[str] = []
    _require_text(data, "title", errors)
    _require_text(data, "description", errors)
    if data.get("story") is not None and not isinstance(data.get("story"), str):
        errors.append("story must be a string")
    _check_id_list(data, "exercises", "exercise IDs", errors)
    minutes = data.get("duration_minutes")
    if not _is_number(minutes) or minutes <= 0:
        errors.append("duration_minutes is required and must be a positive number")
    _require_text(data, "category", errors)
    _require_text(data, "level", errors)
    return errors


def validate_story_book(data: Mapping[str, Any]) -> List[str]:
    errors: List[str] = []
    _require_text(data, "title", errors)
    _require_text(data, "description", errors)
    _optional_text(data, "theme", errors)
    _check_id_list(data, "storyIds", "story IDs", errors)
    return errors


def validate_card_set(data: Mapping[str, Any], ids_field: str) -> List[str]:
    """Sets name their id list per kind (exerciseIds, storyIds, practicalIds)."""
    errors: List[str] = []
    _require_text(data, "name", errors)
    _optional_text(data, "description", errors)
    _check_id_list(data, ids_field, ids_field, errors)
    return errors
