"""Supported languages: the single name -> Judge0 language id mapping."""

from __future__ import annotations

from typing import Dict, List, Optional

from app.common.exceptions import InvalidRequest
from app.features.judge0.schemas import LanguageInfo

SUPPORTED_LANGUAGES: List[LanguageInfo] = [
    LanguageInfo(id=50, key="c", name="C", extension="c"),
    LanguageInfo(id=54, key="cpp", name="C++", extension="cpp"),
    LanguageInfo(id=51, key="csharp", name="C#", extension="cs"),
    LanguageInfo(id=60, key="go", name="Go", extension="go"),
    LanguageInfo(id=62, key="java", name="Java", extension="java"),
    LanguageInfo(id=63, key="javascript", name="JavaScript", extension="js"),
    LanguageInfo(id=78, key="python", name="Python", extension="py"),
    LanguageInfo(id=68, key="php", name="PHP", extension="php"),
    LanguageInfo(id=72, key="ruby", name="Ruby", extension="rb"),
    LanguageInfo(id=74, key="typescript", name="TypeScript", extension="ts"),
]

_BY_NAME: Dict[str, LanguageInfo] = {}
for _lang in SUPPORTED_LANGUAGES:
    _BY_NAME[_lang.key] = _lang
    _BY_NAME[_lang.name.lower()] = _lang
_BY_ID: Dict[int, LanguageInfo] = {lang.id: lang for lang in SUPPORTED_LANGUAGES}


def get_language(name: Optional[str]) -> Optional[LanguageInfo]:
    if not name:
        return None
    return _BY_NAME.get(name.strip().lower())


def get_language_by_id(language_id: int) -> Optional[LanguageInfo]:
    return _BY_ID.get(language_id)


def resolve_language_id(name: Optional[str]) -> int:
    """Judge0 id for a language name; unknown names are rejected."""
    lang = get_language(name)
    if lang is None:
        raise InvalidRequest(f"Unsupported language: {name!r}", {"language": name})
    return lang.id


__all__ = ["SUPPORTED_LANGUAGES", "get_language", "get_language_by_id", "resolve_language_id"]
