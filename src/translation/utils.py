"""
Translation utilities - hashing and tolerant JSON parsing of model output.
"""

import hashlib
import json
from typing import Dict, Optional

_decoder = json.JSONDecoder()


def calculate_hash(text: str) -> str:
    """Calculate SHA-256 hash of a text string."""
    return hashlib.sha256(text.encode('utf-8')).hexdigest()


def find_json_object(text: str) -> Optional[Dict]:
    """
    Find the first JSON object embedded in free text.

    Models sometimes wrap their answer in prose ("Here are the drafts: {...}").
    Every '{' is tried as a starting point until one decodes to an object.
    """
    if not text:
        return None

    start = text.find('{')
    while start != -1:
        try:
            obj, _ = _decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            obj = None
        if isinstance(obj, dict):
            return obj
        start = text.find('{', start + 1)
    return None


def strip_code_fence(text: str) -> str:
    """Remove a surrounding markdown code block (```json ... ```)."""
    if not text.startswith('```'):
        return text
    lines = text.split('\n')[1:]
    if lines and lines[-1].strip() == '```':
        lines = lines[:-1]
    return '\n'.join(lines).strip()


def safe_parse_json_object(text: str) -> Optional[Dict]:
    """
    Parse a JSON object out of model output.

    The text is tried as is, then without a code fence, then by scanning
    for an embedded object. Returns None when no object is found.
    """
    if not text:
        return None

    text = text.strip()
    for candidate in (text, strip_code_fence(text)):
        try:
            result = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(result, dict):
            return result

    return find_json_object(text)


def parse_drafts_response(text: str) -> Optional[Dict[str, str]]:
    """
    Parse a draft response into a language-code -> text mapping.

    Accepts either a flat object or one nested under a "translations" key.
    Returns None when nothing usable was found.
    """
    obj = safe_parse_json_object(text)
    if obj is None:
        return None

    if isinstance(obj.get('translations'), dict):
        obj = obj['translations']

    drafts = {str(code): value for code, value in obj.items() if isinstance(value, str)}
    return drafts or None
