"""
Language codes used by the proofreading workflow.

Two fixed sets exist:
- Proofreading languages: the six languages whose teams review every batch
  (de, es, pt, nl, fr, it). A batch tracks one completion flag per language.
- Draft languages: the eleven languages machine drafts are generated for
  (the proofreading set plus da, el, pl, no, sv).

All lookup tables are keyed by the closed ``Language`` enumeration. Lookups
by raw code go through ``parse_language`` and fall back explicitly when the
code is unknown.
"""

from enum import Enum
from typing import Dict, List, Optional, Tuple


class Language(str, Enum):
    DE = 'de'
    ES = 'es'
    PT = 'pt'
    NL = 'nl'
    FR = 'fr'
    IT = 'it'
    DA = 'da'
    EL = 'el'
    PL = 'pl'
    NO = 'no'
    SV = 'sv'


PROOFREADING_LANGUAGES: Tuple[Language, ...] = (
    Language.DE,
    Language.ES,
    Language.PT,
    Language.NL,
    Language.FR,
    Language.IT,
)

DRAFT_LANGUAGES: Tuple[Language, ...] = PROOFREADING_LANGUAGES + (
    Language.DA,
    Language.EL,
    Language.PL,
    Language.NO,
    Language.SV,
)

LANGUAGE_NAMES: Dict[Language, str] = {
    Language.DE: 'German',
    Language.ES: 'Spanish',
    Language.PT: 'Portuguese',
    Language.NL: 'Dutch',
    Language.FR: 'French',
    Language.IT: 'Italian',
    Language.DA: 'Danish',
    Language.EL: 'Greek',
    Language.PL: 'Polish',
    Language.NO: 'Norwegian',
    Language.SV: 'Swedish',
}

LANGUAGE_FLAGS: Dict[Language, str] = {
    Language.DE: '🇩🇪',
    Language.ES: '🇪🇸',
    Language.PT: '🇵🇹',
    Language.NL: '🇳🇱',
    Language.FR: '🇫🇷',
    Language.IT: '🇮🇹',
    Language.DA: '🇩🇰',
    Language.EL: '🇬🇷',
    Language.PL: '🇵🇱',
    Language.NO: '🇳🇴',
    Language.SV: '🇸🇪',
}

# Chat mentions of the proofreading team per language
LANGUAGE_TEAMS: Dict[Language, str] = {
    Language.DE: '@germany-translation-team',
    Language.ES: '@spain-translation-team',
    Language.PT: '@portugal-translation-team',
    Language.NL: '@netherlands-translation-team',
    Language.FR: '@france-translation-team',
    Language.IT: '@italy-translation-team',
}


def parse_language(code) -> Optional[Language]:
    """
    Convert a raw language code into a Language.

    Accepts Language members and case-insensitive strings ('de', 'DE', ' de ').

    Returns:
        The matching Language, or None if the code is unknown.
    """
    if isinstance(code, Language):
        return code
    if not isinstance(code, str):
        return None
    try:
        return Language(code.strip().lower())
    except ValueError:
        return None


def get_language_name(code) -> str:
    """Get the English display name of a language, falling back to the raw code."""
    language = parse_language(code)
    if language is None:
        return str(code)
    return LANGUAGE_NAMES[language]


def get_language_flag(code) -> str:
    """Get the flag emoji for a language, or an empty string if unknown."""
    language = parse_language(code)
    if language is None:
        return ''
    return LANGUAGE_FLAGS.get(language, '')


def get_team_mention(code) -> Optional[str]:
    """
    Get the chat mention of the team proofreading a language.

    Returns None for unknown codes and for languages without a team, so
    callers can leave them out of a mention list.
    """
    language = parse_language(code)
    if language is None:
        return None
    return LANGUAGE_TEAMS.get(language)


def is_proofreading_language(code) -> bool:
    """Check whether a code belongs to the proofreading language set."""
    return parse_language(code) in PROOFREADING_LANGUAGES


def describe_language(code) -> Dict[str, str]:
    """Build one display row (code, name, flag). Unknown codes keep their raw text."""
    language = parse_language(code)
    return {
        'code': language.value if language is not None else str(code),
        'name': get_language_name(code),
        'flag': get_language_flag(code),
    }


def describe_languages(languages) -> List[Dict[str, str]]:
    """Build display rows for a sequence of languages."""
    return [describe_language(language) for language in languages]
