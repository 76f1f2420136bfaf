"""
Outbound chat messages for the proofreading workflow.

All functions here are pure: they build text from domain objects and never
touch the store or the gateway.
"""

from typing import Iterable, List, Sequence
from urllib.parse import quote

from src.language_codes import Language, get_team_mention, parse_language
from src.translation.models import ProofreadingRequest, TranslationKeyRequest

DEFAULT_DEEP_LINK_TEMPLATE = "https://poeditor.com/projects/view?id=123456&key={key}"

BATCH_GREETING = (
    "👋 Hi translators,\n"
    "\n"
    "Could you please take a look at the translations and adjust the texts if needed?\n"
    "Thank you for your support and have a nice day! 🙏"
)


def build_deep_link(key: str, template: str = DEFAULT_DEEP_LINK_TEMPLATE) -> str:
    """Fill the deep-link template with a URL-quoted key name."""
    return template.format(key=quote(key, safe=""))


def compose_batch_message(
    keys: Sequence[TranslationKeyRequest],
    deep_link_template: str = DEFAULT_DEEP_LINK_TEMPLATE,
) -> str:
    """Build the message announcing a batch of keys to the translators."""
    lines = [
        f"▪️ `{item.key}` [POEditor Link]({build_deep_link(item.key, deep_link_template)})"
        for item in keys
    ]
    return f"{BATCH_GREETING}\n\n📋 **Translation Keys:**\n" + "\n".join(lines)


def pending_languages(request: ProofreadingRequest) -> List[Language]:
    """Languages whose proofreading flag is still false, in canonical order."""
    pending = []
    for code, done in request.completion_status.items():
        if done:
            continue
        language = parse_language(code)
        if language is not None:
            pending.append(language)
    return pending


def reminder_mentions(languages: Iterable) -> List[str]:
    """Team mentions for the given languages; codes without a team are skipped."""
    mentions = []
    for code in languages:
        mention = get_team_mention(code)
        if mention:
            mentions.append(mention)
    return mentions


def compose_reminder(request: ProofreadingRequest) -> str:
    """Build the reminder nudging teams that have not finished proofreading."""
    pending = pending_languages(request)
    mentions = ", ".join(reminder_mentions(pending))
    keys = "\n".join(f"▪️ `{key}`" for key in request.translation_keys)
    pending_codes = ", ".join(language.value.upper() for language in pending)

    return (
        f"👋 Hi {mentions},\n"
        "\n"
        "Could you take a look at the translation progress? "
        "We're still waiting for updates on these translation keys:\n"
        "\n"
        "📋 **Translation Keys:**\n"
        f"{keys}\n"
        "\n"
        f"🌍 **Pending Languages:** {pending_codes}\n"
        "\n"
        "Thank you for your support! 🙏"
    )


def batch_sent_summary(count: int) -> str:
    return f"{count} translation key(s) have been sent to Slack successfully."
