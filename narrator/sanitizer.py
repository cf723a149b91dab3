"""Text cleanup for text-to-speech input.

Extracted article text carries markup residue, URLs, emoji and typographic
symbols that TTS engines either read aloud or choke on. ``sanitize`` turns it
into plain prose built only from an allow-list of characters.
"""

import re
from typing import Optional

from narrator.config import settings

# Accented letters kept by the allow-list, per spoken language
ACCENTED_LETTERS = {
    "fr": "àâäéèêëïîôùûüÿçÀÂÄÉÈÊËÏÎÔÙÛÜŸÇ",
    "en": "",
    "pl": "ąćęłńóśźżĄĆĘŁŃÓŚŹŻ",
    "de": "äöüßÄÖÜ",
}

_WHITESPACE_RE = re.compile(r"\s+")
_TAG_RE = re.compile(r"<[^>]*>")
_URL_RE = re.compile(r"https?://\S+")
# Blank line(s) between paragraphs, with the punctuation that ends the first one
_PARAGRAPH_RE = re.compile(r"([.!?:;]?)[ \t]*(?:\r?\n[ \t]*){2,}")
_SPACES_RE = re.compile(r" {2,}")


def _language(language_code: Optional[str]) -> str:
    code = language_code or settings.TTS_LANGUAGE_CODE
    return code.split("-")[0].lower()


def _disallowed_re(accented: str) -> re.Pattern:
    # \w is restricted to ASCII so foreign scripts are dropped too
    return re.compile(
        r"[^A-Za-z0-9_\s.,!?;:()\-'\"" + re.escape(accented) + r"]"
    )


def _sentence_join_re(accented: str) -> re.Pattern:
    uppercase = "A-Z" + "".join(c for c in accented if c.isupper())
    return re.compile(r"([.!?])([" + uppercase + r"])")


def sanitize(
    raw_text: str,
    language_code: Optional[str] = None,
    url_placeholder: Optional[str] = None,
) -> str:
    """
    Clean article text so it can be sent to a TTS provider.

    Steps:
    1. Turn paragraph breaks into an audible pause (". ")
    2. Collapse whitespace runs
    3. Strip leftover markup tags
    4. Replace URLs with a spoken placeholder
    5. Drop every character outside the allow-list
    6. Add the missing space after a sentence end glued to a capital
    7. Trim

    Paragraphs are handled first: whitespace collapsing would erase the
    blank lines that mark them.

    Args:
        raw_text: Text as extracted or entered by the user
        language_code: BCP-47 code of the spoken language (default: TTS_LANGUAGE_CODE)
        url_placeholder: Phrase replacing URLs (default: localized phrase)

    Returns:
        Sanitized text, empty string for blank input
    """
    if not raw_text or not raw_text.strip():
        return ""

    language = _language(language_code)
    accented = ACCENTED_LETTERS.get(language, "")
    if url_placeholder is None:
        url_placeholder = settings.URL_PLACEHOLDERS.get(
            language, settings.URL_PLACEHOLDERS["en"]
        )

    text = _PARAGRAPH_RE.sub(lambda m: (m.group(1) or ".") + " ", raw_text.strip())
    text = _WHITESPACE_RE.sub(" ", text)
    text = _TAG_RE.sub("", text)
    # URLs go before filtering, otherwise they survive as "httpsexample.com"
    text = _URL_RE.sub(url_placeholder, text)
    text = _disallowed_re(accented).sub("", text)
    text = _sentence_join_re(accented).sub(r"\1 \2", text)

    # Removed characters and tags may leave double spaces behind
    text = _SPACES_RE.sub(" ", text)
    return text.strip()
