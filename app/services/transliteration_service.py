"""Romanization of entity names sourced from non-Latin registries.

Only Ukrainian is supported, using the BGN/PCGN system.
"""
import logging
from typing import Dict, Optional

logger = logging.getLogger(__name__)


UKRAINIAN_BGN = {
    'а': 'a', 'б': 'b', 'в': 'v', 'г': 'h', 'ґ': 'g', 'д': 'd', 'е': 'e',
    'є': 'ye', 'ж': 'zh', 'з': 'z', 'и': 'y', 'і': 'i', 'ї': 'yi', 'й': 'y',
    'к': 'k', 'л': 'l', 'м': 'm', 'н': 'n', 'о': 'o', 'п': 'p', 'р': 'r',
    'с': 's', 'т': 't', 'у': 'u', 'ф': 'f', 'х': 'kh', 'ц': 'ts', 'ч': 'ch',
    'ш': 'sh', 'щ': 'shch', 'ь': 'ʹ', 'ю': 'yu', 'я': 'ya',
    "'": '”', '’': '”', 'ʼ': '”',
}

# Digraphs whose romanization would collide with a single letter.
UKRAINIAN_BGN_DIGRAPHS = {
    'зг': 'z·h',
}

LANG_CODE_TO_RULE_SETS = {
    'uk': (UKRAINIAN_BGN, UKRAINIAN_BGN_DIGRAPHS),
}


def _apply_case(latin: str, upper: bool, all_caps: bool) -> str:
    if not upper:
        return latin
    return latin.upper() if all_caps else latin[:1].upper() + latin[1:]


def _romanize(value: str, letters: Dict[str, str], digraphs: Dict[str, str]) -> str:
    out = []
    i = 0
    while i < len(value):
        ch = value[i]
        pair = value[i:i + 2]
        if pair.lower() in digraphs:
            latin, width = digraphs[pair.lower()], 2
        elif ch.lower() in letters:
            latin, width = letters[ch.lower()], 1
        else:
            out.append(ch)
            i += 1
            continue
        # A capital inside an all-caps word keeps every romanized letter upper case.
        nxt = value[i + width:i + width + 1]
        prev = value[i - 1:i] if i else ''
        neighbour = nxt if nxt.isalpha() else prev
        all_caps = neighbour.isalpha() and neighbour.isupper()
        out.append(_apply_case(latin, ch.isupper(), all_caps))
        i += width
    return ''.join(out)


class TransliterationService:
    _transliterators: Dict[str, "TransliterationService"] = {}

    @classmethod
    def for_language(cls, lang_code: Optional[str]) -> "TransliterationService":
        key = lang_code or ''
        if key not in cls._transliterators:
            cls._transliterators[key] = cls(lang_code)
        return cls._transliterators[key]

    def __init__(self, lang_code: Optional[str]):
        self.lang_code = lang_code

    def transliterate(self, value: Optional[str]) -> Optional[str]:
        # Blank values and unsupported languages pass through untouched
        if not value or not value.strip() or not self.lang_code:
            return value
        rule_set = LANG_CODE_TO_RULE_SETS.get(self.lang_code)
        if rule_set is None:
            return value
        try:
            return _romanize(value, *rule_set)
        except Exception:
            logger.exception("Transliteration to Latin failed for %r (%s)", value, self.lang_code)
            return value
