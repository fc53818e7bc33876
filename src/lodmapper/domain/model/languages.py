"""Language tags accepted for monolingual text values."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, kw_only=True, frozen=True)
class LanguageRef:
    code: str
    label: str
    native_label: str | None = None

    def matches(self, query: str) -> bool:
        needle = query.strip().lower()
        if not needle:
            return False
        return (
            self.code.lower().startswith(needle)
            or needle in self.label.lower()
            or (self.native_label is not None and needle in self.native_label.lower())
        )


COMMON_LANGUAGES: tuple[LanguageRef, ...] = (
    LanguageRef(code="en", label="English", native_label="English"),
    LanguageRef(code="de", label="German", native_label="Deutsch"),
    LanguageRef(code="fr", label="French", native_label="français"),
    LanguageRef(code="es", label="Spanish", native_label="español"),
    LanguageRef(code="it", label="Italian", native_label="italiano"),
    LanguageRef(code="pt", label="Portuguese", native_label="português"),
    LanguageRef(code="nl", label="Dutch", native_label="Nederlands"),
    LanguageRef(code="pl", label="Polish", native_label="polski"),
    LanguageRef(code="sv", label="Swedish", native_label="svenska"),
    LanguageRef(code="da", label="Danish", native_label="dansk"),
    LanguageRef(code="nb", label="Norwegian Bokmål", native_label="norsk bokmål"),
    LanguageRef(code="fi", label="Finnish", native_label="suomi"),
    LanguageRef(code="cs", label="Czech", native_label="čeština"),
    LanguageRef(code="hu", label="Hungarian", native_label="magyar"),
    LanguageRef(code="el", label="Greek", native_label="Ελληνικά"),
    LanguageRef(code="tr", label="Turkish", native_label="Türkçe"),
    LanguageRef(code="ru", label="Russian", native_label="русский"),
    LanguageRef(code="uk", label="Ukrainian", native_label="українська"),
    LanguageRef(code="ar", label="Arabic", native_label="العربية"),
    LanguageRef(code="he", label="Hebrew", native_label="עברית"),
    LanguageRef(code="hi", label="Hindi", native_label="हिन्दी"),
    LanguageRef(code="ja", label="Japanese", native_label="日本語"),
    LanguageRef(code="zh", label="Chinese", native_label="中文"),
    LanguageRef(code="ko", label="Korean", native_label="한국어"),
    LanguageRef(code="la", label="Latin", native_label="Latina"),
    LanguageRef(code="mul", label="multiple languages"),
    LanguageRef(code="und", label="undetermined"),
)


def find_language(code: str) -> LanguageRef | None:
    lowered = code.strip().lower()
    for language in COMMON_LANGUAGES:
        if language.code == lowered:
            return language
    return None


def search_common_languages(query: str, *, limit: int = 10) -> list[LanguageRef]:
    """Rank exact code hits first, then prefix and substring matches."""

    needle = query.strip().lower()
    if not needle:
        return list(COMMON_LANGUAGES[:limit])
    exact = [lang for lang in COMMON_LANGUAGES if lang.code == needle]
    rest = [lang for lang in COMMON_LANGUAGES if lang.code != needle and lang.matches(needle)]
    return (exact + rest)[:limit]
