"""Language lookup for monolingual text values."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from lodmapper.domain.model import search_common_languages
from lodmapper.domain.ports import LookupFailure

if TYPE_CHECKING:
    from lodmapper.domain.model import LanguageRef
    from lodmapper.domain.ports import LanguageSearcher

log = getLogger(__name__)


async def search_languages(
    query: str,
    *,
    remote: LanguageSearcher | None = None,
    limit: int = 10,
) -> list[LanguageRef]:
    """Built-in languages first, topped up from ``remote``.

    A failing remote lookup only costs the extra results.
    """

    results = search_common_languages(query, limit=limit)
    if remote is None or len(results) >= limit or not query.strip():
        return results
    try:
        extra = await remote.search_languages(query, limit=limit)
    except LookupFailure as exc:
        log.warning("Language search for %r failed: %s", query, exc)
        return results
    seen = {language.code for language in results}
    for language in extra:
        if language.code in seen:
            continue
        seen.add(language.code)
        results.append(language)
        if len(results) >= limit:
            break
    return results
