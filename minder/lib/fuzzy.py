from collections.abc import Sequence
from difflib import get_close_matches

from minder.core.errors import AmbiguousError
from minder.core.models import Routine

__all__ = ["find_in_pool"]

FUZZY_MATCH_CUTOFF = 0.8


def _match_id_prefix(ref: str, pool: Sequence[Routine]) -> Routine | None:
    ref_lower = ref.lower()
    matches = [r for r in pool if r.id[:8].startswith(ref_lower)]
    if len(matches) == 1:
        return matches[0]
    if len(matches) > 1:
        exact = next((r for r in matches if r.id == ref), None)
        if exact:
            return exact
        raise AmbiguousError(ref, count=len(matches), sample=[r.id[:8] for r in matches[:3]])
    return None


def _match_substring(ref: str, pool: Sequence[Routine]) -> Routine | None:
    ref_lower = ref.lower()
    exact = next((r for r in pool if r.name.lower() == ref_lower), None)
    if exact:
        return exact
    matches = [r for r in pool if ref_lower in r.name.lower()]
    if len(matches) == 1:
        return matches[0]
    if len(matches) > 1:
        raise AmbiguousError(ref, count=len(matches), sample=[r.name for r in matches[:3]])
    return None


def _match_fuzzy(ref: str, pool: Sequence[Routine]) -> Routine | None:
    names = [r.name.lower() for r in pool]
    matches = get_close_matches(ref.lower(), names, n=1, cutoff=FUZZY_MATCH_CUTOFF)
    if matches:
        return next(r for r in pool if r.name.lower() == matches[0])
    return None


def find_in_pool(ref: str, pool: Sequence[Routine]) -> Routine | None:
    """Resolve a routine by id prefix, then name substring, then fuzzy name."""
    if not pool or not ref.strip():
        return None
    return _match_id_prefix(ref, pool) or _match_substring(ref, pool) or _match_fuzzy(ref, pool)
