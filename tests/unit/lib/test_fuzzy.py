import pytest

from minder.core.errors import AmbiguousError
from minder.lib.fuzzy import find_in_pool
from tests.conftest import routine

POOL = [
    routine("morning stretch", routine_id="a1b2c3d4-0000"),
    routine("evening stretch", routine_id="a1ffffff-0000"),
    routine("vitamins", routine_id="0f0f0f0f-0000"),
]


def test_match_by_id_prefix():
    assert find_in_pool("0f0f", POOL).name == "vitamins"


def test_ambiguous_id_prefix():
    with pytest.raises(AmbiguousError) as exc:
        find_in_pool("a1", POOL)
    assert exc.value.count == 2


def test_exact_name_beats_substring():
    assert find_in_pool("Morning Stretch", POOL).id == "a1b2c3d4-0000"


def test_unique_substring():
    assert find_in_pool("vita", POOL).name == "vitamins"


def test_ambiguous_substring():
    with pytest.raises(AmbiguousError, match="stretch"):
        find_in_pool("stretch", POOL)


def test_fuzzy_name():
    assert find_in_pool("vitamens", POOL).name == "vitamins"


def test_no_match():
    assert find_in_pool("guitar", POOL) is None
    assert find_in_pool("  ", POOL) is None
    assert find_in_pool("vitamins", []) is None
