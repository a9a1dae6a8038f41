import pytest

from minder.core.errors import AmbiguousError, NotFoundError, ValidationError
from minder.routines import resolve_routine, toggle_completion
from minder.store import MemoryStore
from tests.conftest import TODAY


@pytest.fixture
def store(frozen_today):
    return MemoryStore()


def test_resolve_routine_by_name(store):
    r = store.add_routine("water", ["ALL"])
    assert resolve_routine(store, "wat") == r


def test_resolve_routine_missing(store):
    with pytest.raises(NotFoundError):
        resolve_routine(store, "water")


def test_resolve_routine_ambiguous(store):
    store.add_routine("morning stretch", ["AM"])
    store.add_routine("evening stretch", ["PM"])
    with pytest.raises(AmbiguousError):
        resolve_routine(store, "stretch")


def test_toggle_single_category_routine(store):
    r = store.add_routine("water", ["ALL"])
    assert toggle_completion(store, r, TODAY).completed is True
    assert toggle_completion(store, r, TODAY).completed is False
    assert toggle_completion(store, r, TODAY).completed is True
    assert len(store.completions(TODAY)) == 1


def test_toggle_requires_category_when_several(store):
    r = store.add_routine("vitamins", ["AM", "PM"])
    with pytest.raises(ValidationError, match="pick one"):
        toggle_completion(store, r, TODAY)


def test_toggle_one_category_leaves_other(store):
    r = store.add_routine("vitamins", ["AM", "PM"])
    toggle_completion(store, r, TODAY, "am")
    done = {(str(c.time_category), c.completed) for c in store.completions(TODAY)}
    assert done == {("AM", True)}


def test_toggle_unscheduled_category(store):
    r = store.add_routine("vitamins", ["AM"])
    with pytest.raises(ValidationError):
        toggle_completion(store, r, TODAY, "NOON")
