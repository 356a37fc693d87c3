import pytest

from epoch_history import EpochHistory
from what_policy import Anneal, Halve, Snap, Spring, Squeeze, WHAT_POLICIES, make_what

ALL = [Snap(), Squeeze(), Halve(), Spring(), Anneal()]

HISTORIES = [
    [5],
    [5, 7, 4, 2],
    [5, 7, 4, 2, 2],
    [3, 3, 3],
    [5, 7, 4, 2, 5],
    [6, 3, 9, 8, 7, 7, 7, 5],
]


def test_snap():
    assert Snap().rewrite([5, 7, 4, 2]) == [2]


def test_squeeze():
    assert Squeeze().rewrite([5, 7, 4, 2, 2]) == [5, 7, 4, 2]
    assert Squeeze().rewrite([3, 3, 3]) == [3]
    assert Squeeze().rewrite([7, 7, 2, 7]) == [7, 2, 7]


@pytest.mark.parametrize("epochs,expected", [
    ([1], [1]),
    ([4, 2], [2]),
    ([5, 7, 4, 2], [4, 2]),
    ([5, 7, 4, 2, 2], [4, 2, 2]),
    ([1, 2, 3, 4, 5, 6, 7], [4, 5, 6, 7]),
])
def test_halve_keeps_larger_half(epochs, expected):
    assert Halve().rewrite(epochs) == expected


def test_spring():
    assert Spring().rewrite([5, 7, 4, 2, 5]) == [5]
    assert Spring().rewrite([5, 7, 4, 2]) == [5, 7, 4, 2]
    assert Spring().rewrite([5, 7, 4, 2, 2]) == [5, 7, 4, 2]
    assert Spring().rewrite([5, 7, 4, 2, 6, 3, 9, 8, 7]) == [5, 7]


def test_anneal_nudges_first_change_only():
    assert Anneal().rewrite([5, 7, 4, 2, 2]) == [5, 7, 3, 2]
    assert Anneal().rewrite([5, 7]) == [6, 7]
    assert Anneal().rewrite([6, 7, 4]) == [6, 6, 4]


def test_anneal_squeezes_without_spending_the_change():
    assert Anneal().rewrite([6, 6, 4, 2]) == [6, 3, 2]
    assert Anneal().rewrite([5, 7, 3, 2, 6, 3, 9, 7, 7, 7]) == [5, 7, 3, 2, 6, 3, 8, 7]


@pytest.mark.parametrize("policy", ALL, ids=str)
@pytest.mark.parametrize("epochs", HISTORIES)
def test_tail_is_preserved(policy, epochs):
    out = policy.rewrite(epochs)
    assert out and out[-1] == epochs[-1]
    assert all(n > 0 for n in out)


@pytest.mark.parametrize("policy", [Snap(), Squeeze(), Spring()], ids=str)
@pytest.mark.parametrize("epochs", HISTORIES)
def test_idempotent_policies(policy, epochs):
    once = policy.rewrite(epochs)
    assert policy.rewrite(once) == once


@pytest.mark.parametrize("policy", ALL, ids=str)
def test_invoke_on_empty_history_is_noop(policy):
    h = EpochHistory()
    policy.invoke(h)
    assert h.snapshot() == []


@pytest.mark.parametrize("policy", ALL, ids=str)
def test_invoke_replaces_live_history(policy):
    h = EpochHistory([5, 7, 4, 2, 2])
    policy(h)
    assert h.snapshot() == policy.rewrite([5, 7, 4, 2, 2])


def test_make_what_by_name():
    assert isinstance(make_what("Anneal"), Anneal)
    assert len(WHAT_POLICIES) == 5
    with pytest.raises(ValueError):
        make_what("shrink")
