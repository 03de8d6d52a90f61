import pytest

from accounts.services.bylines import parse_bylines, split_bylines


def test_split_bylines_drops_blanks_and_repeats():
    assert split_bylines(" alice, ,Bob, ALICE,bob ") == ["alice", "Bob"]
    assert split_bylines(None) == []


@pytest.fixture
def shared_name(make_user, make_pseud):
    """Two users with a pseud called 'sam'; only one of them logs in as sam."""
    sam = make_user("sam")
    other = make_user("other")
    make_pseud(other, "sam")
    return sam, other


def test_plain_and_qualified_bylines_resolve(make_user, make_pseud):
    alice = make_user("alice")
    alias = make_pseud(alice, "Wonderland")

    result = parse_bylines("alice, Wonderland (alice)")

    assert result["pseuds"] == [alice.default_pseud, alias]
    assert result["invalid_pseuds"] == []
    assert result["ambiguous_pseuds"] == {}


def test_unknown_bylines_are_invalid(make_user):
    make_user("alice")

    result = parse_bylines("alice, nobody, alice (bob)")

    assert [pseud.name for pseud in result["pseuds"]] == ["alice"]
    assert result["invalid_pseuds"] == ["nobody", "alice (bob)"]


def test_shared_name_is_ambiguous_by_default(shared_name):
    result = parse_bylines("sam")

    assert result["pseuds"] == []
    assert len(result["ambiguous_pseuds"]["sam"]) == 2


def test_assume_matching_login_picks_the_login_owner(shared_name):
    sam, _ = shared_name

    result = parse_bylines("sam", assume_matching_login=True)

    assert result["pseuds"] == [sam.default_pseud]
    assert result["ambiguous_pseuds"] == {}
