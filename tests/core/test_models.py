"""
Tests for the follow graph data models.
"""

import pytest

from followgraph.core.models import Profile, SeparationResult


def test_profile_from_json():
    """Test parsing metadata content."""
    profile = Profile.from_json(
        '{"name": "alice", "about": "hi", "nip05": "alice@example.com", "banner": "x.png"}'
    )

    assert profile.name == "alice"
    assert profile.about == "hi"
    assert profile.nip05 == "alice@example.com"
    assert profile.extra == {"banner": "x.png"}


def test_profile_ignores_non_string_fields():
    """Test known fields with the wrong type are dropped."""
    profile = Profile.from_dict({"name": 42, "website": None})
    assert profile.name is None
    assert profile.website is None


def test_profile_display_name_fallback():
    """Test the legacy displayName key."""
    profile = Profile.from_dict({"displayName": "Alice A."})
    assert profile.display_name == "Alice A."
    assert profile.label == "Alice A."


@pytest.mark.parametrize(
    "profile,label",
    [
        (Profile(name="alice", display_name="Alice"), "alice"),
        (Profile(display_name="Alice"), "Alice"),
        (Profile(name=""), None),
        (Profile(), None),
    ],
)
def test_profile_label(profile, label):
    """Test label preference order."""
    assert profile.label == label


@pytest.mark.parametrize("content", ["not json", "[1, 2]", '"text"'])
def test_profile_from_json_rejects_non_objects(content):
    """Test invalid metadata content raises ValueError."""
    with pytest.raises(ValueError):
        Profile.from_json(content)


def test_separation_result_compares_as_tuple(ident):
    """Test results compare equal to plain tuples."""
    result = SeparationResult(1, [ident(1), ident(2)])

    assert result == (1, [ident(1), ident(2)])
    assert result.bech32_path == [ident(1).to_bech32(), ident(2).to_bech32()]
