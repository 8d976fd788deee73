"""
Tests for custom exceptions.
"""

import pytest

from followgraph.core.exceptions import (
    ConfigurationError,
    DataSourceError,
    FollowGraphError,
    LevelNotPresentError,
    MissingContactListError,
    NeighborhoodError,
    NotEnoughLevelsError,
    ParseError,
    PathVerificationError,
    SeparationError,
    SeparationNotFoundError,
    TooFewArgumentsError,
    TooManyArgumentsError,
)


@pytest.mark.parametrize(
    "error_type,base",
    [
        (ParseError, ValueError),
        (ConfigurationError, FollowGraphError),
        (DataSourceError, FollowGraphError),
        (MissingContactListError, SeparationError),
        (SeparationNotFoundError, SeparationError),
        (PathVerificationError, SeparationError),
        (TooFewArgumentsError, SeparationError),
        (TooManyArgumentsError, SeparationError),
        (LevelNotPresentError, NeighborhoodError),
        (NotEnoughLevelsError, NeighborhoodError),
    ],
)
def test_hierarchy(error_type, base):
    """Test every error is catchable through its base class."""
    assert issubclass(error_type, base)
    assert issubclass(error_type, FollowGraphError)


def test_parse_error_message():
    assert str(ParseError("bad key")) == "Parse Error: bad key"


def test_missing_contact_list_carries_identity(ident):
    error = MissingContactListError(ident(1))

    assert error.identity == ident(1)
    assert str(error) == f"Missing contact list of {ident(1).to_bech32()}"


def test_default_messages():
    assert str(SeparationNotFoundError()) == "Separation not found"
    assert str(TooFewArgumentsError()) == "Too few arguments"
    assert str(TooManyArgumentsError()) == "Too many arguments"
    assert str(NotEnoughLevelsError()) == "Not enough levels"


def test_level_not_present():
    error = LevelNotPresentError(3)

    assert error.level == 3
    assert "Level 3" in str(error)
