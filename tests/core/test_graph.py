"""
Tests for core graph functionality.
"""

from followgraph.core.graph import SocialGraph
from followgraph.core.models import EdgeKind, Profile, ProfileRecord, ProfileStatus


def test_add_identity_is_idempotent(graph, ident):
    """Test adding the same identity twice returns the same handle."""
    handle, created = graph.add_identity(ident(1))
    again, created_again = graph.add_identity(ident(1))

    assert created is True
    assert created_again is False
    assert handle == again
    assert len(graph) == 1
    assert ident(1) in graph
    assert graph.identity_at(handle) == ident(1)
    assert graph.handle_of(ident(1)) == handle


def test_unknown_identities_never_raise(graph, ident):
    """Test queries on identities the graph has never seen."""
    assert not graph.contains(ident(9))
    assert graph.handle_of(ident(9)) is None
    assert graph.identity_at(42) is None
    assert list(graph.get_contacts(ident(9))) == []
    assert graph.get_mutuals(ident(9)) == set()
    assert graph.get_followers(ident(9)) == set()
    assert graph.are_mutual(ident(9), ident(8)) is False
    assert graph.last_follow_update(ident(9)) is None


def test_add_follow(graph, ident):
    """Test adding follows creates nodes and never duplicates edges."""
    edge = graph.add_follow(ident(1), ident(2))
    again = graph.add_follow(ident(1), ident(2))

    assert edge == again
    assert edge.kind is EdgeKind.FOLLOWING
    assert graph.node_count() == 2
    assert graph.edge_count() == 1
    assert graph.is_following(ident(1), ident(2))
    assert not graph.is_following(ident(2), ident(1))
    assert graph.last_follow_update(ident(1)) is not None
    assert graph.last_follow_update(ident(2)) is None


def test_are_mutual_is_symmetric(graph, ident):
    """Test mutuality requires edges in both directions."""
    graph.add_follow(ident(1), ident(2))
    assert not graph.are_mutual(ident(1), ident(2))

    graph.add_follow(ident(2), ident(1))
    assert graph.are_mutual(ident(1), ident(2))
    assert graph.are_mutual(ident(2), ident(1))
    assert graph.get_mutuals(ident(1)) == {ident(2)}


def test_update_contact_list_replaces_previous(graph, ident):
    """Test a new contact list replaces the old follows entirely."""
    graph.update_contact_list(ident(1), [ident(2), ident(3)])
    graph.update_contact_list(ident(1), [ident(3), ident(4)])

    assert set(graph.get_contacts(ident(1))) == {ident(3), ident(4)}
    assert graph.get_followers(ident(2)) == set()
    assert graph.get_followers(ident(3)) == {ident(1)}
    assert graph.edge_count() == 2


def test_update_contact_list_records_empty_list(graph, ident):
    """Test an empty contact list still counts as an update."""
    graph.update_contact_list(ident(1), [ident(2)])
    graph.update_contact_list(ident(1), [])

    assert list(graph.get_contacts(ident(1))) == []
    assert graph.last_follow_update(ident(1)) is not None
    assert graph.edge_count() == 0


def test_remove_contact_list(graph, ident):
    """Test removing a contact list keeps the nodes."""
    graph.update_contact_list(ident(1), [ident(2), ident(3)])
    graph.remove_contact_list(ident(1))
    graph.remove_contact_list(ident(7))

    assert graph.get_degree(ident(1)) == 0
    assert graph.node_count() == 3


def test_contact_view_is_lazy(graph, ident):
    """Test a contact view reflects updates made after it was created."""
    view = graph.get_contacts(ident(1))
    assert list(view) == []

    graph.update_contact_list(ident(1), [ident(2)])

    assert list(view) == [ident(2)]
    assert list(view) == [ident(2)]
    assert len(view) == 1
    assert ident(2) in view
    assert ident(3) not in view


def test_degree_and_followers(graph, ident):
    """Test follow and follower counts."""
    graph.update_contact_list(ident(1), [ident(3)])
    graph.update_contact_list(ident(2), [ident(3)])

    assert graph.get_degree(ident(1)) == 1
    assert graph.get_degree(ident(3), reverse=True) == 2
    assert graph.get_followers(ident(3)) == {ident(1), ident(2)}
    assert graph.get_nodes() == {ident(1), ident(2), ident(3)}


def test_profile_cache_states(graph, ident):
    """Test the three profile cache states."""
    profile = Profile(name="alice")
    graph.set_profile(ident(1), profile, 100)
    graph.mark_no_profile(ident(2))

    assert graph.profile_status(ident(1)) is ProfileStatus.PRESENT
    assert graph.profile_status(ident(2)) is ProfileStatus.MISSING
    assert graph.profile_status(ident(3)) is ProfileStatus.UNKNOWN
    assert graph.get_profile(ident(1)) == ProfileRecord(profile, 100)
    assert graph.get_profile(ident(2)) is None


def test_merge_profiles(graph, ident):
    """Test merging fetched profile records."""
    graph.merge_profiles({ident(1): ProfileRecord(Profile(name="bob"), 5), ident(2): None})

    assert graph.get_profile(ident(1)).profile.label == "bob"
    assert graph.profile_status(ident(2)) is ProfileStatus.MISSING
    assert ident(2) in graph


def test_locked_allows_nested_operations(ident):
    """Test the graph lock is re-entrant."""
    graph = SocialGraph()
    with graph.locked() as locked:
        locked.add_follow(ident(1), ident(2))
        locked.add_follow(ident(2), ident(1))
        assert locked.are_mutual(ident(1), ident(2))
