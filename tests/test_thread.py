"""Tests for reply trees, ordering and vote toggling."""

import pytest

from streettalk.feed.models import Post
from streettalk.feed.thread import build_tree, sort_posts, toggle_vote, vote_path, walk


def _row(key, parent=None, ts=0, votes=None, **extra):
    return {
        "key": key,
        "parent": parent,
        "user_id": "U1",
        "user": "tester",
        "content": key,
        "timestamp": ts,
        "media": [],
        "votes": votes or {},
        **extra,
    }


def _chain(depth: int) -> list[dict]:
    rows = [_row("n0")]
    for i in range(1, depth):
        rows.append(_row(f"n{i}", parent=f"n{i - 1}", ts=i))
    return rows


def test_build_tree_nests_replies():
    roots = build_tree([
        _row("a", ts=1),
        _row("b", ts=2),
        _row("a1", parent="a", ts=3),
        _row("a1x", parent="a1", ts=4),
        _row("a2", parent="a", ts=5),
    ])
    assert [p.key for p in roots] == ["a", "b"]
    assert [r.key for r in roots[0].replies] == ["a1", "a2"]
    assert roots[0].replies[0].replies[0].key == "a1x"


def test_build_tree_drops_orphans():
    roots = build_tree([_row("a"), _row("x", parent="missing")])
    assert [p.key for p in roots] == ["a"]
    assert roots[0].replies == []


def test_votes_become_a_set():
    (post,) = build_tree([_row("a", votes={"U1": True, "U2": True, "U3": False})])
    assert post.votes == frozenset({"U1", "U2"})
    assert post.vote_count == 2
    assert post.has_voted("U1")
    assert not post.has_voted("U3")


def test_sort_new_and_top():
    roots = build_tree([
        _row("old", ts=1, votes={"x": True, "y": True}),
        _row("mid", ts=2),
        _row("new", ts=3, votes={"x": True}),
    ])
    assert [p.key for p in sort_posts(roots, "new")] == ["new", "mid", "old"]
    assert [p.key for p in sort_posts(roots, "top")] == ["old", "new", "mid"]


def test_sort_top_is_stable():
    roots = build_tree([_row("a", ts=1), _row("b", ts=2)])
    assert [p.key for p in sort_posts(roots, "top")] == ["a", "b"]


def test_sort_unknown_mode():
    with pytest.raises(ValueError):
        sort_posts([], "hot")


def test_walk_preorder_with_paths():
    roots = build_tree([
        _row("a", ts=1),
        _row("a1", parent="a", ts=2),
        _row("a1x", parent="a1", ts=3),
        _row("b", ts=4),
    ])
    visited = [(depth, path) for depth, path, _ in walk(roots)]
    assert visited == [
        (0, ("a",)),
        (1, ("a", "a1")),
        (2, ("a", "a1", "a1x")),
        (0, ("b",)),
    ]


def test_walk_respects_max_depth():
    roots = build_tree(_chain(10))
    depths = [depth for depth, _, _ in walk(roots, max_depth=3)]
    assert depths == [0, 1, 2, 3]


def test_deep_threads_do_not_recurse():
    roots = build_tree(_chain(5000))
    assert sum(1 for _ in walk(roots, max_depth=10_000)) == 5000
    data = roots[0].to_dict()
    node = data
    depth = 0
    while node["replies"]:
        node = node["replies"][0]
        depth += 1
    assert depth == 4999


def test_to_dict_shape():
    post = Post(key="k", user_id="U1", user="me", content="hi", timestamp=5, votes=frozenset({"b", "a"}))
    data = post.to_dict()
    assert data["votes"] == ["a", "b"]
    assert data["vote_count"] == 2
    assert data["replies"] == []


def test_vote_path():
    assert vote_path("shouts", ["a"]) == "shouts/a/votes"
    assert vote_path("shouts", ["a", "b", "c"]) == "shouts/a/replies/b/replies/c/votes"


class TestToggleVote:
    def test_adds_then_removes(self):
        toggle = toggle_vote("U1")
        added = toggle(None)
        assert added == {"U1": True}
        assert toggle(added) == {}

    def test_keeps_other_voters(self):
        assert toggle_vote("U2")({"U1": True}) == {"U1": True, "U2": True}

    def test_does_not_touch_input(self):
        votes = {"U1": True}
        toggle_vote("U1")(votes)
        assert votes == {"U1": True}

    def test_rerun_is_deterministic(self):
        toggle = toggle_vote("U1")
        current = {"U2": True}
        assert toggle(current) == toggle(current)
