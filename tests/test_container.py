import logging
import warnings

import pytest

from levelgen.errors import DepthError, DepthMismatchWarning
from levelgen.geometry import Container, Point


def make_chain():
    root = Container()
    parent = Container(root, Point(3, 4), Point(10, 10))
    child = Container(parent, Point(5, -2), Point(4, 3), Point(1, 1))
    return root, parent, child


def test_depth_follows_owner_chain():
    root, parent, child = make_chain()
    assert root.depth == 0
    assert parent.depth == 1
    assert child.depth == 2


def test_to_own_depth_is_identity():
    _, parent, child = make_chain()
    for c in (parent, child):
        assert c.to_depth(c.depth).bounds() == c.bounds()
        assert c.to_depth().position_at_current_depth == c.position_at_current_depth


def test_to_depth_unwinds_relative_offsets():
    _, _, child = make_chain()
    # depth 1: own position (1, 1) + relative offset (5, -2)
    assert child.bounds(1) == (6, 10, 2, -1)
    # depth 0: plus the parent's offset (3, 4)
    assert child.bounds(0) == (9, 13, 6, 3)
    assert child.left(0) == 9
    assert child.right(0) == 13
    assert child.top(0) == 6
    assert child.bottom(0) == 3
    assert child.position(0) == Point(9, 3)


def test_to_depth_preserves_dimensions():
    _, _, child = make_chain()
    for d in range(child.depth + 1):
        moved = child.to_depth(d)
        assert moved.width == child.width == 4
        assert moved.height == child.height == 3
        assert moved.depth == d


def test_to_deeper_depth_fails_fast():
    _, parent, _ = make_chain()
    with pytest.raises(DepthError):
        parent.to_depth(2)
    with pytest.raises(ValueError):
        parent.to_depth(-1)


def test_root_container_unwinds_to_itself():
    root = Container.from_bounds(2, 5, 7, 1)
    assert root.to_depth(0).bounds() == (2, 5, 7, 1)


def test_position_setter_is_pure_translation():
    _, _, child = make_chain()
    before_world = child.position(0)
    child.position_at_current_depth = Point(11, -4)
    assert child.position_at_current_depth == Point(11, -4)
    assert child.dimension == Point(4, 3)
    # Moving in the own frame moves the world position by the same delta
    assert child.position(0) == before_world + Point(10, -5)


def test_copy_is_independent():
    _, _, child = make_chain()
    clone = child.copy()
    clone.position_at_current_depth = Point(50, 50)
    assert child.position_at_current_depth == Point(1, 1)
    assert clone.owner is child.owner


def test_derived_geometry():
    c = Container.from_bounds(0, 4, 6, 2)
    assert c.width == 4
    assert c.height == 4
    assert c.center() == Point(2, 4)
    assert c.top_left == Point(0, 6)
    assert c.top_right == Point(4, 6)
    assert c.bottom_left == Point(0, 2)
    assert c.bottom_right == Point(4, 2)


def test_from_bounds_with_owner_reprojects():
    root = Container()
    c = Container.from_bounds(1, 3, 4, 2, owner=root)
    assert c.depth == 1
    assert c.bounds(0) == (1, 3, 4, 2)


def test_overlap_is_symmetric():
    a = Container.from_bounds(0, 4, 4, 0)
    cases = [
        Container.from_bounds(2, 6, 6, 2),
        Container.from_bounds(5, 6, 1, 0),
        Container.from_bounds(-3, -1, 2, 1),
        Container.from_bounds(1, 2, 3, 2),
    ]
    for b in cases:
        assert a.overlaps(b) == b.overlaps(a)


def test_touching_edges_count_as_overlap():
    a = Container.from_bounds(0, 2, 2, 0)
    b = Container.from_bounds(2, 4, 2, 0)
    assert a.right() == b.left()
    assert a.overlaps(b)
    assert b.overlaps(a)
    # Corners touching at a single point also overlap
    c = Container.from_bounds(2, 4, 4, 2)
    assert a.overlaps(c)


def test_separated_rectangles_do_not_overlap():
    a = Container.from_bounds(0, 2, 2, 0)
    assert not a.overlaps(Container.from_bounds(3, 5, 2, 0))
    assert not a.overlaps(Container.from_bounds(0, 2, 6, 3))


def test_join_is_envelope_one_level_up():
    root = Container()
    frame = Container(root, Point(10, 20))
    a = Container(frame, Point(0, 0), Point(2, 2))
    b = Container(frame, Point(5, 3), Point(1, 4))
    joined = a.join(b)

    assert joined.depth == a.depth
    assert joined.owner is frame
    expected = (
        min(a.left(1), b.left(1)),
        max(a.right(1), b.right(1)),
        max(a.top(1), b.top(1)),
        min(a.bottom(1), b.bottom(1)),
    )
    assert joined.bounds(1) == expected == (0, 6, 7, 0)
    assert joined.bounds(0) == (10, 16, 27, 20)


def test_join_of_root_containers_stays_at_root():
    a = Container.from_bounds(0, 1, 1, 0)
    b = Container.from_bounds(3, 4, 5, 2)
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        joined = a.join(b)
    assert joined.depth == 0
    assert joined.bounds() == (0, 4, 5, 0)


def test_join_of_unequal_depths_warns_and_still_returns(caplog):
    root = Container()
    shallow = Container(root, Point(0, 0), Point(2, 2))
    deep = Container(shallow, Point(5, 5), Point(1, 1))

    caplog.set_level(logging.ERROR)
    with pytest.warns(DepthMismatchWarning):
        joined = shallow.join(deep)

    assert any("different depth" in rec.message for rec in caplog.records)
    assert joined.bounds(0) == (0, 6, 6, 0)
