"""
Tests for block comparison.

Tests cover:
- Criteria checks and their priority
- Structural compatibility
- Disjunction policies
- Restartable block diffs
"""

import math

import pytest

from f06tools.blocktypes import BlockType
from f06tools.compare import (
    Compatible, Criteria, DataDiffer, DisjunctionBehaviour, FlagKind,
    Incompatible, IncompatibilityReason, block_compatibility,
)
from f06tools.errors import IncompatibleBlocksError
from f06tools.indexing import Dof, GridPointRef


ONES = [1.0] * 6


# =============================================================================
# CRITERIA
# =============================================================================


class TestCriteria:
    """Tests for Criteria.check."""

    def test_nan_beats_difference(self):
        reason = Criteria(difference=1.0).check(math.nan, 5.0)
        assert reason.kind is FlagKind.NAN

    def test_nan_check_can_be_disabled(self):
        assert Criteria(nan=False).check(math.nan, 5.0) is None

    def test_infinity(self):
        assert Criteria().check(math.inf, 1.0).kind is FlagKind.INFINITY
        assert Criteria(inf=False).check(math.inf, 1.0) is None

    def test_signs_only_when_asked(self):
        assert Criteria().check(-1.0, 1.0) is None
        assert Criteria(sig=True).check(-1.0, 1.0).kind is FlagKind.SIGNS

    def test_signs_beat_difference(self):
        reason = Criteria(difference=0.1, sig=True).check(-1.0, 1.0)
        assert reason.kind is FlagKind.SIGNS

    def test_difference(self):
        crit = Criteria(difference=0.5)
        assert crit.check(1.0, 1.4) is None
        reason = crit.check(1.0, 2.0)
        assert reason.kind is FlagKind.DIFFERENCE
        assert reason.value == 1.0 and reason.limit == 0.5
        assert str(reason) == "maximum difference exceeded (1 > 0.5)"

    def test_difference_beats_ratio(self):
        reason = Criteria(difference=0.5, ratio=1.5).check(1.0, 4.0)
        assert reason.kind is FlagKind.DIFFERENCE

    def test_ratio(self):
        crit = Criteria(ratio=2.0)
        assert crit.check(1.0, 1.5) is None
        assert crit.check(-1.0, -3.0).value == 3.0
        assert crit.check(0.0, 0.0) is None
        assert math.isinf(crit.check(0.0, 1e-9).value)

    def test_nothing_enabled(self):
        assert Criteria(nan=False, inf=False).check(1.0, 1e9) is None


# =============================================================================
# COMPATIBILITY
# =============================================================================


class TestCompatibility:
    """Tests for block_compatibility."""

    def test_compatible(self, make_block):
        a = make_block(BlockType.DISPLACEMENTS, Dof, {GridPointRef(1): ONES, GridPointRef(2): ONES})
        b = make_block(BlockType.DISPLACEMENTS, Dof, {GridPointRef(1): ONES, GridPointRef(3): ONES})
        compat = block_compatibility(a, b)
        assert isinstance(compat, Compatible)
        assert compat.common_rows == {GridPointRef(1)}
        assert compat.disjunction == {GridPointRef(2), GridPointRef(3)}

    def test_no_common_rows(self, make_block):
        a = make_block(BlockType.DISPLACEMENTS, Dof, {GridPointRef(1): ONES})
        b = make_block(BlockType.DISPLACEMENTS, Dof, {GridPointRef(2): ONES})
        assert block_compatibility(a, b) == Incompatible(IncompatibilityReason.NO_COMMON_ROWS)

    def test_different_columns(self, make_block):
        a = make_block(BlockType.DISPLACEMENTS, Dof, {GridPointRef(1): ONES})
        b = make_block(BlockType.DISPLACEMENTS, {Dof.T1: 0}, {GridPointRef(1): [1.0]})
        assert block_compatibility(a, b).reason is IncompatibilityReason.DIFFERENT_COLUMNS

    def test_differ_refuses_incompatible(self, make_block):
        a = make_block(BlockType.DISPLACEMENTS, Dof, {GridPointRef(1): ONES})
        b = make_block(BlockType.DISPLACEMENTS, Dof, {GridPointRef(1): ONES}, subcase=2)
        with pytest.raises(IncompatibleBlocksError):
            DataDiffer(Criteria()).compare(a, b)


# =============================================================================
# DISJUNCTION
# =============================================================================


class TestDisjunction:
    """Rows found in only one block, under each policy."""

    @pytest.fixture
    def pair(self, make_block):
        a = make_block(BlockType.DISPLACEMENTS, Dof, {GridPointRef(1): ONES, GridPointRef(2): ONES})
        b = make_block(BlockType.DISPLACEMENTS, Dof, {GridPointRef(1): ONES})
        return a, b

    def test_skip(self, pair):
        differ = DataDiffer(Criteria(difference=0.5), DisjunctionBehaviour.SKIP)
        assert list(differ.compare(*pair)) == []

    def test_assume_zeroes(self, pair):
        differ = DataDiffer(Criteria(difference=0.5), DisjunctionBehaviour.ASSUME_ZEROES)
        flags = list(differ.compare(*pair))
        assert len(flags) == 6
        assert {fp.values.row for fp in flags} == {GridPointRef(2)}
        assert all(fp.values.val_b == 0.0 for fp in flags)
        assert all(fp.reason.kind is FlagKind.DIFFERENCE for fp in flags)

    def test_assume_zeroes_within_tolerance(self, pair):
        differ = DataDiffer(Criteria(difference=5.0), DisjunctionBehaviour.ASSUME_ZEROES)
        assert list(differ.compare(*pair)) == []

    def test_flag(self, pair):
        differ = DataDiffer(Criteria(difference=100.0), DisjunctionBehaviour.FLAG)
        flags = list(differ.compare(*pair))
        assert [fp.values.col for fp in flags] == Dof.all()
        assert all(fp.reason.kind is FlagKind.DISJUNCTION for fp in flags)

    def test_from_str(self):
        assert DisjunctionBehaviour.from_str("zero") is DisjunctionBehaviour.ASSUME_ZEROES
        assert DisjunctionBehaviour.from_str(" FLAG ") is DisjunctionBehaviour.FLAG
        with pytest.raises(ValueError):
            DisjunctionBehaviour.from_str("ignore")


# =============================================================================
# BLOCK DIFF
# =============================================================================


class TestBlockDiff:
    """Tests for the lazy flag sequence."""

    def test_restartable_and_ordered(self, make_block):
        a = make_block(BlockType.DISPLACEMENTS, Dof, {
            GridPointRef(2): [1.0, 0.0, 0.0, 0.0, 0.0, 0.0],
            GridPointRef(1): [0.0, 0.0, 0.0, 0.0, 0.0, 1.0],
        })
        b = make_block(BlockType.DISPLACEMENTS, Dof, {
            GridPointRef(1): [0.0] * 6,
            GridPointRef(2): [0.0] * 6,
        })
        diff = DataDiffer(Criteria(difference=0.5)).compare(a, b)
        first = [(fp.values.row, fp.values.col) for fp in diff]
        assert first == [(GridPointRef(1), Dof.R3), (GridPointRef(2), Dof.T1)]
        assert [(fp.values.row, fp.values.col) for fp in diff] == first

    def test_identical_blocks_are_clean(self, make_block):
        rows = {GridPointRef(g): [float(g)] * 6 for g in range(1, 20)}
        a = make_block(BlockType.DISPLACEMENTS, Dof, rows)
        b = make_block(BlockType.DISPLACEMENTS, Dof, dict(reversed(list(rows.items()))))
        assert list(DataDiffer(Criteria(difference=0.0, ratio=1.0, sig=True)).compare(a, b)) == []
