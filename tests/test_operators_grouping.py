"""Tests for measurement grouping."""

import pytest

from qobserve import spin
from qobserve.operators import from_word
from qobserve.operators.grouping import (
    MeasurementGroup,
    group_terms,
    qubitwise_compatible,
)


def test_identity_terms_are_split_off(deuteron_hamiltonian):
    identity_terms, groups = group_terms(deuteron_hamiltonian)
    assert [t.coeff for t in identity_terms] == [pytest.approx(5.907)]
    assert all(isinstance(g, MeasurementGroup) for g in groups)
    assert sum(len(g.terms) for g in groups) == 4


def test_basis_strategy_groups_identical_bases(deuteron_hamiltonian):
    _, groups = group_terms(deuteron_hamiltonian, strategy="basis")
    assert [g.label for g in groups] == ["X0X1", "Y0Y1", "Z0", "Z1"]
    assert groups[0].degrees == (0, 1)


def test_basis_strategy_shares_padded_and_repeated_terms():
    h = spin.z(0) + from_word("ZI") + 2.0 * spin.z(0)
    _, groups = group_terms(h, strategy="basis")
    assert len(groups) == 1
    assert groups[0].term_ids == ("Z0", "Z0I1")
    assert len(groups[0].terms) == 3


def test_qubitwise_strategy_merges_commuting_terms(deuteron_hamiltonian):
    _, groups = group_terms(deuteron_hamiltonian, strategy="qubitwise")
    assert [g.label for g in groups] == ["X0X1", "Y0Y1", "Z0Z1"]
    assert groups[2].term_ids == ("Z0", "Z1")


def test_qubitwise_does_not_merge_conflicting_letters():
    h = spin.x(0) + spin.z(0) + spin.x(0) * spin.z(1)
    _, groups = group_terms(h, strategy="qubitwise")
    assert [g.label for g in groups] == ["X0Z1", "Z0"]


def test_term_strategy_one_group_per_term_id():
    h = spin.z(0) + spin.z(1) + 3.0 * spin.z(0)
    _, groups = group_terms(h, strategy="term")
    assert [g.term_ids for g in groups] == [("Z0",), ("Z1",)]


def test_scalar_only_hamiltonian_has_no_groups():
    identity_terms, groups = group_terms(spin.i(0) * 4.0 + spin.i(3))
    assert groups == []
    assert len(identity_terms) == 2


def test_unknown_strategy_raises():
    with pytest.raises(ValueError, match="Unknown grouping strategy"):
        group_terms(spin.z(0), strategy="greedy")


def test_qubitwise_compatible():
    assert qubitwise_compatible({0: "Z"}, {1: "X"})
    assert qubitwise_compatible({0: "Z", 1: "X"}, {1: "X"})
    assert not qubitwise_compatible({0: "Z"}, {0: "X"})
