"""Tests for ObserveResult accessors."""

import math
from io import StringIO

import pytest

from qobserve import (
    GLOBAL_REGISTER_NAME,
    CountsMap,
    PauliSum,
    PauliTerm,
    ProbabilityTable,
    TermNotFoundError,
    from_word,
    observe,
    spin,
)

THETA = 0.59


@pytest.fixture
def exact_result(deuteron_ansatz, deuteron_hamiltonian):
    return observe(deuteron_ansatz, deuteron_hamiltonian, THETA)


@pytest.fixture
def sampled_result(deuteron_ansatz, deuteron_hamiltonian):
    return observe(deuteron_ansatz, deuteron_hamiltonian, THETA, shots_count=2000, seed=5)


class TestExpectation:
    """Tests for per-term and aggregate values."""

    def test_per_term_values(self, exact_result):
        assert exact_result.expectation(spin.z(0)) == pytest.approx(-math.cos(THETA))
        assert exact_result.expectation(spin.z(1)) == pytest.approx(math.cos(THETA))
        assert exact_result.expectation(spin.x(0) * spin.x(1)) == pytest.approx(math.sin(THETA))
        assert exact_result.expectation(spin.y(0) * spin.y(1)) == pytest.approx(math.sin(THETA))

    def test_lookup_ignores_coefficient(self, exact_result):
        weighted = -2.1433 * spin.x(0) * spin.x(1)
        assert exact_result.expectation(weighted) == exact_result.expectation(
            spin.x(0) * spin.x(1)
        )

    def test_single_term_sum_is_accepted(self, exact_result):
        single = PauliSum.from_terms([spin.z(1)])
        assert exact_result.expectation(single) == exact_result.expectation(spin.z(1))

    def test_aggregate_and_float(self, exact_result):
        assert exact_result.expectation() == pytest.approx(-1.7487, abs=1e-3)
        assert float(exact_result) == exact_result.expectation()

    def test_expectations_mapping(self, exact_result):
        values = exact_result.expectations()
        assert list(values) == ["", "X0X1", "Y0Y1", "Z0", "Z1"]
        assert values[""] == 1.0

    def test_missing_term_raises(self, exact_result):
        with pytest.raises(TermNotFoundError, match="not present"):
            exact_result.expectation(spin.z(0) * spin.i(1))
        with pytest.raises(TermNotFoundError):
            exact_result.counts(spin.x(0))
        with pytest.raises(TermNotFoundError):
            exact_result.probabilities(from_word("ZZ"))

    def test_term_not_found_is_a_key_error(self, exact_result):
        with pytest.raises(KeyError):
            exact_result.expectation(spin.z(5))

    def test_multi_term_sum_rejected(self, exact_result):
        with pytest.raises(ValueError, match="single-term"):
            exact_result.expectation(spin.z(0) + spin.z(1))
        with pytest.raises(TypeError):
            exact_result.expectation("Z0")


class TestExactStatistics:
    """Statistics of an exact evaluation."""

    def test_metadata(self, exact_result, deuteron_hamiltonian):
        assert exact_result.is_exact
        assert exact_result.shots is None
        assert exact_result.executions == 4
        assert exact_result.get_spin() is deuteron_hamiltonian

    def test_counts_are_empty(self, exact_result):
        assert exact_result.counts() == CountsMap()
        assert exact_result.counts(spin.z(1)).total() == 0
        assert len(exact_result.raw_data()) == 0
        assert exact_result.register_names() == []

    def test_probabilities_are_exact(self, exact_result):
        table = exact_result.probabilities(spin.z(1))
        assert isinstance(table, ProbabilityTable)
        assert table["0"] == pytest.approx(math.cos(THETA / 2) ** 2)

    def test_identity_term_has_no_distribution(self, exact_result):
        assert exact_result.probabilities(PauliTerm(5.907)).to_dict() == {}

    def test_repr_and_dump(self, exact_result):
        assert "exact" in repr(exact_result)
        stream = StringIO()
        exact_result.dump(stream)
        text = stream.getvalue()
        assert text.startswith("ObserveResult(exact, executions=4)")
        assert "<Z1> =" in text
        assert "<I> = 1" in text


class TestSampledStatistics:
    """Statistics of a sampled evaluation."""

    def test_register_names(self, sampled_result):
        assert sampled_result.register_names() == [
            GLOBAL_REGISTER_NAME,
            "X0X1",
            "Y0Y1",
            "Z0",
            "Z1",
        ]
        assert sampled_result.term_register_names() == ["X0X1", "Y0Y1", "Z0", "Z1"]

    def test_register_totals(self, sampled_result):
        assert sampled_result.counts().total() == 2000 * 4
        for name in sampled_result.term_register_names():
            assert sampled_result.raw_data().counts(name).total() == 2000
        assert sampled_result.counts(spin.z(1)).n_bits == 1
        assert sampled_result.counts(spin.x(0) * spin.x(1)).n_bits == 2

    def test_global_register_is_full_width(self, sampled_result):
        assert sampled_result.counts().n_bits == 2

    def test_empirical_probabilities(self, sampled_result):
        table = sampled_result.probabilities(spin.z(0))
        assert table.total() == pytest.approx(1.0)
        assert table.get("1", 0.0) == pytest.approx(math.cos(THETA / 2) ** 2, abs=0.05)

    def test_expectation_matches_register(self, sampled_result):
        counts = sampled_result.counts(spin.z(1))
        assert sampled_result.expectation(spin.z(1)) == pytest.approx(
            counts.parity_expectation()
        )

    def test_dump_includes_registers(self, sampled_result):
        stream = StringIO()
        sampled_result.dump(stream)
        text = stream.getvalue()
        assert "2000 shots" in text
        assert GLOBAL_REGISTER_NAME in text
