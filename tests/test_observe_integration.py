"""End-to-end observe tests against closed-form expectation values."""

import math
import warnings

import numpy as np
import pytest

from qobserve import (
    CancellationToken,
    KernelArgumentError,
    MalformedObservableError,
    NoiseModel,
    NoiseUnsupportedWarning,
    ObserveCancelledError,
    ObserveOptions,
    PauliSum,
    PauliTerm,
    TermNotFoundError,
    depolarization_channel,
    from_word,
    kernel,
    observe,
    observe_async,
    set_random_seed,
    set_target,
    shutdown_async,
    spin,
)

THETA = 0.59
DEUTERON_ENERGY = -1.7487


def _depolarize_first_x() -> NoiseModel:
    noise = NoiseModel()
    noise.add_channel("x", [0], depolarization_channel(1.0))
    return noise


class TestDeuteron:
    """Two-qubit deuteron ansatz at its optimal angle."""

    def test_exact(self, deuteron_ansatz, deuteron_hamiltonian):
        result = observe(deuteron_ansatz, deuteron_hamiltonian, THETA)
        assert result.expectation() == pytest.approx(DEUTERON_ENERGY, abs=1e-3)

    def test_sampled(self, deuteron_ansatz, deuteron_hamiltonian):
        result = observe(100000, deuteron_ansatz, deuteron_hamiltonian, THETA)
        assert result.expectation() == pytest.approx(-1.7, abs=0.1)
        assert result.expectation(spin.z(1)) == pytest.approx(math.cos(THETA), abs=0.02)
        assert len(result.counts(spin.x(0) * spin.x(1))) == 4

    @pytest.mark.parametrize("grouping", ["basis", "qubitwise", "term"])
    def test_grouping_strategies_agree(self, deuteron_ansatz, deuteron_hamiltonian, grouping):
        result = observe(deuteron_ansatz, deuteron_hamiltonian, THETA, grouping=grouping)
        assert result.expectation() == pytest.approx(DEUTERON_ENERGY, abs=1e-3)

    def test_qubitwise_grouping_saves_executions(self, deuteron_ansatz, deuteron_hamiltonian):
        basis = observe(deuteron_ansatz, deuteron_hamiltonian, THETA)
        qubitwise = observe(
            deuteron_ansatz, deuteron_hamiltonian, THETA, grouping="qubitwise"
        )
        assert basis.executions == 4
        assert qubitwise.executions == 3

    def test_density_matrix_target_agrees(self, deuteron_ansatz, deuteron_hamiltonian):
        set_target("density-matrix")
        result = observe(deuteron_ansatz, deuteron_hamiltonian, THETA)
        assert result.expectation() == pytest.approx(DEUTERON_ENERGY, abs=1e-3)

    def test_energy_scan_minimum(self, deuteron_ansatz, deuteron_hamiltonian):
        angles = [0.0, 0.3, THETA, 0.9, 1.2]
        energies = [float(observe(deuteron_ansatz, deuteron_hamiltonian, a)) for a in angles]
        assert min(energies) == energies[2]


def test_exp_pauli_word():
    @kernel
    def evolve(qc, theta: float):
        qubits = qc.qalloc(5)
        qc.exp_pauli(theta, qubits, "XXIIX")

    result = observe(evolve, from_word("ZZIIZ"), 1.0)
    assert result.expectation() == pytest.approx(math.cos(2.0), abs=1e-6)


def test_three_qubit_entangled_kernel():
    @kernel
    def circuit(qc):
        q = qc.qalloc(3)
        qc.rx(0.531, q[0])
        qc.ry(0.9, q[1])
        qc.rx(0.3, q[2])
        qc.cz(q[0], q[1])
        qc.ry(-0.4, q[0])
        qc.cz(q[1], q[2])

    h = spin.z(0) + spin.z(1)
    exact = observe(circuit, h)
    assert exact.expectation(spin.z(0)) == pytest.approx(0.79, abs=0.1)
    assert exact.expectation(spin.z(1)) == pytest.approx(math.cos(0.9), abs=1e-9)

    sampled = observe(circuit, h, shots_count=20000, seed=3)
    assert sampled.expectation(spin.z(0)) == pytest.approx(0.79, abs=0.1)
    assert sampled.expectation(spin.z(1)) == pytest.approx(0.62, abs=0.1)


class TestShotAccounting:
    """Register totals in shots mode."""

    @pytest.mark.parametrize("shots", [1, 252, 1000])
    def test_every_register_holds_the_shot_count(
        self, deuteron_ansatz, deuteron_hamiltonian, shots
    ):
        result = observe(shots, deuteron_ansatz, deuteron_hamiltonian, THETA)
        for name in result.term_register_names():
            assert result.raw_data().counts(name).total() == shots
        assert result.counts().total() == shots * result.executions

    def test_noisy_run_keeps_totals(self, deuteron_ansatz, deuteron_hamiltonian):
        result = observe(
            deuteron_ansatz,
            deuteron_hamiltonian,
            THETA,
            shots_count=252,
            noise_model=_depolarize_first_x(),
            seed=13,
        )
        for name in result.term_register_names():
            assert result.raw_data().counts(name).total() == 252
        assert result.counts().total() == 252 * 4

    def test_noise_changes_the_value(self, deuteron_ansatz, deuteron_hamiltonian):
        clean = observe(20000, deuteron_ansatz, deuteron_hamiltonian, THETA, seed=2)
        noisy = observe(
            20000,
            deuteron_ansatz,
            deuteron_hamiltonian,
            THETA,
            noise_model=_depolarize_first_x(),
            seed=2,
        )
        # Full depolarization after x leaves qubit 0 with <Z> = 1/3, so the
        # controlled flip gives <Z0> = cos(theta) / 3.
        assert noisy.expectation(spin.z(0)) == pytest.approx(
            math.cos(THETA) / 3.0, abs=0.05
        )
        assert noisy.expectation() != pytest.approx(clean.expectation(), abs=0.1)


class TestIdentityTerms:
    """Scalar-only and identity terms."""

    def test_identity_only_needs_no_execution(self, deuteron_ansatz):
        result = observe(100, deuteron_ansatz, 4.0 * spin.i(0), THETA)
        assert result.expectation() == 4.0
        assert result.executions == 0
        assert result.counts().total() == 0
        assert result.expectation(spin.i(0)) == 1.0

    @pytest.mark.parametrize("shots", [None, 100])
    def test_scalar_sum_is_returned_unchanged(self, deuteron_ansatz, shots):
        hamiltonian = PauliSum([PauliTerm(0.1)])
        result = observe(deuteron_ansatz, hamiltonian, THETA, shots_count=shots)
        assert result.expectation() == 0.1
        assert result.executions == 0

    def test_constant_offset(self, deuteron_ansatz):
        result = observe(deuteron_ansatz, 2.5 + spin.z(1), THETA)
        assert result.expectation() == pytest.approx(2.5 + math.cos(THETA))


class TestTermLookup:
    """Structural term identity."""

    def test_padded_term_is_distinct(self, deuteron_ansatz):
        result = observe(deuteron_ansatz, spin.z(0) + spin.z(1), THETA)
        with pytest.raises(TermNotFoundError):
            result.expectation(spin.z(0) * spin.i(1))

        padded = observe(deuteron_ansatz, from_word("ZI"), THETA)
        assert padded.expectation(from_word("ZI")) == pytest.approx(-math.cos(THETA))
        with pytest.raises(TermNotFoundError):
            padded.expectation(spin.z(0))


class TestReproducibility:
    """Seeding and concurrency."""

    def test_same_seed_same_counts(self, deuteron_ansatz, deuteron_hamiltonian):
        a = observe(500, deuteron_ansatz, deuteron_hamiltonian, THETA, seed=7)
        b = observe(500, deuteron_ansatz, deuteron_hamiltonian, THETA, seed=7)
        assert a.counts() == b.counts()
        assert a.expectation() == b.expectation()

    def test_global_seed(self, deuteron_ansatz, deuteron_hamiltonian):
        set_random_seed(21)
        a = observe(500, deuteron_ansatz, deuteron_hamiltonian, THETA)
        b = observe(500, deuteron_ansatz, deuteron_hamiltonian, THETA)
        assert a.counts() == b.counts()

    def test_concurrent_matches_serial(self, deuteron_ansatz, deuteron_hamiltonian):
        serial = observe(1000, deuteron_ansatz, deuteron_hamiltonian, THETA, seed=11)
        concurrent = observe(
            1000, deuteron_ansatz, deuteron_hamiltonian, THETA, seed=11, max_workers=4
        )
        for name in serial.register_names():
            assert serial.raw_data().counts(name) == concurrent.raw_data().counts(name)
        assert serial.expectation() == concurrent.expectation()


class TestCallForms:
    """Positional options, shots and keyword overrides."""

    def test_equivalent_forms(self, deuteron_ansatz, deuteron_hamiltonian):
        options = ObserveOptions(shots=300, seed=4)
        by_options = observe(options, deuteron_ansatz, deuteron_hamiltonian, THETA)
        by_shots = observe(300, deuteron_ansatz, deuteron_hamiltonian, THETA, seed=4)
        by_keyword = observe(
            deuteron_ansatz, deuteron_hamiltonian, THETA, shots_count=300, seed=4
        )
        assert by_options.counts() == by_shots.counts() == by_keyword.counts()

    def test_keyword_overrides_options(self, deuteron_ansatz, deuteron_hamiltonian):
        options = ObserveOptions(shots=300)
        result = observe(options, deuteron_ansatz, deuteron_hamiltonian, THETA, shots_count=50)
        assert result.shots == 50

    def test_numpy_integer_shots(self, deuteron_ansatz, deuteron_hamiltonian):
        result = observe(np.int64(100), deuteron_ansatz, deuteron_hamiltonian, THETA)
        assert result.shots == 100
        assert result.counts(spin.z(1)).total() == 100

    def test_zero_shots_is_exact(self, deuteron_ansatz, deuteron_hamiltonian):
        result = observe(0, deuteron_ansatz, deuteron_hamiltonian, THETA)
        assert result.is_exact

    def test_shots_given_twice(self, deuteron_ansatz, deuteron_hamiltonian):
        with pytest.raises(TypeError, match="both"):
            observe(10, deuteron_ansatz, deuteron_hamiltonian, THETA, shots_count=20)

    def test_missing_hamiltonian(self, deuteron_ansatz):
        with pytest.raises(TypeError, match="requires a kernel"):
            observe(deuteron_ansatz)

    def test_bad_hamiltonian_type(self, deuteron_ansatz):
        with pytest.raises(TypeError, match="PauliTerm or PauliSum"):
            observe(deuteron_ansatz, 3.0, THETA)

    def test_plain_function_kernel(self, deuteron_hamiltonian):
        def ansatz(qc, theta):
            q, r = qc.qalloc(2)
            qc.x(q)
            qc.ry(theta, r)
            qc.cx(r, q)

        result = observe(ansatz, deuteron_hamiltonian, THETA)
        assert float(result) == pytest.approx(DEUTERON_ENERGY, abs=1e-3)


class TestErrors:
    """Failure modes of observe."""

    def test_kernel_argument_errors(self, deuteron_ansatz, deuteron_hamiltonian):
        with pytest.raises(KernelArgumentError):
            observe(deuteron_ansatz, deuteron_hamiltonian)
        with pytest.raises(KernelArgumentError):
            observe(deuteron_ansatz, deuteron_hamiltonian, "0.59")

    def test_degree_beyond_kernel(self, deuteron_ansatz):
        with pytest.raises(MalformedObservableError, match="degree 2"):
            observe(deuteron_ansatz, spin.z(0) + spin.z(2), THETA)

    @pytest.mark.parametrize("max_workers", [None, 4])
    def test_cancelled_before_start(self, deuteron_ansatz, deuteron_hamiltonian, max_workers):
        token = CancellationToken()
        token.cancel()
        with pytest.raises(ObserveCancelledError):
            observe(
                100,
                deuteron_ansatz,
                deuteron_hamiltonian,
                THETA,
                cancel_token=token,
                max_workers=max_workers,
            )


class TestNoiseFallback:
    """Noise models that cannot be applied."""

    def test_exact_mode_ignores_noise(self, deuteron_ansatz, deuteron_hamiltonian):
        with pytest.warns(NoiseUnsupportedWarning, match="exact evaluation"):
            result = observe(
                deuteron_ansatz, deuteron_hamiltonian, THETA, noise_model=_depolarize_first_x()
            )
        assert result.expectation() == pytest.approx(DEUTERON_ENERGY, abs=1e-3)

    def test_explicit_noiseless_backend(self, deuteron_ansatz, deuteron_hamiltonian):
        with pytest.warns(NoiseUnsupportedWarning, match="does not support noise"):
            noisy = observe(
                400,
                deuteron_ansatz,
                deuteron_hamiltonian,
                THETA,
                noise_model=_depolarize_first_x(),
                backend="statevector",
                seed=6,
            )
        clean = observe(400, deuteron_ansatz, deuteron_hamiltonian, THETA, seed=6)
        assert noisy.counts() == clean.counts()

    def test_empty_noise_model_is_silent(self, deuteron_ansatz, deuteron_hamiltonian):
        with warnings.catch_warnings():
            warnings.simplefilter("error", NoiseUnsupportedWarning)
            observe(deuteron_ansatz, deuteron_hamiltonian, THETA, noise_model=NoiseModel())


def test_observe_async(deuteron_ansatz, deuteron_hamiltonian):
    future = observe_async(deuteron_ansatz, deuteron_hamiltonian, THETA)
    assert future.result(timeout=60).expectation() == pytest.approx(DEUTERON_ENERGY, abs=1e-3)

    failing = observe_async(deuteron_ansatz, deuteron_hamiltonian)
    with pytest.raises(KernelArgumentError):
        failing.result(timeout=60)


def test_shutdown_async_releases_the_pool(deuteron_ansatz, deuteron_hamiltonian):
    pending = observe_async(deuteron_ansatz, deuteron_hamiltonian, THETA)
    shutdown_async()
    # Waiting shutdown lets submitted calls finish.
    assert pending.done()
    assert pending.result().expectation() == pytest.approx(DEUTERON_ENERGY, abs=1e-3)
    shutdown_async()

    again = observe_async(deuteron_ansatz, deuteron_hamiltonian, THETA)
    assert again.result(timeout=60).expectation() == pytest.approx(DEUTERON_ENERGY, abs=1e-3)
    shutdown_async()
