import cmath
import math
import unittest
import warnings

import numpy as np

from cli import CircuitSimulator
from qstate import complex_utils as cu
from qstate import random_source
from qstate.circuit import Operation, QuantumCircuit
from qstate.commands import GateCommand, MeasureCommand, parse_command
from qstate.errors import (CapacityError, InvalidStateError, QubitIndexError,
                           ShapeError)
from qstate.formatting import format_qubit_state
from qstate.gates import (CNOT, CZ, GATES, H, RX, RY, RZ, S, SWAP, T, X, Y, Z,
                          Gate, SingleQubitGate, gate_from_name, is_unitary)
from qstate.qubit import Qubit
from qstate.statevector import StateVector


class FixedSource:
    """Uniform source that always returns the same draw."""
    def __init__(self, value):
        self.value = value

    def random(self):
        return self.value


def norm2(amps):
    return float(np.sum(np.abs(np.asarray(amps)) ** 2))


# -------------------------------------------------------------------
# Complex arithmetic
# -------------------------------------------------------------------
class TestComplexUtils(unittest.TestCase):
    def test_basic_algebra(self):
        a, b = complex(1, 2), complex(3, -1)
        self.assertEqual(cu.add(a, b), complex(4, 1))
        self.assertEqual(cu.subtract(a, b), complex(-2, 3))
        self.assertEqual(cu.multiply(a, b), complex(5, 5))
        self.assertEqual(cu.conjugate(a), complex(1, -2))

    def test_scale_by_real_and_complex(self):
        self.assertEqual(cu.scale(complex(1, -2), 3), complex(3, -6))
        self.assertEqual(cu.scale(complex(1, 1), cu.I), complex(-1, 1))

    def test_magnitude_phase_exp(self):
        self.assertAlmostEqual(cu.magnitude(complex(3, 4)), 5.0)
        self.assertAlmostEqual(cu.phase(complex(0, 1)), math.pi / 2)
        z = complex(0.3, 1.1)
        self.assertAlmostEqual(abs(cu.exp(z) - cmath.exp(z)), 0.0, places=12)

    def test_nan_propagates(self):
        self.assertTrue(math.isnan(cu.add(complex(float("nan"), 0), cu.ONE).real))


# -------------------------------------------------------------------
# Qubit
# -------------------------------------------------------------------
class TestQubit(unittest.TestCase):
    def test_default_is_zero(self):
        q = Qubit()
        self.assertEqual(q.alpha, 1)
        self.assertEqual(q.beta, 0)
        self.assertEqual(q.probability_zero(), 1.0)

    def test_constructor_normalizes(self):
        q = Qubit(3, 4j)
        self.assertAlmostEqual(q.probability_zero(), 0.36)
        self.assertAlmostEqual(q.probability_one(), 0.64)
        self.assertAlmostEqual(q.probability_zero() + q.probability_one(), 1.0)

    def test_zero_vector_is_left_alone(self):
        q = Qubit()
        q.set_state(0, 0)
        self.assertEqual(q.alpha, 0)
        self.assertEqual(q.beta, 0)

    def test_measure_collapses(self):
        q = Qubit(1, 1)
        self.assertEqual(q.measure(FixedSource(0.2)), 0)
        self.assertEqual((q.alpha, q.beta), (1, 0))
        q = Qubit(1, 1)
        self.assertEqual(q.measure(FixedSource(0.7)), 1)
        self.assertEqual((q.alpha, q.beta), (0, 1))
        # collapsed: any later draw agrees
        self.assertEqual(q.measure(FixedSource(0.0)), 1)

    def test_clone_is_independent(self):
        q = Qubit(0.6, 0.8j)
        c = q.clone()
        self.assertEqual((c.alpha, c.beta), (q.alpha, q.beta))
        c.set_state(1, 0)
        self.assertAlmostEqual(q.probability_one(), 0.64)

    def test_str(self):
        self.assertEqual(str(Qubit()), "(1.000+0.000i)|0⟩ + (0.000+0.000i)|1⟩")


# -------------------------------------------------------------------
# Gates
# -------------------------------------------------------------------
class TestGates(unittest.TestCase):
    def test_all_gates_unitary(self):
        for gate in [H, X, Y, Z, S, T, CNOT, CZ, SWAP, RX(0.3), RY(1.2), RZ(-2.0)]:
            self.assertTrue(is_unitary(gate.matrix), gate.name)

    def test_matrices_are_read_only(self):
        with self.assertRaises(ValueError):
            H.matrix[0, 0] = 0

    def test_rotation_matrices(self):
        np.testing.assert_allclose(RX(math.pi).matrix, -1j * X.matrix, atol=1e-12)
        np.testing.assert_allclose(RY(math.pi).matrix, [[0, -1], [1, 0]], atol=1e-12)
        np.testing.assert_allclose(RZ(math.pi).matrix, [[-1j, 0], [0, 1j]], atol=1e-12)
        np.testing.assert_allclose(T.matrix @ T.matrix, S.matrix, atol=1e-12)

    def test_with_params(self):
        g = RX(0.1)
        h = g.with_params(0.5)
        self.assertEqual(h.name, "RX")
        self.assertEqual(h.theta, 0.5)
        self.assertEqual(g.theta, 0.1)

    def test_single_gate_apply(self):
        q = Qubit()
        H.apply([q])
        self.assertAlmostEqual(q.probability_one(), 0.5)
        X.apply([q])
        self.assertAlmostEqual(q.alpha.real, 1 / math.sqrt(2))

    def test_apply_arity(self):
        with self.assertRaises(ShapeError):
            H.apply([Qubit(), Qubit()])
        with self.assertRaises(ShapeError):
            CNOT.apply([Qubit()])

    def test_gate_from_name(self):
        self.assertIs(gate_from_name("cnot"), CNOT)
        self.assertEqual(gate_from_name("RY", [0.25]).theta, 0.25)
        with self.assertRaises(ValueError):
            gate_from_name("FOO")
        with self.assertRaises(ShapeError):
            gate_from_name("RX")
        self.assertEqual(set(GATES), {"H", "X", "Y", "Z", "S", "T", "CNOT", "CZ", "SWAP"})

    def test_non_unitary_matrix_rejected(self):
        with self.assertRaises(InvalidStateError):
            SingleQubitGate("BAD", [[2, 0], [0, 2]])
        with self.assertRaises(ValueError):
            SingleQubitGate("BAD", [[1, 1], [0, 1]])

    def test_base_gate_is_abstract(self):
        with self.assertRaises(TypeError):
            Gate("G", [[1, 0], [0, 1]])


# -------------------------------------------------------------------
# Local circuit model
# -------------------------------------------------------------------
class TestQuantumCircuit(unittest.TestCase):
    def test_add_gate_validation(self):
        qc = QuantumCircuit(2)
        with self.assertRaises(ShapeError):
            qc.add_gate(H, [0, 1])
        with self.assertRaises(QubitIndexError):
            qc.add_gate(CNOT, [0, 2])
        with self.assertRaises(QubitIndexError):
            qc.initialize(-1, 1, 0)
        qc.add_gate(H, 0)
        self.assertEqual(qc.operations, [Operation(H, (0,))])

    def test_operations_is_a_copy(self):
        qc = QuantumCircuit(1)
        qc.add_gate(X, [0])
        ops = qc.operations
        ops.clear()
        self.assertEqual(len(qc.operations), 1)

    def test_execute_replays_in_place(self):
        qc = QuantumCircuit(1)
        qc.add_gate(X, [0])
        qc.execute()
        self.assertEqual(qc.qubit(0).probability_one(), 1.0)
        qc.execute()
        self.assertEqual(qc.qubit(0).probability_one(), 0.0)

    def test_cnot_with_zero_control_is_identity(self):
        qc = QuantumCircuit(2)
        qc.initialize(1, 0.6, 0.8j)
        before = qc.qubit(1)
        qc.add_gate(CNOT, [0, 1])
        qc.execute()
        after = qc.qubit(1)
        self.assertEqual((after.alpha, after.beta), (before.alpha, before.beta))

    def test_cnot_blend(self):
        control, target = Qubit(1, 1), Qubit(0.6, 0.8)
        CNOT.apply([control, target])
        # p1 = 0.5 blends both amplitudes to 0.7, then renormalises
        self.assertAlmostEqual(target.alpha.real, 1 / math.sqrt(2))
        self.assertAlmostEqual(target.beta.real, 1 / math.sqrt(2))

        control, target = Qubit(0, 1), Qubit(0.6, 0.8)
        CNOT.apply([control, target])
        self.assertAlmostEqual(target.alpha.real, 0.8)
        self.assertAlmostEqual(target.beta.real, 0.6)

    def test_cz_blend(self):
        control, target = Qubit(0, 1), Qubit(1, 1)
        CZ.apply([control, target])
        self.assertAlmostEqual(target.beta.real, -1 / math.sqrt(2))

    def test_swap(self):
        qc = QuantumCircuit(2)
        qc.initialize(0, 0, 1)
        qc.add_gate(SWAP, [0, 1])
        qc.execute()
        self.assertEqual(qc.qubit(0).probability_one(), 0.0)
        self.assertEqual(qc.qubit(1).probability_one(), 1.0)

    def test_qubits_accessor_returns_copies(self):
        qc = QuantumCircuit(1)
        qc.qubits[0].set_state(0, 1)
        self.assertEqual(qc.qubit(0).probability_one(), 0.0)

    def test_measure_all_and_reset(self):
        qc = QuantumCircuit(3, rng=FixedSource(0.5))
        qc.add_gate(X, [1])
        qc.execute()
        self.assertEqual(qc.measure_all(), [0, 1, 0])
        qc.reset()
        self.assertEqual(qc.operations, [])
        self.assertEqual(qc.measure(1), 0)

    def test_clone_is_deep(self):
        qc = QuantumCircuit(2)
        qc.add_gate(H, [0])
        c = qc.clone()
        c.execute()
        c.add_gate(X, [1])
        self.assertEqual(qc.qubit(0).probability_one(), 0.0)
        self.assertEqual(len(qc.operations), 1)
        self.assertIs(c.operations[0], qc.operations[0])

    def test_normalization_after_every_gate(self):
        # random angles keep the CNOT/CZ blends away from the exact
        # cancellations that would leave a qubit at the zero vector
        rng = np.random.default_rng(7)
        qc = QuantumCircuit(3)
        for _ in range(40):
            pick = int(rng.integers(6))
            if pick < 3:
                g = [RX, RY, RZ][pick](float(rng.uniform(0.1, 6.0)))
            else:
                g = [CNOT, CZ, SWAP][pick - 3]
            qs = rng.choice(3, size=g.num_qubits, replace=False)
            qc.add_gate(g, [int(i) for i in qs])
        qc.execute()
        for q in qc.qubits:
            self.assertAlmostEqual(q.probability_zero() + q.probability_one(), 1.0, places=9)


# -------------------------------------------------------------------
# Exact state-vector model
# -------------------------------------------------------------------
class TestStateVector(unittest.TestCase):
    def test_capacity_boundary(self):
        with self.assertRaises(CapacityError):
            StateVector(16)
        sv = StateVector(15)
        self.assertEqual(sv.dimension, 1 << 15)
        self.assertEqual(sv.state_vector[0], 1)

    def test_hadamard_round_trip(self):
        sv = StateVector(1)
        sv.apply_single_qubit_gate(H, 0)
        np.testing.assert_allclose(sv.state_vector, [1 / math.sqrt(2)] * 2, atol=1e-12)
        sv.apply_single_qubit_gate(H, 0)
        np.testing.assert_allclose(sv.state_vector, [1, 0], atol=1e-12)

    def test_bit_flip(self):
        sv = StateVector(2)
        sv.apply_single_qubit_gate(X, 0)
        np.testing.assert_allclose(sv.state_vector, [0, 1, 0, 0], atol=1e-12)
        sv.apply_single_qubit_gate(X, 1)
        np.testing.assert_allclose(sv.state_vector, [0, 0, 0, 1], atol=1e-12)

    def test_bell_pair_correlations(self):
        rng = random_source.seeded(1234)
        agree, ones = 0, 0
        trials = 400
        for _ in range(trials):
            sv = StateVector(2, rng=rng)
            sv.apply_single_qubit_gate(H, 0)
            sv.apply_two_qubit_gate(CNOT, [0, 1])
            m0 = sv.measure(0)
            m1 = sv.measure(1)
            agree += m0 == m1
            ones += m0
        self.assertEqual(agree, trials)
        self.assertTrue(0.4 < ones / trials < 0.6)

    def test_bell_state_amplitudes(self):
        sv = StateVector(2)
        sv.apply_single_qubit_gate(H, 0)
        sv.apply_two_qubit_gate(CNOT, [0, 1])
        self.assertAlmostEqual(sv.get_probability([0, 0]), 0.5)
        self.assertAlmostEqual(sv.get_probability([1, 1]), 0.5)
        self.assertAlmostEqual(sv.get_probability([1, 0]), 0.0)

    def test_lower_index_acts_as_control(self):
        sv = StateVector(2)
        sv.apply_single_qubit_gate(X, 0)
        sv.apply_two_qubit_gate(CNOT, [1, 0])
        np.testing.assert_allclose(sv.state_vector, [0, 0, 0, 1], atol=1e-12)

    def test_swap_and_cz(self):
        sv = StateVector(3)
        sv.apply_single_qubit_gate(X, 0)
        sv.apply_two_qubit_gate(SWAP, [0, 2])
        self.assertAlmostEqual(sv.get_probability([0, 0, 1]), 1.0)

        sv = StateVector(2)
        sv.apply_single_qubit_gate(H, 0)
        sv.apply_single_qubit_gate(H, 1)
        sv.apply_two_qubit_gate(CZ, [0, 1])
        np.testing.assert_allclose(sv.state_vector, [0.5, 0.5, 0.5, -0.5], atol=1e-12)

    def test_measurement_collapse_is_stable(self):
        sv = StateVector(3, rng=random_source.seeded(3))
        for q in range(3):
            sv.apply_single_qubit_gate(H, q)
        first = sv.measure(1)
        for _ in range(10):
            self.assertEqual(sv.measure(1), first)
        self.assertAlmostEqual(norm2(sv.state_vector), 1.0, places=12)

    def test_measure_outcome_follows_draw(self):
        sv = StateVector(1, rng=FixedSource(0.3))
        sv.apply_single_qubit_gate(RY(2 * math.asin(math.sqrt(0.4))), 0)
        # P(1) = 0.4 > 0.3 -> outcome 1
        self.assertEqual(sv.measure(0), 1)
        np.testing.assert_allclose(sv.state_vector, [0, 1], atol=1e-12)

    def test_zero_probability_branch_is_guarded(self):
        # P(1) = 1 and the draw 1.0 is not below it, so the empty |0> branch survives
        sv = StateVector(1, rng=FixedSource(1.0))
        sv.set_state([0, 1])
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            self.assertEqual(sv.measure(0), 0)
        self.assertTrue(any(issubclass(w.category, RuntimeWarning) for w in caught))
        self.assertTrue(np.all(np.isfinite(sv.state_vector)))

    def test_tiny_branch_is_renormalised(self):
        sv = StateVector(1, rng=FixedSource(0.0))
        sv.set_state([1, 1e-20])
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            self.assertEqual(sv.measure(0), 1)
        self.assertFalse(any(issubclass(w.category, RuntimeWarning) for w in caught))
        np.testing.assert_allclose(sv.state_vector, [0, 1], atol=1e-12)
        self.assertAlmostEqual(norm2(sv.state_vector), 1.0, places=12)

    def test_measure_all(self):
        sv = StateVector(3, rng=FixedSource(0.99))
        sv.apply_single_qubit_gate(X, 0)
        sv.apply_single_qubit_gate(X, 2)
        self.assertEqual(sv.measure_all(), [1, 0, 1])
        np.testing.assert_allclose(sv.state_vector[5], 1)

    def test_measure_all_distribution(self):
        sv0 = StateVector(2)
        sv0.apply_single_qubit_gate(H, 0)
        sv0.apply_single_qubit_gate(H, 1)
        # draws land in the four equal quarters of the cumulative distribution
        for r, expected in [(0.1, [0, 0]), (0.3, [1, 0]), (0.6, [0, 1]), (0.9, [1, 1])]:
            sv = sv0.clone()
            sv.rng = FixedSource(r)
            self.assertEqual(sv.measure_all(), expected)

    def test_measure_all_rounding_drift(self):
        sv = StateVector(1, rng=FixedSource(1 - 1e-12))
        sv.set_state([math.sqrt(0.5), math.sqrt(0.5 - 1e-11)])
        self.assertEqual(sv.measure_all(), [1])

    def test_validation_errors(self):
        sv = StateVector(2)
        with self.assertRaises(ShapeError):
            sv.set_state([1, 0])
        with self.assertRaises(InvalidStateError):
            sv.set_state([1, 1, 0, 0])
        with self.assertRaises(InvalidStateError):
            sv.set_state([float("nan"), 0, 0, 0])
        with self.assertRaises(InvalidStateError):
            sv.apply_two_qubit_gate(CNOT, [1, 1])
        with self.assertRaises(ShapeError):
            sv.apply_single_qubit_gate(CNOT, 0)
        with self.assertRaises(ShapeError):
            sv.apply_two_qubit_gate(H, [0, 1])
        with self.assertRaises(QubitIndexError):
            sv.apply_single_qubit_gate(H, 2)
        with self.assertRaises(QubitIndexError):
            sv.measure(-1)
        with self.assertRaises(TypeError):
            sv.apply_single_qubit_gate(H, True)
        with self.assertRaises(TypeError):
            sv.measure(0.5)
        with self.assertRaises(ShapeError):
            sv.get_probability([0])
        with self.assertRaises(InvalidStateError):
            sv.get_probability([0, 2])

    def test_set_state_copies(self):
        sv = StateVector(1)
        vec = np.array([0, 1], dtype=complex)
        sv.set_state(vec)
        vec[1] = 5
        self.assertEqual(sv.get_probability([1]), 1.0)

    def test_clone_is_independent(self):
        sv = StateVector(2)
        sv.apply_single_qubit_gate(H, 0)
        c = sv.clone()
        c.apply_single_qubit_gate(X, 1)
        self.assertAlmostEqual(sv.get_probability([0, 1]), 0.0)
        self.assertAlmostEqual(c.get_probability([0, 1]), 0.5)
        sv.state_vector[0] = 0
        self.assertAlmostEqual(sv.get_probability([0, 0]), 0.5)

    def test_normalization_invariant(self):
        rng = np.random.default_rng(11)
        sv = StateVector(4, rng=rng)
        singles = [H, X, Y, Z, S, T]
        for step in range(60):
            if step % 3 == 0:
                q1, q2 = (int(i) for i in rng.choice(4, size=2, replace=False))
                sv.apply_two_qubit_gate([CNOT, CZ, SWAP][int(rng.integers(3))], [q1, q2])
            else:
                g = singles[int(rng.integers(len(singles)))]
                if step % 5 == 0:
                    g = RX(float(rng.uniform(-3, 3)))
                sv.apply_single_qubit_gate(g, int(rng.integers(4)))
            self.assertAlmostEqual(norm2(sv.state_vector), 1.0, places=9)
        sv.measure(2)
        self.assertAlmostEqual(norm2(sv.state_vector), 1.0, places=9)

    def test_exact_and_local_models_agree_on_product_states(self):
        qc = QuantumCircuit(2)
        sv = StateVector(2)
        for gate, q in [(H, 0), (RY(0.4), 1), (T, 0)]:
            qc.add_gate(gate, [q])
            sv.apply_single_qubit_gate(gate, q)
        qc.execute()
        q0, q1 = qc.qubits
        expected = np.kron([q1.alpha, q1.beta], [q0.alpha, q0.beta])
        np.testing.assert_allclose(sv.state_vector, expected, atol=1e-12)


# -------------------------------------------------------------------
# Command layer & shell session
# -------------------------------------------------------------------
class TestCommands(unittest.TestCase):
    def test_parse(self):
        node = parse_command("ry 0.5 1")
        self.assertIsInstance(node, GateCommand)
        self.assertEqual(node.gate.theta, 0.5)
        self.assertEqual(node.qubits, [1])
        node = parse_command("MEASURE -L 2")
        self.assertIsInstance(node, MeasureCommand)
        self.assertTrue(node.local)
        for bad in ["", "FOO 1", "H", "CNOT 0", "RX 0", "MEASURE", "H x", "STATE 1"]:
            with self.assertRaises(ValueError, msg=bad):
                parse_command(bad)

    def test_session_bell_pair(self):
        sim = CircuitSimulator(2, seed=5)
        sim.run("H 0")
        sim.run("CNOT 0 1")
        _, p = sim.run("PROB 1 1")
        self.assertAlmostEqual(p, 0.5)
        _, m0 = sim.run("MEASURE 0")
        _, m1 = sim.run("MEASURE 1")
        self.assertEqual(m0, m1)
        self.assertEqual(sim.history, ["H 0", "CNOT 0 1", "PROB 1 1", "MEASURE 0", "MEASURE 1"])
        self.assertEqual(len(sim.circuit.operations), 2)

    def test_session_errors_do_not_record(self):
        sim = CircuitSimulator(2)
        with self.assertRaises(InvalidStateError):
            sim.run("CNOT 1 1")
        with self.assertRaises(QubitIndexError):
            sim.run("X 5")
        self.assertEqual(sim.history, [])
        self.assertEqual(sim.circuit.operations, [])

    def test_session_execute_and_reset(self):
        sim = CircuitSimulator(1)
        sim.run("X 0")
        msg, _ = sim.run("EXECUTE")
        self.assertIn("q0:", msg)
        self.assertEqual(sim.circuit.qubit(0).probability_one(), 1.0)
        sim.run("RESET")
        self.assertEqual(sim.state.get_probability([0]), 1.0)
        self.assertEqual(sim.circuit.operations, [])

    def test_format_qubit_state(self):
        self.assertEqual(format_qubit_state([1, 0]), "1.000|0⟩ + 0.000|1⟩")
        sv = StateVector(2)
        sv.apply_single_qubit_gate(X, 1)
        self.assertEqual(str(sv), "(1.000)|10⟩")


if __name__ == "__main__":
    unittest.main()
