# qstate/commands.py

"""
Command nodes for the interactive shell.

Each line typed at the prompt is parsed into a node exposing
``evaluate(sim) -> (message, value)``, where ``sim`` is a session object
holding a local ``circuit`` and an exact ``state`` of the same width.

    H 0                 # gate on qubit 0
    RY 1.5708 1         # rotation: angle first, then qubit
    CNOT 0 1            # control, target
    MEASURE 0           # exact model; MEASURE -L 0 for the local circuit
    MEASUREALL [-L]
    PROB 0 1            # P(qubit0=0, qubit1=1) on the exact model
    EXECUTE             # replay the local circuit's recorded gates
    STATE | CIRCUIT | RESET | SEED <n>
"""

from qstate import random_source
from qstate.formatting import format_probabilities, format_qubit_state
from qstate.gates import GATES, ROTATIONS, gate_from_name


def _parse_int(tok, what="qubit"):
    try:
        return int(tok)
    except ValueError:
        raise ValueError(f"Invalid {what} '{tok}'") from None


class GateCommand:
    def __init__(self, gate, qubits):
        self.gate = gate
        self.qubits = list(qubits)

    def evaluate(self, sim):
        # exact model first: it validates placement (e.g. equal indices)
        sim.state.apply_gate(self.gate, self.qubits)
        sim.circuit.add_gate(self.gate, self.qubits)
        return f"{self.gate.name} on {self.qubits}", None

    def __str__(self):
        return f"{self.gate.name} {' '.join(map(str, self.qubits))}"


class MeasureCommand:
    def __init__(self, qubit, local=False):
        self.qubit = qubit
        self.local = local

    def evaluate(self, sim):
        if self.local:
            bit = sim.circuit.measure(self.qubit)
        else:
            bit = sim.state.measure(self.qubit)
        return f"qubit {self.qubit} -> {bit}", bit

    def __str__(self):
        return f"MEASURE {'-L ' if self.local else ''}{self.qubit}"


class MeasureAllCommand:
    def __init__(self, local=False):
        self.local = local

    def evaluate(self, sim):
        model = sim.circuit if self.local else sim.state
        bits = model.measure_all()
        return "bits (qubit 0 first): " + "".join(map(str, bits)), bits

    def __str__(self):
        return "MEASUREALL" + (" -L" if self.local else "")


class ProbCommand:
    def __init__(self, bits):
        self.bits = list(bits)

    def evaluate(self, sim):
        p = sim.state.get_probability(self.bits)
        return f"P({''.join(map(str, self.bits))}) = {p:.6f}", p

    def __str__(self):
        return "PROB " + " ".join(map(str, self.bits))


class StateCommand:
    def evaluate(self, sim):
        body = format_qubit_state(sim.state.state_vector)
        bars = format_probabilities(sim.state.probabilities())
        return f"{body}\n{bars}", sim.state.state_vector

    def __str__(self):
        return "STATE"


class CircuitCommand:
    def evaluate(self, sim):
        return str(sim.circuit), sim.circuit.operations

    def __str__(self):
        return "CIRCUIT"


class ExecuteCommand:
    def evaluate(self, sim):
        sim.circuit.execute()
        lines = [f"q{i}: {format_qubit_state(q.as_array())}"
                 for i, q in enumerate(sim.circuit.qubits)]
        return "\n".join(lines), None

    def __str__(self):
        return "EXECUTE"


class ResetCommand:
    def evaluate(self, sim):
        sim.circuit.reset()
        sim.state.reset()
        return "register reset to |0…0⟩", None

    def __str__(self):
        return "RESET"


class SeedCommand:
    def __init__(self, seed):
        self.seed = seed

    def evaluate(self, sim):
        rng = random_source.seeded(self.seed)
        sim.circuit.rng = rng
        sim.state.rng = rng
        return f"measurement source seeded with {self.seed}", rng

    def __str__(self):
        return f"SEED {self.seed}"


def parse_command(command_str: str):
    tokens = command_str.strip().split()
    if not tokens:
        raise ValueError("Empty command")
    first = tokens[0].upper()
    args = tokens[1:]

    if first in ROTATIONS:
        if len(args) != 2:
            raise ValueError(f"{first} requires an angle and one qubit")
        try:
            theta = float(args[0])
        except ValueError:
            raise ValueError(f"Invalid angle '{args[0]}'") from None
        return GateCommand(gate_from_name(first, [theta]), [_parse_int(args[1])])

    if first in GATES:
        gate = gate_from_name(first)
        if len(args) != gate.num_qubits:
            raise ValueError(f"Gate {first} expects {gate.num_qubits} qubit(s)")
        return GateCommand(gate, [_parse_int(a) for a in args])

    if first == "MEASURE":
        local = "-L" in (a.upper() for a in args)
        rest = [a for a in args if a.upper() != "-L"]
        if len(rest) != 1:
            raise ValueError("MEASURE requires exactly one qubit")
        return MeasureCommand(_parse_int(rest[0]), local=local)

    if first == "MEASUREALL":
        return MeasureAllCommand(local="-L" in (a.upper() for a in args))

    if first == "PROB":
        if not args:
            raise ValueError("PROB requires a basis state, e.g. PROB 0 1")
        return ProbCommand([_parse_int(a, "bit") for a in args])

    if first == "SEED":
        if len(args) != 1:
            raise ValueError("SEED requires exactly one value")
        return SeedCommand(_parse_int(args[0], "seed"))

    simple = {
        "STATE": StateCommand,
        "CIRCUIT": CircuitCommand,
        "EXECUTE": ExecuteCommand,
        "RESET": ResetCommand,
    }
    if first in simple:
        if args:
            raise ValueError(f"{first} takes no arguments")
        return simple[first]()

    raise ValueError(f"Unknown command '{tokens[0]}'")
