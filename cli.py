# cli.py

"""
Interactive shell over the qstate register simulators.

Every gate line is recorded on the local QuantumCircuit and applied at once to
the exact StateVector, so the two fidelity models can be compared side by
side (EXECUTE replays the local circuit).
"""

from qstate.circuit import QuantumCircuit
from qstate.commands import parse_command
from qstate.errors import QuantumStateError
from qstate.statevector import StateVector
from qstate import random_source

DEFAULT_QUBITS = 3

# ANSI colors
COLORS = {
    "reset": "\033[0m",
    "red":   "\033[31m",
    "green": "\033[32m",
    "yellow":"\033[33m",
    "blue":  "\033[34m",
    "magenta":"\033[35m",
    "cyan":  "\033[36m"
}

def color_text(text, color):
    return f"{COLORS.get(color, COLORS['reset'])}{text}{COLORS['reset']}"

def print_help():
    print(f"""
{color_text('=== qstate register shell ===','yellow')}

{color_text('Gates','cyan')}
  H|X|Y|Z|S|T <q>                 # single-qubit gate
  RX|RY|RZ <theta> <q>            # rotation by theta radians
  CNOT|CZ|SWAP <q1> <q2>          # two-qubit gate (control, target)

{color_text('Measurement','cyan')}
  MEASURE [-L] <q>                # exact model, or -L for the local circuit
  MEASUREALL [-L]
  PROB <b0> <b1> ...              # basis-state probability, qubit 0 first

{color_text('Other','cyan')}
  STATE      Exact amplitudes and probabilities
  CIRCUIT    Local circuit qubits and recorded operations
  EXECUTE    Replay the local circuit
  RESET      Both models back to |0…0⟩
  SEED <n>   Deterministic measurement outcomes
  HELP, EXIT
""")

class CircuitSimulator:
    def __init__(self, num_qubits: int = DEFAULT_QUBITS, seed=None):
        rng = random_source.seeded(seed) if seed is not None else None
        self.state = StateVector(num_qubits, rng=rng)
        self.circuit = QuantumCircuit(num_qubits, rng=rng)
        # history of successfully evaluated commands
        self.history = []

    @property
    def num_qubits(self):
        return self.state.num_qubits

    def run(self, line):
        """
        Parse and evaluate one command line.

        Ensures:
             Returns (message, value); the command is appended to history.
        """
        node = parse_command(line)
        msg, value = node.evaluate(self)
        self.history.append(str(node))
        return msg, value

# ——— interactive loop —————————————————————————————————————————————
def interactive_cli(num_qubits: int = DEFAULT_QUBITS, seed=None):
    sim = CircuitSimulator(num_qubits, seed=seed)

    print(color_text(f"Welcome to the qstate shell ({sim.num_qubits} qubits)!", "green"))
    print_help()

    while True:
        try:
            inp = input(color_text(">> ", "yellow")).strip()
        except (EOFError, KeyboardInterrupt):
            print()
            break
        if not inp:
            continue

        cmd = inp.split()[0].upper()
        if cmd == "EXIT":
            break
        if cmd == "HELP":
            print_help()
            continue

        try:
            msg, _ = sim.run(inp)
            print(color_text(f"✔ {msg}", "green"))
        except (QuantumStateError, ValueError, IndexError, TypeError) as e:
            print(color_text(f"✗ {e}", "red"))

if __name__ == "__main__":
    interactive_cli()
