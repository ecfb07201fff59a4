"""
Shared fixtures. Building a Keccak-256 instance produces a few hundred
thousand constraints, so the built circuits are session scoped and reused
by every test that only needs to solve and check witnesses.
"""

import pytest

from gf2keccak.circuit import Circuit
from gf2keccak.program import build, random_messages


# ---------------------------------------------------------------------------
# Circuit fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(scope="session")
def single_circuit():
    """A circuit holding one Keccak-256 instance."""
    circuit = Circuit()
    build(circuit, 1)
    return circuit


@pytest.fixture(scope="session")
def double_circuit():
    """A circuit holding two independent Keccak-256 instances."""
    circuit = Circuit()
    build(circuit, 2)
    return circuit


@pytest.fixture
def api():
    """A fresh backend, used for constant evaluation and gate counting."""
    return Circuit()


# ---------------------------------------------------------------------------
# Message fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def zero_message():
    return bytes(64)


@pytest.fixture(scope="session")
def messages():
    """A stable set of random 64-byte preimages."""
    return random_messages(8, seed=20240517)
