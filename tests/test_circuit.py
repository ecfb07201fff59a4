"""
Backend behavior: constant folding, one gate per non-constant operation,
witness evaluation, and mismatches surfacing as unsatisfied constraints.
"""

import pytest

from gf2keccak.types import Var, Witness
from gf2keccak.circuit import Circuit
from gf2keccak.checker import check, check_many


def test_constants_fold_without_gates():
    circuit = Circuit()
    assert circuit.ADD(1, 1) == 0
    assert circuit.ADD(1, 0) == 1
    assert circuit.SUB(1, 1) == 0
    assert circuit.SUB(0, 1) == 1
    assert circuit.MUL(1, 1) == 1
    assert circuit.MUL(1, 0) == 0
    assert circuit.SUB(1, 0) == 1
    assert circuit.gate_count == 0
    assert circuit.gates == []


def test_identities_with_wires_are_free():
    circuit = Circuit()
    x = circuit.PARAM("x")
    assert circuit.ADD(x, 0) == x
    assert circuit.ADD(x, x) == 0
    assert circuit.MUL(x, 1) == x
    assert circuit.MUL(x, 0) == 0
    assert circuit.MUL(x, x) == x
    assert circuit.gate_count == 0


def test_each_operation_costs_one_gate():
    circuit = Circuit()
    x = circuit.PARAM("x")
    y = circuit.PARAM("y")
    wires = circuit.wire_count
    z = circuit.ADD(x, y)
    assert isinstance(z, Var)
    assert circuit.counts == {"add": 1, "sub": 0, "mul": 0}
    circuit.MUL(x, y)
    circuit.SUB(1, x)
    assert circuit.counts == {"add": 1, "sub": 1, "mul": 1}
    assert circuit.wire_count == wires + 3
    assert len(circuit.gates) == 3


def test_witness_matches_boolean_semantics():
    for xv in (0, 1):
        for yv in (0, 1):
            circuit = Circuit()
            x = circuit.PARAM("x")
            y = circuit.PARAM("y")
            outs = [circuit.ADD(x, y), circuit.MUL(x, y), circuit.SUB(1, x), circuit.ADD(x, 1)]
            witness = Witness(circuit.funcs, {"x": xv, "y": yv})
            assert [witness.apply(o) for o in outs] == [xv ^ yv, xv & yv, 1 - xv, 1 - xv]
            assert check(circuit.wire_count, circuit.stmts, circuit.gates, witness).passed


def test_parameters_are_reduced_modulo_two():
    circuit = Circuit()
    x = circuit.PARAM("x")
    witness = Witness(circuit.funcs, {"x": 3})
    assert witness.apply(x) == 1


def test_equality_mismatch_is_unsatisfied_not_raised():
    circuit = Circuit()
    x = circuit.PARAM("x")
    e = circuit.PARAM("e", public=True)
    circuit.ASSERT_EQ(circuit.SUB(1, x), e, msg="not x")
    good = check(circuit.wire_count, circuit.stmts, circuit.gates, Witness(circuit.funcs, {"x": 0, "e": 1}))
    bad = check(circuit.wire_count, circuit.stmts, circuit.gates, Witness(circuit.funcs, {"x": 1, "e": 1}))
    assert good.passed
    assert not bad.passed
    assert bad.failures == ["not x"]
    assert ("e", 1) in bad.values
    assert ("ONE", 1) in bad.values


def test_constant_mismatch_is_unsatisfiable():
    circuit = Circuit()
    circuit.ASSERT_EQ(0, 1, msg="constant mismatch")
    circuit.ASSERT_EQ(1, 1, msg="constant match")
    result = check(circuit.wire_count, circuit.stmts, circuit.gates, Witness(circuit.funcs, {}))
    assert not result.passed
    assert result.failures == ["constant mismatch"]


def test_loaded_witness_checks_the_same():
    circuit = Circuit()
    x = circuit.PARAM("x")
    y = circuit.PARAM("y")
    circuit.ASSERT_EQ(circuit.MUL(x, y), 1)
    witness = Witness(circuit.funcs, {"x": 1, "y": 1})
    assert check(circuit.wire_count, circuit.stmts, circuit.gates, Witness.loads(witness.vec)) == check(circuit.wire_count, circuit.stmts, circuit.gates, witness)


def test_parameter_block_is_one_function():
    circuit = Circuit()
    funcs = len(circuit.funcs)
    x = circuit.PARAMS("x", 4, public=True)
    circuit.PARAMS("y", 3)
    assert len(circuit.funcs) == funcs + 2
    assert [circuit.stmts[i] for xVar in x for i in xVar.data] == ["x[0]", "x[1]", "x[2]", "x[3]"]
    assert len(circuit.stmts) == 5
    witness = Witness(circuit.funcs, {"x[0]": 1, "x[1]": 0, "x[2]": 3, "x[3]": 2, "y[0]": 0, "y[1]": 1, "y[2]": 1})
    assert witness.vec == [1, 1, 0, 1, 0, 0, 1, 1]


def test_witness_of_another_circuit_is_an_error():
    circuit = Circuit()
    x = circuit.PARAM("x")
    circuit.ASSERT_EQ(circuit.SUB(1, x), 1)
    short = Witness.loads([1, 0])
    with pytest.raises(ValueError, match="witness has 2 entries, circuit expects 3"):
        check(circuit.wire_count, circuit.stmts, circuit.gates, short)
    with pytest.raises(ValueError, match="witness has 2 entries, circuit expects 3"):
        check_many(circuit.wire_count, circuit.stmts, circuit.gates, [Witness(circuit.funcs, {"x": 0}), short])
