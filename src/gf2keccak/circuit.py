from typing import Protocol

from .types import ρ, Fld, Var, Gal, Gate, S_Fn, M_Fn, Func


Bit = Gal
Bin = list[Bit]


class GateAPI(Protocol):
    # The capability the Keccak construction depends on: GF(2) addition, subtraction and multiplication
    # over wires, plus an equality assertion. Circuit implements it, but anything with the same four
    # methods can be passed instead.

    def ADD(self, xGal: Gal, yGal: Gal) -> Gal: ...

    def SUB(self, xGal: Gal, yGal: Gal) -> Gal: ...

    def MUL(self, xGal: Gal, yGal: Gal) -> Gal: ...

    def ASSERT_EQ(self, xGal: Gal, yGal: Gal, *, msg: str = ...) -> None: ...


class Circuit:
    # The Circuit class is used to construct boolean circuits over GF(2), it provides a set of methods to
    # create entries in the witness vector, add constraints to the circuit, and perform arithmetic on the
    # variables linearly combined by the entries in the witness vector.
    # Unlike a circuit over a large prime field, additions are not left as growing linear combinations:
    # every addition, subtraction and multiplication of non-constant operands produces exactly one new
    # wire and one constraint, so that the gate count of a construction can be read off directly.

    wire_count: int  # dimension of the witness vector
    funcs: list[Func]  # functions to generate the witness vector entries
    stmts: dict[int, str]  # the public entries, keys are their indices in the witness vector, and values are their names
    gates: list[Gate]  # the constraints in the circuit, see the MKGATE method for details
    counts: dict[str, int]  # number of gates produced by each kind of operation

    def __init__(self) -> None:
        self.wire_count = 0
        self.funcs = []
        self.stmts = {}
        self.gates = []
        self.counts = {"add": 0, "sub": 0, "mul": 0}
        # add a constant 1 to the witness vector
        [self.one] = self.MKWIRE(lambda getw, args: 0x01, "ONE").data

    @property
    def gate_count(self) -> int:
        return sum(self.counts.values())

    def MKWIRE(self, func: S_Fn, name: str | None = None) -> Var:
        # Add a new entry defined by the given function to the witness vector.
        # For example, x = MKWIRE(lambda getw, args: getw(y) * getw(z) % ρ) will add a new entry that is
        # defined by the product of the values of y and z to the witness vector, and assign a variable
        # corresponding to the entry to x.
        i = self.wire_count
        self.funcs.append((None, func))
        self.wire_count += 1
        # if name is specified, the entry will be treated as public
        if name is not None:
            self.stmts[i] = name
        return Var({i: 0x01})

    def MKWIRES(self, func: M_Fn, n: int) -> list[Var]:
        # Add n new entries defined by the given function to the witness vector, and return them as a
        # list of variables.
        i = self.wire_count
        self.funcs.append((n, func))
        self.wire_count += n
        return [Var({i + j: 0x01}) for j in range(n)]

    def MKGATE(self, xGal: Gal, yGal: Gal, zGal: Gal, *, msg="assertion error") -> None:
        # Add a constraint to the circuit, the constraint is represented as (x, y, z, msg), which means
        # x * y = z, msg is the error message when the constraint is not satisfied.
        if isinstance(xGal, Fld) or isinstance(yGal, Fld):
            zGal = self.LINEAR(zGal, self.MUL(xGal, yGal))
            if isinstance(zGal, Fld):
                # a constraint between constants is decided right away, a violated one is kept as the
                # unsatisfiable constraint 0 * 0 = 1 so that the failure shows up when checking
                if zGal != 0x00:
                    self.gates.append((0x00, 0x00, 0x01, msg))
                return
            xGal = 0x00
            yGal = 0x00
        self.gates.append((xGal, yGal, zGal, msg))

    def PARAM(self, name: str, public: bool = False) -> Var:
        # Add a new entry to the witness vector, whose value will be determined by the value correspond-
        # ing to the key named name in the args dictionary at runtime.
        return self.MKWIRE(lambda getw, args: args[name] % ρ, name if public else None)

    def PARAMS(self, name: str, n: int, public: bool = False) -> list[Var]:
        # Add n parameters named name[0], name[1], ..., name[n - 1], their values are read from the args
        # dictionary at runtime as one block of the witness vector.
        keys = ["{}[{}]".format(name, i) for i in range(n)]
        xVars = self.MKWIRES(lambda getw, args: [args[key] % ρ for key in keys], n)
        if public:
            for key, xVar in zip(keys, xVars):
                (i,) = xVar.data
                self.stmts[i] = key
        return xVars

    # linear combinations, these never produce wires or constraints

    def LINEAR(self, xGal: Gal, yGal: Gal) -> Gal:
        # Over GF(2), x + y and x - y are the same linear combination.
        if isinstance(xGal, Fld):
            xGal = Var({self.one: xGal % ρ})
        if isinstance(yGal, Fld):
            yGal = Var({self.one: yGal % ρ})
        rGal = Var({k: v for k in xGal.data.keys() | yGal.data.keys() if (v := (xGal.data.get(k, 0x00) + yGal.data.get(k, 0x00)) % ρ)})
        return rGal.data.get(self.one, 0x00) if rGal.data.keys() <= {self.one} else rGal

    def BIND(self, rGal: Gal, kind: str, *, msg: str) -> Gal:
        # Bind a linear combination to a wire of its own. Constants and combinations that already are a
        # single wire are returned as they are, anything else costs one wire and one constraint.
        if isinstance(rGal, Fld) or len(rGal.data) == 1:
            return rGal
        zGal = self.MKWIRE(lambda getw, args: getw(rGal))
        self.ASSERT_EQ(rGal, zGal, msg=msg)
        self.counts[kind] += 1
        return zGal

    # basic arithmetic operations on variables

    def ADD(self, xGal: Gal, yGal: Gal, *, msg="addition error") -> Gal:
        return self.BIND(self.LINEAR(xGal, yGal), "add", msg=msg)

    def SUB(self, xGal: Gal, yGal: Gal, *, msg="subtraction error") -> Gal:
        return self.BIND(self.LINEAR(xGal, yGal), "sub", msg=msg)

    def MUL(self, xGal: Gal, yGal: Gal, *, msg="multiplication error") -> Gal:
        if isinstance(xGal, Fld):
            xGal %= ρ
        if isinstance(yGal, Fld):
            yGal %= ρ
        if isinstance(xGal, Fld) and isinstance(yGal, Fld):
            return xGal * yGal % ρ
        if xGal == 0x00 or yGal == 0x00:
            return 0x00
        if xGal == 0x01:
            return yGal
        if yGal == 0x01:
            return xGal
        if xGal == yGal:
            return xGal  # x * x = x holds for both elements of GF(2)
        zGal = self.MKWIRE(lambda getw, args: getw(xGal) * getw(yGal) % ρ)
        self.MKGATE(xGal, yGal, zGal, msg=msg)
        self.counts["mul"] += 1
        return zGal

    # assertion operations

    def ASSERT_EQZ(self, xGal: Gal, *, msg="EQZ assertion failed") -> None:
        self.MKGATE(0x00, 0x00, xGal, msg=msg)

    def ASSERT_EQ(self, xGal: Gal, yGal: Gal, *, msg="EQ assertion failed") -> None:
        self.ASSERT_EQZ(self.LINEAR(xGal, yGal), msg=msg)
