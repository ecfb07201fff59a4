from dataclasses import dataclass, field
from typing import Callable, Iterable


Fld = int


# the two-element field, addition is XOR and multiplication is AND
ρ = 0x02


@dataclass
class Var:
    # All variables in a circuit are linear combinations of the entries in its witness vector, so they
    # can be represented by a dictionary that maps the indices of the entries in the witness vector to
    # their coefficients, for example, x = w₀ + w₂ + w₃ can be represented as {0: 1, 2: 1, 3: 1}, note
    # that over GF(2) every coefficient that is kept is 1, the entries with coefficient 0 are omitted.

    data: dict[int, Fld] = field(default_factory=lambda: {})


Gal = Var | Fld


Gate = tuple[Gal, Gal, Gal, str]
Getw = Callable[[Gal], Fld]
Args = dict[str, Fld]
S_Fn = Callable[[Getw, Args], Fld]
M_Fn = Callable[[Getw, Args], Iterable[Fld]]
Func = tuple[None, S_Fn] | tuple[int, M_Fn]


class Witness:
    def __init__(self, funcs: list[Func], args: Args) -> None:
        self.vec: list[Fld] = []
        for n, func in funcs:
            res = func(self.apply, args)
            if n is None:
                self.vec.append(res % ρ)
            else:
                res = list(res)
                assert len(res) == n
                self.vec.extend(r % ρ for r in res)

    def apply(self, xGal: Gal) -> Fld:
        return xGal % ρ if isinstance(xGal, Fld) else sum(self.vec[m] * a for m, a in xGal.data.items()) % ρ  # <w, t> = Σₘ₌₀ᴹ⁻¹ wₘtₘ

    @staticmethod
    def loads(vec: list[Fld]) -> "Witness":
        # Rebuild a witness from an already computed vector, for example, one read back from a file.
        witness = Witness([], {})
        witness.vec = [v % ρ for v in vec]
        return witness
