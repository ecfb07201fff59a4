import argparse
import sys
import time

import dill

from .types import Witness
from .circuit import Circuit
from .program import NHASHES, build, assign, count_instances, random_messages
from .checker import check, check_many


class Timer:
    # This is used to measure the time of a block of code.
    def __init__(self, text):
        self.text = text

    def __enter__(self):
        print(self.text, end=" ", flush=True)
        self.beg = time.time()

    def __exit__(self, *info):
        self.end = time.time()
        print("{:.3f} sec".format(self.end - self.beg))


def compile_circuit(n_hashes: int) -> Circuit:
    circuit = Circuit()
    with Timer("Building {} Keccak-256 instance(s)...".format(n_hashes)):
        build(circuit, n_hashes)
    print("Dimension of the witness vector:", circuit.wire_count)
    print("Number of constraints:", len(circuit.gates))
    print("Number of gates:", circuit.gate_count, "(" + ", ".join("{} = {}".format(k, n) for k, n in circuit.counts.items()) + ")")
    print("Number of public entries:", len(circuit.stmts))
    return circuit


def load_or_compile(args, need_funcs: bool):
    # Returns (wire_count, stmts, gates, funcs), loading them from the given files when present and
    # building the circuit otherwise.
    if args.gates is not None and (args.funcs is not None or not need_funcs):
        with open(args.gates, "rb") as gates_file:
            print("Loading constraints from:", args.gates)
            wire_count, stmts, gates = dill.loads(gates_file.read())
        funcs = None
        if need_funcs:
            with open(args.funcs, "rb") as funcs_file:
                print("Loading witness generation functions from:", args.funcs)
                funcs = dill.loads(funcs_file.read())
        return wire_count, stmts, gates, funcs
    if args.gates is not None or args.funcs is not None:
        raise ValueError("--gates and --funcs must be provided together, or neither to build the circuit.")
    circuit = compile_circuit(args.hashes)
    return circuit.wire_count, circuit.stmts, circuit.gates, circuit.funcs


def report(index: int, result) -> None:
    if result.passed:
        print("Witness {}: check passed!".format(index))
    else:
        print("Witness {}: check failed! ({} unsatisfied constraints, first: {})".format(index, len(result.failures), result.failures[0]))


def selftest(n_hashes: int, batch: int, seed: int | None) -> bool:
    # 1. a witness for random preimages and their true digests satisfies the circuit
    # 2. flipping the first preimage bit of every instance, with the digests unchanged, breaks it
    # 3. a batch of witnesses for fresh random preimages all satisfy the circuit
    circuit = compile_circuit(n_hashes)

    messages = random_messages(n_hashes, seed)
    args = assign(messages)
    with Timer("Generating witness..."):
        witness = Witness(circuit.funcs, args)
    if not check(circuit.wire_count, circuit.stmts, circuit.gates, witness).passed:
        print("test 1 failed: a correct witness was rejected")
        return False
    print("test 1 passed")

    for k in range(n_hashes):
        args["P[{}][0]".format(k)] ^= 0x01
    with Timer("Generating witness with flipped input bits..."):
        witness = Witness(circuit.funcs, args)
    if check(circuit.wire_count, circuit.stmts, circuit.gates, witness).passed:
        print("test 2 failed: a witness with a stale digest was accepted")
        return False
    print("test 2 passed")

    messages = random_messages(n_hashes * batch, None if seed is None else seed + 1)
    with Timer("Generating {} witnesses...".format(batch)):
        witnesses = [Witness(circuit.funcs, assign(messages[z * n_hashes : (z + 1) * n_hashes])) for z in range(batch)]
    with Timer("Checking {} witnesses...".format(batch)):
        results = check_many(circuit.wire_count, circuit.stmts, circuit.gates, witnesses)
    if not all(result.passed for result in results):
        print("test 3 failed: {} of {} correct witnesses were rejected".format(sum(not result.passed for result in results), batch))
        return False
    print("test 3 passed")
    return True


def main(argv=None):
    parser = argparse.ArgumentParser(description="Keccak-256 over GF(2): circuit builder, witness solver and checker")
    parser.add_argument("-k", "--hashes", type=int, default=NHASHES, help="number of hash instances in the circuit (default: {})".format(NHASHES))

    subparsers = parser.add_subparsers(dest="command", required=True, help="sub-command")

    parser_compile = subparsers.add_parser("compile", help="build the circuit", description="Build the circuit and write the constraints, witness generation functions, and public entry names to files.")
    parser_compile.add_argument("-g", "--gates", type=str, default=None, help="path to write the constraints to")
    parser_compile.add_argument("-f", "--funcs", type=str, default=None, help="path to write the witness generation functions to")
    parser_compile.add_argument("-n", "--names", type=str, default=None, help="path to write the public entry names to")

    parser_solve = subparsers.add_parser("solve", help="generate a witness", description="Generate a witness for the given (or random) preimages and write it to a file.")
    parser_solve.add_argument("-g", "--gates", type=str, default=None, help="path to read the constraints from (built from scratch if omitted)")
    parser_solve.add_argument("-f", "--funcs", type=str, default=None, help="path to read the witness generation functions from (built from scratch if omitted)")
    parser_solve.add_argument("-m", "--messages", type=bytes.fromhex, nargs="+", default=None, help="the 64-byte preimages in hex, one per hash instance")
    parser_solve.add_argument("-d", "--digests", type=bytes.fromhex, nargs="+", default=None, help="the expected digests in hex (default: the reference Keccak-256 of the preimages)")
    parser_solve.add_argument("-r", "--random", action="store_true", help="use random preimages")
    parser_solve.add_argument("-s", "--seed", type=int, default=None, help="seed for the random preimages")
    parser_solve.add_argument("-w", "--witness", type=str, default="a.witness", help="path to write the witness to (default: a.witness)")

    parser_check = subparsers.add_parser("check", help="check witnesses", description="Check that witnesses satisfy every constraint of the circuit.")
    parser_check.add_argument("-g", "--gates", type=str, default=None, help="path to read the constraints from (built from scratch if omitted)")
    parser_check.add_argument("-w", "--witness", type=str, nargs="+", default=["a.witness"], help="paths to read the witnesses from (default: a.witness)")

    parser_selftest = subparsers.add_parser("selftest", help="run the end-to-end self test", description="Check a correct witness, a witness with flipped input bits, and a batch of random witnesses.")
    parser_selftest.add_argument("-b", "--batch", type=int, default=16, help="number of witnesses in the batch test (default: 16)")
    parser_selftest.add_argument("-s", "--seed", type=int, default=None, help="seed for the random preimages")

    args = parser.parse_args(argv)

    if args.command == "compile":
        circuit = compile_circuit(args.hashes)

        if args.gates is not None:
            with open(args.gates, "wb") as gates_file:
                print("Saving constraints to:", args.gates)
                gates_file.write(dill.dumps((circuit.wire_count, circuit.stmts, circuit.gates)))

        if args.funcs is not None:
            with open(args.funcs, "wb") as funcs_file:
                print("Saving witness generation functions to:", args.funcs)
                funcs_file.write(dill.dumps(circuit.funcs))

        if args.names is not None:
            with open(args.names, "wb") as names_file:
                print("Saving public entry names to:", args.names)
                names_file.write(dill.dumps(list(circuit.stmts.values())))
        # A malicious attacker can tamper with the above files, allowing them to execute arbitrary code when the user loads
        # the files, so it is recommended that the party executing the compilation sign the files before distributing them.

    elif args.command == "solve":
        if args.random == (args.messages is not None):
            raise ValueError("exactly one of --messages and --random must be given.")
        wire_count, stmts, gates, funcs = load_or_compile(args, need_funcs=True)
        # a loaded circuit carries its own number of instances, which overrides --hashes
        n_hashes = count_instances(stmts)
        messages = random_messages(n_hashes, args.seed) if args.random else args.messages
        if len(messages) != n_hashes:
            raise ValueError("got {} preimages for {} hash instances.".format(len(messages), n_hashes))

        print("Generating witness...")
        witness = Witness(funcs, assign(messages, args.digests))

        with open(args.witness, "wb") as witness_file:
            print("Saving witness to:", args.witness)
            witness_file.write(dill.dumps(witness.vec))

    elif args.command == "check":
        args.funcs = None
        wire_count, stmts, gates, funcs = load_or_compile(args, need_funcs=False)

        witnesses = []
        for path in args.witness:
            with open(path, "rb") as witness_file:
                print("Loading witness from:", path)
                witnesses.append(Witness.loads(dill.loads(witness_file.read())))

        print("Checking constraints...")
        results = check_many(wire_count, stmts, gates, witnesses)
        for index, result in enumerate(results):
            report(index, result)
        if not all(result.passed for result in results):
            sys.exit(1)

    elif args.command == "selftest":
        if not selftest(args.hashes, args.batch, args.seed):
            sys.exit(1)


if __name__ == "__main__":
    main()
