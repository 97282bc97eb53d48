#!/usr/bin/env python3
import json
import time
from pathlib import Path

from tableau_optimizer.lp.simplex import load_problem, solve
from tableau_optimizer.schemas import LPProblem, SolverMethod
from scripts.generate_instances import generate_random_lp


def load_example(name: str) -> LPProblem:
    path = Path(__file__).resolve().parent.parent / "examples" / name
    return load_problem(json.loads(path.read_text()))


def main() -> None:
    cases = [
        ("examples/classic_lp.json", load_example("classic_lp.json")),
        ("examples/small_lp.json", load_example("small_lp.json")),
        ("examples/equality_lp.json", load_example("equality_lp.json")),
    ]
    for seed in range(3):
        cases.append((f"random-{seed}", generate_random_lp(4, 4, seed)))

    print("name,method,status,objective,steps,time_ms")
    for name, problem in cases:
        for method in SolverMethod:
            start = time.perf_counter()
            steps = solve(problem, method)
            elapsed_ms = (time.perf_counter() - start) * 1000
            final = steps[-1]
            print(f"{name},{method.value},{final.status},{final.z_value},{len(steps)},{elapsed_ms:.2f}")


if __name__ == "__main__":
    main()
