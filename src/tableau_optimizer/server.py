from __future__ import annotations

import os
import sys

from mcp.server.fastmcp import FastMCP
from mcp.server.transport_security import TransportSecuritySettings

from .schemas import LPProblem, SolveOptions, SolverMethod
from .lp.simplex import solve, summarize
from .lp.sensitivity import resource_usage, shadow_prices as compute_shadow_prices
from .lp.dual import dual_problem as build_dual
from .lp.parser import parse_problem_text as parse_text
from .lp.diagnostics import analyze_infeasibility

app = FastMCP("Tableau Optimizer")


@app.tool()
def solve_lp_steps(problem: LPProblem, method: SolverMethod = SolverMethod.TWO_PHASE, options: SolveOptions | None = None) -> dict:
    """Solve an LP and return every tableau step plus a summary of the terminal step."""
    opts = (options or SolveOptions()).model_copy(update={"method": method})
    steps = solve(problem, options=opts)
    return {
        "steps": [step.model_dump() for step in steps],
        "summary": summarize(problem, steps, opts.method).model_dump(),
    }


@app.tool()
def solve_lp(problem: LPProblem, options: SolveOptions | None = None) -> dict:
    """Solve an LP and return only the summary (status, values, shadow prices)."""
    opts = options or SolveOptions()
    return summarize(problem, solve(problem, options=opts), opts.method).model_dump()


@app.tool()
def shadow_prices(problem: LPProblem, options: SolveOptions | None = None) -> dict:
    """Return shadow prices and resource usage at the optimum."""
    opts = options or SolveOptions()
    final = solve(problem, options=opts)[-1]
    if final.status not in ("OPTIMAL", "ALTERNATIVE_SOLUTION"):
        return {"status": final.status, "shadow_prices": {}, "resources": []}
    return {
        "status": final.status,
        "objective_value": final.z_value,
        "shadow_prices": compute_shadow_prices(problem, final),
        "resources": [usage.model_dump() for usage in resource_usage(problem, final)],
    }


@app.tool()
def dual_problem(problem: LPProblem) -> dict:
    """Construct the dual LP of the given problem."""
    return build_dual(problem).model_dump()


@app.tool()
def parse_problem_text(spec: str) -> dict:
    """Parse a short textbook LP statement into structured problem JSON."""
    return parse_text(spec).model_dump()


@app.tool()
def diagnose_infeasibility(problem: LPProblem) -> dict:
    """Return basic infeasibility diagnostics (conflicting constraints)."""
    return analyze_infeasibility(problem)


def main() -> None:
    transport = os.environ.get("MCP_TRANSPORT", "stdio")

    if transport == "stdio" or "--stdio" in sys.argv:
        app.run(transport="stdio")
    else:
        port = int(os.environ.get("PORT", "8081"))
        app.settings.host = "0.0.0.0"
        app.settings.port = port
        app.settings.streamable_http_path = "/mcp"
        app.settings.transport_security = TransportSecuritySettings(
            enable_dns_rebinding_protection=False,
            allowed_hosts=["*"],
            allowed_origins=["*"],
        )
        app.run(transport="streamable-http")


if __name__ == "__main__":
    main()
