import re
from collections import OrderedDict
from typing import Dict, List, Tuple

from ..exceptions import MalformedInputError
from ..schemas import Constraint, ConstraintSign, LPProblem, OptimizationType

_TOKEN_SPLIT = re.compile(r",|;|\band\b", re.IGNORECASE)
_COMPARATOR = re.compile(r"(<=|>=|==|=<|=>|≤|≥|=)")
_MULTI_BOUND = re.compile(r"^([A-Za-z_][\w]*(?:\s*,\s*[A-Za-z_][\w]*)*)\s*>=\s*0(?:\.0*)?$")
_FREE_WORDS = re.compile(r"\b(unrestricted|free|urs)\b", re.IGNORECASE)
_OBJECTIVE_LABEL = re.compile(r"^[A-Za-z_]\w*\s*=(?!=)")
_TERM_PATTERN = re.compile(r"([+-]?\s*\d*\.?\d*)\s*([A-Za-z_][\w]*)")
_NUMBER_PATTERN = re.compile(r"[+-]?\s*\d+(?:\.\d+)?")

_SIGNS = {
    "<=": ConstraintSign.LESS_EQ,
    "=<": ConstraintSign.LESS_EQ,
    "≤": ConstraintSign.LESS_EQ,
    ">=": ConstraintSign.GREATER_EQ,
    "=>": ConstraintSign.GREATER_EQ,
    "≥": ConstraintSign.GREATER_EQ,
    "=": ConstraintSign.EQ,
    "==": ConstraintSign.EQ,
}


def parse_problem_text(spec: str) -> LPProblem:
    """
    Small rule-based parser for textbook statements like:
      "maximize Z = 3x1 + 5x2 subject to x1 <= 4, 2x2 <= 12, 3x1 + 2x2 <= 18, x1, x2 >= 0"
    Declarations such as "x1, x2 >= 0" mark non-negativity; "x1 unrestricted"
    makes every variable free.
    """

    if not spec or not spec.strip():
        raise MalformedInputError("Specification is empty.")

    normalized = " ".join(spec.replace("\n", " ; ").split())
    pieces = re.split(r"subject to|such that|s\.t\.", normalized, flags=re.IGNORECASE)
    objective_part = pieces[0].replace(";", " ").strip()
    constraints_part = pieces[1].strip() if len(pieces) > 1 else ""

    match = re.match(r"(maximize|minimize|maximise|minimise|max|min)\s*(.*)", objective_part, flags=re.IGNORECASE)
    if not match:
        raise MalformedInputError("Objective must start with 'maximize' or 'minimize'.")
    sense = OptimizationType.MAXIMIZE if match.group(1).lower().startswith("max") else OptimizationType.MINIMIZE
    objective_str = _OBJECTIVE_LABEL.sub("", match.group(2).strip()).strip()
    if not objective_str:
        raise MalformedInputError("Objective expression is missing.")

    objective, constant = _parse_linear_expr(objective_str)
    if constant:
        raise MalformedInputError("Constant terms in the objective are not supported.")
    variable_names = OrderedDict((name, None) for name in objective)

    non_negative = True
    parsed: List[Tuple[Dict[str, float], ConstraintSign, float]] = []
    for token in _merge_variable_lists(constraints_part):
        if _FREE_WORDS.search(token) and not _COMPARATOR.search(token):
            non_negative = False
            continue
        if _MULTI_BOUND.match(token):
            for name in [v.strip() for v in token.split(">=")[0].split(",") if v.strip()]:
                variable_names.setdefault(name, None)
            continue

        comp_match = _COMPARATOR.search(token)
        if not comp_match:
            raise MalformedInputError(f"Could not parse constraint segment '{token}'.")
        lhs_str = token[: comp_match.start()].strip()
        rhs_str = token[comp_match.end() :].strip()
        if not lhs_str or not rhs_str:
            raise MalformedInputError(f"Incomplete constraint expression '{token}'.")
        coeffs, constant = _parse_linear_expr(lhs_str)
        try:
            rhs_value = float(rhs_str.replace(" ", ""))
        except ValueError as exc:
            raise MalformedInputError(f"Right-hand side '{rhs_str}' is not numeric.") from exc
        parsed.append((coeffs, _SIGNS[comp_match.group(1)], rhs_value - constant))
        for name in coeffs:
            variable_names.setdefault(name, None)

    variables = list(variable_names.keys())
    constraints = [
        Constraint(
            id=f"c{idx + 1}",
            coefficients=[coeffs.get(name, 0.0) for name in variables],
            sign=sign,
            rhs=rhs,
        )
        for idx, (coeffs, sign, rhs) in enumerate(parsed)
    ]

    return LPProblem(
        name="parsed",
        type=sense,
        variables=variables,
        objective_coefficients=[objective.get(name, 0.0) for name in variables],
        constraints=constraints,
        non_negative=non_negative,
    )


def _merge_variable_lists(constraints_part: str) -> List[str]:
    # "x1, x2 >= 0" is split on the comma; glue comparator-less pieces onto the next one.
    tokens = [tok.strip() for tok in _TOKEN_SPLIT.split(constraints_part) if tok.strip()]
    merged: List[str] = []
    pending: List[str] = []
    for token in tokens:
        if not _COMPARATOR.search(token) and not _FREE_WORDS.search(token):
            pending.append(token)
            continue
        if pending:
            token = ", ".join(pending + [token])
            pending = []
        merged.append(token)
    if pending:
        raise MalformedInputError(f"Could not parse constraint segment '{', '.join(pending)}'.")
    return merged


def _parse_linear_expr(expr_str: str) -> Tuple[Dict[str, float], float]:
    expr_clean = expr_str.replace("*", "")
    coeffs: "OrderedDict[str, float]" = OrderedDict()
    spans: List[Tuple[int, int]] = []

    for match in _TERM_PATTERN.finditer(expr_clean):
        coef_text = match.group(1).replace(" ", "")
        var_name = match.group(2)
        if coef_text in ("", "+"):
            coef = 1.0
        elif coef_text == "-":
            coef = -1.0
        else:
            try:
                coef = float(coef_text)
            except ValueError as exc:
                raise MalformedInputError(f"Bad coefficient '{coef_text}' in '{expr_str}'.") from exc
        coeffs[var_name] = coeffs.get(var_name, 0.0) + coef
        spans.append(match.span())

    remaining = list(expr_clean)
    for start, end in spans:
        for idx in range(start, end):
            remaining[idx] = " "
    remaining_str = "".join(remaining)

    constant = 0.0
    for num_match in _NUMBER_PATTERN.finditer(remaining_str):
        text = num_match.group(0).replace(" ", "")
        if text:
            constant += float(text)

    return OrderedDict((name, coef) for name, coef in coeffs.items()), constant
