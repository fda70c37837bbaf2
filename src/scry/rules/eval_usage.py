"""eval() and other string-to-code execution."""

import re

from ..models import Severity
from .base import JS_FILES, PatternSpec, Rule

_EXPLANATION = """Using eval() and similar functions executes arbitrary code at runtime:

1. Code injection: attacker-controlled input runs with the full privileges of the page or process
2. XSS: user input passed to eval() executes arbitrary JavaScript
3. Data theft: evaluated code can read any data in scope
4. Performance: dynamic code execution prevents engine optimizations

{detail} allows arbitrary code execution and should be avoided."""

_GENERAL_ADVICE = """

General principles:
- Parse data as JSON instead of evaluating code
- Use object property access instead of dynamic evaluation
- Refactor to avoid dynamic code execution entirely"""


def _spec(name: str, pattern: re.Pattern, detail: str, fix: str) -> PatternSpec:
    return PatternSpec(
        name=name,
        pattern=pattern,
        message=f"Dangerous {name} detected",
        explanation=_EXPLANATION.format(detail=detail),
        fix=f"Replace {name} with a safer alternative:\n\n{fix}{_GENERAL_ADVICE}",
    )


class EvalUsageRule(Rule):
    id = "eval-usage"
    name = "eval() Usage"
    description = "Detects dangerous eval() and similar code execution methods"
    severity = Severity.high
    tags = ["security", "code-injection"]
    file_pattern = JS_FILES

    patterns = [
        _spec(
            "eval()",
            re.compile(r"\beval\s*\("),
            "Direct eval() call",
            """// [BAD] Using eval
const result = eval(userInput);

// [GOOD] Parse JSON instead
const result = JSON.parse(userInput);

// [GOOD] Use property access
const result = obj[key]; // instead of eval('obj.' + key)""",
        ),
        _spec(
            "Function constructor",
            re.compile(r"new\s+Function\s*\("),
            "The Function constructor (equivalent to eval)",
            """// [BAD] Using the Function constructor
const fn = new Function('a', 'b', 'return a + b');

// [GOOD] Use a regular function or a lookup table
const operations = { add: (a, b) => a + b, subtract: (a, b) => a - b };
const fn = operations[operationType];""",
        ),
        _spec(
            "setTimeout with string",
            re.compile(r"""setTimeout\s*\(\s*['"`][^'"`]+['"`]"""),
            "setTimeout with a string argument",
            """// [BAD] setTimeout with string
setTimeout("doSomething()", 1000);

// [GOOD] Pass a function
setTimeout(() => doSomething(), 1000);""",
        ),
        _spec(
            "setInterval with string",
            re.compile(r"""setInterval\s*\(\s*['"`][^'"`]+['"`]"""),
            "setInterval with a string argument",
            """// [BAD] setInterval with string
setInterval("doSomething()", 1000);

// [GOOD] Pass a function
setInterval(() => doSomething(), 1000);""",
        ),
    ]
