"""
Vigil Debug - Plain text exception reports.

Renders an exception, its source context, its cause chain and any
fault metadata (suggested candidates included) with a jinja2 template.
"""

from __future__ import annotations

import linecache
import os
from typing import Any, Dict, List, Tuple

from jinja2 import DictLoader, Environment

from ..faults import Fault

REPORT_TEMPLATE = """\
{{ title }}
{{ "=" * title|length }}

{{ message }}
{% if location %}
  at {{ location }}
{% endif %}
{% if source_lines %}

{% for lineno, code, is_error in source_lines %}
{{ ">" if is_error else " " }} {{ "%4d"|format(lineno) }} | {{ code }}
{% endfor %}
{% endif %}
{% if candidates %}

Candidates:
{% for candidate in candidates %}
  - {{ candidate }}
{% endfor %}
{% endif %}
{% for cause in chain %}

Caused by {{ cause.type }}: {{ cause.message }}
{% endfor %}
"""

_env = Environment(
    loader=DictLoader({"report.txt": REPORT_TEMPLATE}),
    autoescape=False,
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
)


def _read_source_lines(filename: str, lineno: int, context: int = 3) -> List[Tuple[int, str, bool]]:
    """Read source lines around a given line number.

    Returns list of (line_number, source_text, is_error_line).
    """
    lines: List[Tuple[int, str, bool]] = []
    if not filename or lineno <= 0 or not os.path.isfile(filename):
        return lines

    for i in range(max(1, lineno - context), lineno + context + 1):
        line = linecache.getline(filename, i)
        if line:
            lines.append((i, line.rstrip("\n"), i == lineno))
    return lines


def _location(exc: BaseException) -> Tuple[str, int]:
    file = getattr(exc, "file", None)
    line = getattr(exc, "line", 0) or 0
    if file:
        return file, line
    tb = exc.__traceback__
    while tb is not None and tb.tb_next is not None:
        tb = tb.tb_next
    if tb is not None:
        return tb.tb_frame.f_code.co_filename, tb.tb_lineno
    return "", 0


def build_context(exc: BaseException) -> Dict[str, Any]:
    """Collect everything the report template displays."""
    file, line = _location(exc)

    chain = []
    seen = {id(exc)}
    cause = exc.__cause__ or exc.__context__
    while cause is not None and id(cause) not in seen:
        seen.add(id(cause))
        chain.append({"type": type(cause).__name__, "message": str(cause)})
        cause = cause.__cause__ or cause.__context__

    title = type(exc).__name__
    if isinstance(exc, Fault):
        title = f"{title} [{exc.code}]"

    return {
        "title": title,
        "message": str(exc),
        "location": f"{file} line {line}" if file else "",
        "source_lines": _read_source_lines(file, line),
        "candidates": list(getattr(exc, "candidates", ()) or ()),
        "chain": chain,
    }


def render_exception_report(exc: BaseException) -> str:
    """Render a plain text report for ``exc``."""
    return _env.get_template("report.txt").render(**build_context(exc))
