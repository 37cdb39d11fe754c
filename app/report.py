"""HTML rendering for the comparison report."""

from __future__ import annotations

from html import escape
from textwrap import dedent
from typing import TYPE_CHECKING, Sequence

from .display import (
    community_average,
    display_for,
    group_average,
    score_comparison_class,
)
from .models import AnimeEntry
from .tagging import row_tags
from .utils import format_score

if TYPE_CHECKING:
    from .pipeline import Comparison


FILTER_GROUPS: tuple[tuple[str, str], ...] = (
    ("anyof", "Include anime with any of these tags..."),
    ("allof", "...and with all of these tags..."),
    ("noneof", "...unless they have any of these tags"),
)
# Single episode OVAs and the like are hidden until the viewer opts in.
HIDDEN_BY_DEFAULT = ("short",)
TAGS_PER_LINE = 3


REPORT_TEMPLATE = dedent(
    """
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="utf-8" />
    <title>__TITLE__</title>
    <style>
        a, a:visited {
            color: black;
            text-decoration: none;
        }
        table, td {
            border: 1px solid black;
            border-collapse: collapse;
        }
        td {
            min-width: 8vw;
            height: 3vh;
            background: mintcream;
        }
        tr.headerrow > td {
            background: mediumaquamarine;
        }
        .absent {
            background: mintcream;
        }
        .watched {
            background: aquamarine;
        }
        .inprogress {
            background: aqua;
        }
        .onhold {
            background: wheat;
        }
        .plantowatch {
            background: plum;
        }
        .dropped {
            background: salmon;
        }
        .unknown {
            background: hotpink;
        }
        .mal-score-higher {
            background: #FAF0DD;
        }
        .mal-score-lower {
            background: #DCD0FF;
        }
        .hidden {
            display: none;
        }
        .checkboxWrapper {
            width: 32%;
            display: inline-block;
        }
        .filterGroup {
            display: inline-block;
            width: 32%;
            padding-bottom: 1em;
        }
        .filterGroup > p {
            margin: 0;
        }
    </style>
    <script>
        function toggleVisibility() {
            const checkboxes = Array.from(document.getElementsByTagName('input'));
            const checked = (filterType) => checkboxes
                .filter((box) => box.className === filterType && box.checked)
                .map((box) => box.value);
            const anyOf = checked('anyof');
            const allOf = checked('allof');
            const noneOf = checked('noneof');
            const rows = document.getElementsByClassName('anime');
            for (let i = 0; i < rows.length; i++) {
                const row = rows.item(i);
                const has = (tag) => row.classList.contains(tag);
                const visible = anyOf.some(has) && allOf.every(has) && !noneOf.some(has);
                row.classList.toggle('hidden', !visible);
            }
        }
        function checkboxAll(checked, filterType) {
            const checkboxes = document.getElementsByClassName(filterType);
            for (let i = 0; i < checkboxes.length; i++) {
                checkboxes.item(i).checked = checked;
            }
            toggleVisibility();
        }
    </script>
</head>
<body onload="toggleVisibility();">
__FILTERS__
    <table>
        <tr>
            <td>&nbsp;</td>
            <td>MAL Average</td>
            <td>Group Average</td>
__USER_COLUMNS__
        </tr>
__ROWS__
    </table>
</body>
</html>
    """
).strip() + "\n"


def _render_filter_group(filter_type: str, caption: str, tags: Sequence[str]) -> str:
    lines = [
        '    <div class="filterGroup">',
        f"        <p>{escape(caption)}</p>",
        "        <div>",
        f"            <button onclick=\"checkboxAll(false, '{filter_type}')\">Uncheck all</button>",
        f"            <button onclick=\"checkboxAll(true, '{filter_type}')\">Check all</button>",
        "        </div>",
        "        <div>",
    ]
    for start in range(0, len(tags), TAGS_PER_LINE):
        lines.append("            <div>")
        for tag in tags[start : start + TAGS_PER_LINE]:
            checked = filter_type == "anyof" or (
                filter_type == "noneof" and tag in HIDDEN_BY_DEFAULT
            )
            lines.append(
                '                <label class="checkboxWrapper">'
                f'<input class="{filter_type}" type="checkbox"'
                f"{' checked' if checked else ''}"
                f' value="{escape(tag)}" onchange="toggleVisibility()"> {escape(tag)}'
                "</label>"
            )
        lines.append("            </div>")
    lines.extend(["        </div>", "    </div>"])
    return "\n".join(lines)


def _render_cell(text: str, css_class: str = "") -> str:
    class_attr = f' class="{escape(css_class)}"' if css_class else ""
    return f"<td{class_attr}>{escape(text)}</td>"


def _render_header_row(title: str, user_count: int) -> str:
    blanks = "".join("<td>&nbsp;</td>" for _ in range(user_count))
    return (
        f'        <tr class="headerrow"><td>{escape(title)}</td>'
        f"<td></td><td></td>{blanks}</tr>"
    )


def _render_anime_row(representative: AnimeEntry, row: Sequence[AnimeEntry]) -> str:
    community = community_average(representative)
    group = group_average(row)
    row_class = " ".join(["anime", *row_tags(representative, row)])
    link = f'<a href="{escape(representative.url)}">{escape(representative.display_title)}</a>'
    cells = [
        f"<td>{link}</td>",
        _render_cell(format_score(community)),
        _render_cell(format_score(group), score_comparison_class(community, group)),
    ]
    for entry in row:
        display = display_for(entry)
        cells.append(_render_cell(display.text, display.css_class))
    return f'        <tr class="{escape(row_class)}">{"".join(cells)}</tr>'


def render_report(comparison: Comparison, *, title: str = "Grouped") -> str:
    """Return the full HTML document for ``comparison``."""

    filters = "\n".join(
        _render_filter_group(filter_type, caption, comparison.tags)
        for filter_type, caption in FILTER_GROUPS
    )
    user_columns = "\n".join(
        f"            <td>{escape(username)}</td>" for username in comparison.usernames
    )
    rows: list[str] = []
    for bucket in comparison.buckets:
        rows.append(
            _render_header_row(
                comparison.criterion.header(bucket.match_count),
                len(comparison.usernames),
            )
        )
        rows.extend(
            _render_anime_row(comparison.normalized.representative_for(row), row)
            for row in bucket.rows
        )

    html = REPORT_TEMPLATE
    replacements = {
        "__TITLE__": escape(title),
        "__FILTERS__": filters,
        "__USER_COLUMNS__": user_columns,
        "__ROWS__": "\n".join(rows),
    }
    for placeholder, value in replacements.items():
        html = html.replace(placeholder, value)
    return html
