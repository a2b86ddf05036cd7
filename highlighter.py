import argparse
import json
import time
from html import escape
from pathlib import Path
from typing import Dict, Mapping

from cnfmatch.match_ast import MatchRange

PALETTE = [
    "#5fa8d3",
    "#72b69d",
    "#bfa75c",
    "#c87f7f",
    "#999ca1",
    "#7fcad3",
    "#cb8b8b",
    "#9b9ea1",
    "#88c39d",
    "#c5ae6d",
]


def highlight(text: str, results: Mapping[str, MatchRange]) -> str:
    """
    Wrap every matched character span of ``text`` in a labeled span element.

    The text is scanned by character index. Ranges ending at an index are
    closed before ranges starting there are opened, each in result order.
    Newlines are preceded by an explicit <br/>.
    """
    ranges = [r for r in results.values() if r.char_start < r.char_end]
    out = []
    for i, c in enumerate(text):
        for r in ranges:
            if r.char_end == i:
                out.append("</span>")
        for r in ranges:
            if r.char_start == i:
                out.append(
                    f'<span class="match {escape(r.label, quote=True)}" '
                    f'data-rule="{escape(r.label, quote=True)}">'
                )
        if c == "\n":
            out.append("<br/>")
        out.append(escape(c))

    for r in ranges:
        if r.char_end >= len(text):
            out.append("</span>")
    return "".join(out)


def generate_css_for_rules(rule_types):
    css = []
    for i, rule in enumerate(sorted(rule_types)):
        color = PALETTE[i % len(PALETTE)]
        # use attribute selector to handle dots and special chars in rule names
        css.append(f".match[data-rule='{escape(rule, quote=True)}'] {{ background-color: {color}; }}")
    return "\n        ".join(css)


def generate_html(highlighted_text, rule_types):
    rule_types = sorted(rule_types)
    toggles = "\n".join(
        f"<label><input type='checkbox' checked style='accent-color: {PALETTE[i % len(PALETTE)]}' onchange=\"toggleRule('{escape(rule, quote=True)}')\"> {escape(rule)}</label>"
        for i, rule in enumerate(rule_types)
    )
    rule_styles = generate_css_for_rules(rule_types)
    return f"""
<!DOCTYPE html>
<html>
<head>
    <meta charset=\"UTF-8\">
    <style>
        body {{ font-family: monospace; background: #121212; color: #e0e0e0; padding: 1em; margin: 0; }}
        .match {{ border-bottom: 2px dotted #888; }}
        {rule_styles}
        .text {{ line-height: 1.4; margin-top: 6em; }}
        .controls {{ position: fixed; top: 0; left: 0; right: 0; background: #1e1e1e; padding: 1em; z-index: 1000; border-bottom: 1px solid #444; }}
        label {{ margin-right: 1em; }}
    </style>
    <script>
    function toggleRule(rule) {{
        document.querySelectorAll(`.match[data-rule='${{rule}}']`).forEach(el => {{
            el.style.backgroundColor = (el.style.backgroundColor === 'transparent') ? '' : 'transparent';
        }});
    }}
    </script>
</head>
<body>
<div class="controls">
    <strong>Toggle highlights:</strong><br>
    {toggles}
</div>
<div class="text">{highlighted_text}</div>
</body>
</html>
"""


def load_match_records(path: Path) -> Dict[str, MatchRange]:
    """Read match records (JSON lines or one JSON array) as written by cnf.py."""
    raw = path.read_text(encoding="utf-8").strip()
    if raw.startswith("["):
        records = json.loads(raw)
    else:
        records = [json.loads(line) for line in raw.splitlines() if line.strip()]
    results: Dict[str, MatchRange] = {}
    for m in records:
        results[m["label"]] = MatchRange(
            label=m["label"],
            token_start=m["token_start"],
            token_end=m["token_end"],
            char_start=m["char_start"],
            char_end=m["char_end"],
        )
    return results


def main():
    parser = argparse.ArgumentParser(
        description="Highlight matches in a text file based on JSON match records from cnf.py."
    )
    parser.add_argument("text_file", type=Path, help="Path to the input text file")
    parser.add_argument(
        "json_file",
        type=Path,
        help="Path to the JSON file with match records from cnf.py",
    )
    parser.add_argument(
        "output_file", type=Path, help="Path to save the output HTML file"
    )
    args = parser.parse_args()

    text = args.text_file.read_text(encoding="utf-8")
    results = load_match_records(args.json_file)

    t0 = time.time()
    highlighted = highlight(text, results)
    t1 = time.time()

    print(f"Rendering: {t1-t0:.3f}s, Total matches: {len(results)}")
    html = generate_html(highlighted, results.keys())
    args.output_file.write_text(html, encoding="utf-8")
    print(f"HTML file with highlights saved to: {args.output_file}")


if __name__ == "__main__":
    main()
