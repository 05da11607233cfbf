"""Generated entrypoint synthesis.

Renders `main.go` for a target from the versioned template resource
`templates/entrypoint.go.tmpl`. The generated program:

    1. builds an Args value
    2. fills in the target name, its config-file path, the platform and the
       complete flag mapping of every declared target as literal data
    3. calls the target's entry function (`git-uncommitted` -> `GitUncommittedApp`)
    4. prints any error to stderr and exits with status 1

Flag lists are emitted as Go string literals, so a corrupt token fails the
compile rather than the program run.
"""

import json
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from string import Template
from typing import Mapping, Optional

TEMPLATE_PATH = Path(__file__).parent / "templates" / "entrypoint.go.tmpl"
ENTRYPOINT_FILENAME = "main.go"

_PLATFORM_GATE = """\tif args.GOOS != runtime.GOOS {
\t\treturn fmt.Errorf("unable to run on %s: built for %s", runtime.GOOS, args.GOOS)
\t}
"""

_FLAG_LINE_RE = re.compile(r'^\targs\.Flags\[("[^"\\]*")\] = \[\]string\{(.*)\}$', re.MULTILINE)


@dataclass(frozen=True)
class EntrypointParams:
    """Everything needed to render one target's entrypoint.

    Attributes:
        target: Target name
        config_file: Resolved declaration path for the target
        platform: Platform the binary is built for
        flag_mapping: Full flag list per declared target
        home_dir: Home directory; config paths below it are rendered HOME-relative
        platform_gate: Emit the runtime platform check
    """

    target: str
    config_file: Path
    platform: str
    flag_mapping: Mapping[str, tuple[str, ...]]
    home_dir: Optional[Path] = None
    platform_gate: bool = True

    @property
    def entry_symbol(self) -> str:
        return entry_symbol(self.target)


def entry_symbol(target: str) -> str:
    """Return the Go entry function for a target name.

    Example:
        >>> entry_symbol("git-uncommitted")
        'GitUncommittedApp'
    """
    parts = [p for p in target.split("-") if p]
    if not parts:
        raise ValueError(f"unable to derive entry symbol from target name: {target!r}")
    return "".join(p[:1].upper() + p[1:] for p in parts) + "App"


def go_string_literal(value: str) -> str:
    """Quote a string as a Go interpreted string literal.

    The escapes used (\\", \\\\ and \\uXXXX) are also valid JSON, which is
    what lets parse_flag_mapping() decode generated sources.
    """
    out = ['"']
    for ch in value:
        code = ord(ch)
        if ch == '"':
            out.append('\\"')
        elif ch == "\\":
            out.append("\\\\")
        elif code < 0x20 or code == 0x7F or code == 0xFEFF:
            out.append(f"\\u{code:04x}")
        elif 0xD800 <= code <= 0xDFFF:
            raise ValueError(f"surrogate code point U+{code:04X} cannot be represented in Go source")
        else:
            out.append(ch)
    out.append('"')
    return "".join(out)


@lru_cache(maxsize=1)
def load_template() -> Template:
    """Load the entrypoint template resource."""
    return Template(TEMPLATE_PATH.read_text(encoding="utf-8"))


def _config_file_expr(config_file: Path, home_dir: Optional[Path]) -> tuple[str, bool]:
    """Render the config path, preferring a HOME-relative expression.

    Returns:
        Tuple of (Go expression, whether path/filepath is needed)
    """
    if home_dir is not None:
        try:
            relative = config_file.relative_to(home_dir)
        except ValueError:
            pass
        else:
            return f'filepath.Join(os.Getenv("HOME"), {go_string_literal(relative.as_posix())})', True
    return go_string_literal(config_file.as_posix()), False


def render_flag_lines(flag_mapping: Mapping[str, tuple[str, ...]]) -> str:
    """Render one `args.Flags[...]` assignment per declared target, sorted by name."""
    lines = []
    for name in sorted(flag_mapping):
        values = ", ".join(go_string_literal(f) for f in flag_mapping[name])
        lines.append(f"\targs.Flags[{go_string_literal(name)}] = []string{{{values}}}")
    return "\n".join(lines)


def render_entrypoint(params: EntrypointParams) -> str:
    """Render the generated entrypoint source for a target.

    Args:
        params: Target name, config path, platform and full flag mapping

    Returns:
        Go source for `main.go`
    """
    config_expr, needs_filepath = _config_file_expr(params.config_file, params.home_dir)

    imports = ["fmt", "os"]
    if needs_filepath:
        imports.append("path/filepath")
    if params.platform_gate:
        imports.append("runtime")

    return load_template().substitute(
        target=params.target,
        imports="\n".join(f"\t{go_string_literal(i)}" for i in sorted(imports)),
        name=go_string_literal(params.target),
        config_file=config_expr,
        platform=go_string_literal(params.platform),
        flags=render_flag_lines(params.flag_mapping),
        platform_gate=_PLATFORM_GATE if params.platform_gate else "",
        entry=params.entry_symbol,
    )


def parse_flag_mapping(source: str) -> dict[str, tuple[str, ...]]:
    """Decode the flag mapping back out of a generated entrypoint."""
    mapping: dict[str, tuple[str, ...]] = {}
    for match in _FLAG_LINE_RE.finditer(source):
        name = json.loads(match.group(1))
        mapping[name] = tuple(json.loads(f"[{match.group(2)}]"))
    return mapping
