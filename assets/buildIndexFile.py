import os
import re
import logging
import unicodedata
import urllib.parse
from dataclasses import dataclass
from datetime import datetime
from typing import List, Mapping, NamedTuple, Optional, Tuple

from pyuca import Collator

log = logging.getLogger(__name__)

# =========================
# Config
# =========================
TARGET_DIR_ENV = "TARGET_DIR"
DEFAULT_TARGET_DIR = "docs"
OUTPUT_FILE = "index.html"

_TITLE_RE = re.compile(r"<title[^>]*>(.*?)</title>", re.IGNORECASE | re.DOTALL)
_HTML_SUFFIX_RE = re.compile(r"\.html$", re.IGNORECASE)
_SEPARATORS_RE = re.compile(r"[-_.]")
_COLLATOR = Collator()

_ESCAPES = str.maketrans({
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#39;",
})


def resolve_target_dir(environ: Optional[Mapping[str, str]] = None) -> str:
    """Target directory from TARGET_DIR, falling back to 'docs' when unset or empty."""
    if environ is None:
        environ = os.environ
    return environ.get(TARGET_DIR_ENV) or DEFAULT_TARGET_DIR


@dataclass
class Entry:
    file: str
    title: str


class TitleLookup(NamedTuple):
    title: Optional[str] = None
    reason: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.title is not None


class ScanResult(NamedTuple):
    files: List[str]
    used_fallback: bool = False


# =========================
# Directory scan
# =========================
def sort_key(name: str) -> Tuple[int, ...]:
    """
    Unicode collation key, ignoring case and accents:
    - normalize to NFKD and drop combining marks
    - casefold
    - weigh with the default collation table, so punctuation sorts before digits and letters
    """
    decomposed = unicodedata.normalize("NFKD", name)
    stripped = "".join(c for c in decomposed if not unicodedata.combining(c))
    return _COLLATOR.sort_key(stripped.casefold())


def list_html_files(directory: str) -> List[str]:
    files = [
        f for f in os.listdir(directory)
        if f.lower().endswith(".html") and f.lower() != OUTPUT_FILE
    ]
    return sorted(files, key=sort_key)


def relative_link(out_dir: str, source_file: str) -> str:
    """Path of source_file as seen from out_dir, with '/' separators."""
    rel = os.path.relpath(os.path.abspath(source_file), os.path.abspath(out_dir))
    return rel.replace("\\", "/")


def scan_candidates(out_dir: str, target_label: str, cwd: str) -> ScanResult:
    files = list_html_files(out_dir)
    if files:
        return ScanResult(files)

    # Only the literal "." skips the fallback; "./" or an absolute path to cwd does not.
    if target_label == ".":
        return ScanResult([])

    root_files = list_html_files(cwd)
    if not root_files:
        return ScanResult([])
    linked = [relative_link(out_dir, os.path.join(cwd, f)) for f in root_files]
    return ScanResult(linked, used_fallback=True)


# =========================
# Title resolution
# =========================
def extract_title(text: str) -> TitleLookup:
    m = _TITLE_RE.search(text)
    if not m:
        return TitleLookup(reason="no <title> element")
    title = m.group(1).strip()
    if not title:
        return TitleLookup(reason="empty <title>")
    return TitleLookup(title=title)


def read_title(path: str) -> TitleLookup:
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            text = f.read()
    except OSError as e:
        return TitleLookup(reason=f"unreadable: {e}")
    return extract_title(text)


def slug_to_label(filename: str) -> str:
    name = _HTML_SUFFIX_RE.sub("", os.path.basename(filename))
    return _SEPARATORS_RE.sub(" ", name)


def resolve_title(filename: str, out_dir: str, cwd: str) -> str:
    """
    Display label for one candidate:
    1. <title> of the file inside the target directory
    2. <title> of the same name under the working directory
    3. the file name with its suffix stripped and separators turned into spaces
    """
    for base in (out_dir, cwd):
        lookup = read_title(os.path.join(base, filename))
        if lookup.found:
            return lookup.title
    return slug_to_label(filename)


# =========================
# Rendering
# =========================
def escape_html(value: str) -> str:
    return str(value or "").translate(_ESCAPES)


def encode_href(filename: str) -> str:
    return urllib.parse.quote(filename, safe="/")


def render_card(entry: Entry) -> str:
    title = escape_html(entry.title)
    return f"""
          <a class="card" href="./{encode_href(entry.file)}" title="{title}">
            <div class="title">{title}</div>
            <div class="meta">{escape_html(entry.file)}</div>
          </a>
        """


def render_page(entries: List[Entry], target_label: str, generated_at: Optional[datetime] = None) -> str:
    if generated_at is None:
        generated_at = datetime.now()
    cards = "".join(render_card(e) for e in entries)
    empty = '<div class="empty">No other HTML pages found in this folder.</div>' if not entries else ""

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width,initial-scale=1">
  <title>HTML Page Index</title>
  <style>
    :root {{ --bg: #0f1724; --accent: #06b6d4; --muted: #9ca3af; }}
    body {{
      margin: 0;
      font-family: system-ui, -apple-system, "Segoe UI", Roboto, Arial, sans-serif;
      background: linear-gradient(180deg, #071024 0%, #071a2a 100%);
      color: #e6eef6;
      display: flex;
      justify-content: center;
      padding: 48px 20px;
    }}
    .wrap {{ max-width: 1000px; width: 100%; }}
    header {{ display: flex; align-items: center; gap: 16px; margin-bottom: 20px; }}
    h1 {{ margin: 0; font-size: 20px; }}
    p.lead {{ margin: 0; color: var(--muted); }}
    .search {{ margin-left: auto; }}
    input[type="search"] {{
      padding: 8px 12px;
      border-radius: 10px;
      border: 1px solid rgba(255,255,255,0.04);
      background: rgba(255,255,255,0.02);
      color: inherit;
      width: 220px;
    }}
    .grid {{
      display: grid;
      grid-template-columns: repeat(auto-fill, minmax(220px, 1fr));
      gap: 14px;
      margin-top: 18px;
    }}
    a.card {{
      display: block;
      padding: 14px;
      border-radius: 12px;
      background: rgba(255,255,255,0.02);
      border: 1px solid rgba(255,255,255,0.03);
      box-shadow: 0 6px 18px rgba(2,6,23,0.6);
      color: inherit;
      text-decoration: none;
      transition: transform 0.14s;
    }}
    a.card:hover {{ transform: translateY(-6px); }}
    .title {{ font-weight: 600; margin-bottom: 6px; }}
    .meta {{ font-size: 13px; color: var(--muted); }}
    .empty {{ padding: 28px; border-radius: 12px; background: rgba(255,255,255,0.02); text-align: center; color: var(--muted); }}
    footer {{ margin-top: 28px; color: var(--muted); font-size: 13px; }}
  </style>
</head>
<body>
  <div class="wrap">
    <header>
      <div>
        <h1>HTML Page Index</h1>
        <p class="lead">Every HTML file in this folder ({escape_html(target_label)}), listed automatically.</p>
      </div>
      <div class="search">
        <input id="q" type="search" placeholder="Search (file name or title)">
      </div>
    </header>

    <main>
      <div id="grid" class="grid">
        {cards}
      </div>

      {empty}
    </main>

    <footer>
      Generated page - created {generated_at.strftime("%c")}
    </footer>
  </div>

  <script>
    const items = Array.from(document.querySelectorAll('.card'));
    const q = document.getElementById('q');
    function normalize(s) {{ return s.trim().toLowerCase(); }}
    q.addEventListener('input', () => {{
      const v = normalize(q.value);
      items.forEach(card => {{
        const t = normalize(card.querySelector('.title').textContent + ' ' + card.querySelector('.meta').textContent);
        card.style.display = t.includes(v) ? 'block' : 'none';
      }});
    }});
  </script>
</body>
</html>
"""


def write_page(out_path: str, document: str):
    with open(out_path, "w", encoding="utf-8") as f:
        f.write(document)


# =========================
# Index build
# =========================
def generate_index(target_dir: str, cwd: Optional[str] = None, generated_at: Optional[datetime] = None) -> str:
    """Scan target_dir, resolve titles, and write target_dir/index.html. Returns the output path."""
    if cwd is None:
        cwd = os.getcwd()
    out_dir = os.path.join(cwd, target_dir)
    os.makedirs(out_dir, exist_ok=True)

    scan = scan_candidates(out_dir, target_dir, cwd)
    if scan.used_fallback:
        log.info(
            f"No .html files under {target_dir} - listing {len(scan.files)} file(s) "
            f"from {cwd} (links are relative to {out_dir})"
        )

    entries = [Entry(file=f, title=resolve_title(f, out_dir, cwd)) for f in scan.files]
    log.debug(f"Rendering {len(entries)} entries")

    out_path = os.path.join(out_dir, OUTPUT_FILE)
    write_page(out_path, render_page(entries, target_dir, generated_at))
    log.info(f"Index created: {out_path}")
    return out_path


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=[logging.StreamHandler()]
    )
    generate_index(resolve_target_dir())


if __name__ == "__main__":
    main()
