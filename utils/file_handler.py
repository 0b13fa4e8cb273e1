from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional, Sequence
import logging
import random

from app.errors import TextSourceError

log = logging.getLogger(__name__)

DEFAULT_TEXT = (
    "Welcome to Typedrill. Type this text exactly as shown; a mistake must be "
    "fixed with backspace before you can move on, and after ten characters "
    "past an uncorrected error the input freezes. When you finish, the report "
    "shows your speed, accuracy, hesitations and the letter pairs that slow you down."
)

_DEFAULT_FILE = Path("assets/texts/default.txt")

CODE_SUFFIXES = (".rs", ".py", ".js", ".ts", ".cpp", ".c", ".java", ".go")

_BLOCK_STARTS = (
    "def ", "async def ", "class ", "fn ", "pub fn ", "struct ", "impl ", "enum ",
    "function ", "func ", "public ", "private ", "static ",
)


class ChunkSize(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"

    @property
    def char_range(self):
        return {"small": (800, 1600), "medium": (1600, 3200), "large": (3200, 4800)}[self.value]

    @property
    def line_range(self):
        return {"small": (20, 40), "medium": (40, 80), "large": (80, 120)}[self.value]


@dataclass
class Paragraph:
    content: str
    score: float = 0.0

    @property
    def char_count(self) -> int:
        return len(self.content)


def normalize_text(text: str) -> str:
    text = text.replace("\r\n", "\n").replace("\r", "\n").expandtabs(4)
    return "\n".join(line.rstrip() for line in text.split("\n")).strip("\n")


def load_text_file(path: Path | str) -> str:
    try:
        text = Path(path).read_text(encoding="utf-8", errors="ignore")
    except OSError as e:
        raise TextSourceError(f"Cannot read {path}: {e}") from e
    text = normalize_text(text)
    if not text.strip():
        raise TextSourceError(f"{path} contains no text")
    return text


def is_code_file(filename: str) -> bool:
    return filename.lower().endswith(CODE_SUFFIXES)


def find_paragraphs(content: str, filename: str) -> List[Paragraph]:
    """Top-level blocks for code files, blank-line separated paragraphs otherwise."""
    lines = content.split("\n")
    if not is_code_file(filename):
        blocks, current = [], []
        for ln in lines:
            if ln.strip():
                current.append(ln)
            elif current:
                blocks.append("\n".join(current))
                current = []
        if current:
            blocks.append("\n".join(current))
        return [Paragraph(b) for b in blocks]

    blocks, current = [], []
    for ln in lines:
        top_level = ln and not ln[0].isspace()
        if top_level and ln.lstrip().startswith(_BLOCK_STARTS) and current:
            blocks.append("\n".join(current).strip("\n"))
            current = []
        if current or ln.strip():
            current.append(ln)
    if current:
        blocks.append("\n".join(current).strip("\n"))
    return [Paragraph(b) for b in blocks if b]


def score_paragraph(content: str, filename: str) -> float:
    length = len(content)
    score = 10.0 if 50 < length < 500 else 5.0
    score += len(set(content)) * 0.5   # varied characters make better practice

    if is_code_file(filename):
        if any(k in content for k in ("fn ", "function ", "def ")):
            score += 15.0
        if any(k in content for k in ("if ", "for ", "while ", "match ", "switch ")):
            score += 10.0
        if any(k in content for k in ("struct ", "class ", "enum ")):
            score += 12.0
        if any(k in content for k in ("Result", "Option", "Error", "try", "catch", "except")):
            score += 8.0
        lines = content.split("\n")
        comments = sum(1 for ln in lines if ln.strip().startswith(("//", "/*", "#")))
        score -= comments / max(1, len(lines)) * 10.0
        imports = sum(1 for ln in lines if "import " in ln or "use " in ln or "#include" in ln)
        if imports > 3:
            score -= 5.0
    else:
        words = len(content.split())
        if 20 < words < 150:
            score += 10.0
        score += sum(1 for c in content if c in ".,;:!?\"'()-[]{}") * 0.3
        score += sum(1 for c in content if c in ".!?") * 2.0

    if length < 100:
        score -= 5.0
    if length > 1000:
        score -= 3.0
    return max(0.0, score)


def _pick(candidates: Sequence[Paragraph], rng: random.Random) -> Paragraph:
    return rng.choice(list(candidates))


def extract_snippet(
    content: str,
    filename: str,
    size: ChunkSize = ChunkSize.MEDIUM,
    rng: Optional[random.Random] = None,
) -> str:
    rng = rng or random.Random()
    lo, hi = size.char_range
    paragraphs = find_paragraphs(content, filename)
    for p in paragraphs:
        p.score = score_paragraph(p.content, filename)
    paragraphs.sort(key=lambda p: p.score, reverse=True)

    suitable = [p for p in paragraphs if lo <= p.char_count <= hi]
    if suitable:
        return _pick(suitable, rng).content.strip()
    acceptable = [p for p in paragraphs if p.char_count >= lo // 2]
    if acceptable:
        return _pick(acceptable, rng).content.strip()

    # no paragraph fits: take a window of lines from a third of the way in
    lines = content.split("\n")
    _, max_lines = size.line_range
    start = len(lines) // 3 if len(lines) > max_lines else 0
    snippet = "\n".join(lines[start:start + max_lines]).strip()
    log.info("No paragraph of %s size in %s, using lines %d-%d", size.value, filename, start, start + max_lines)
    return snippet


def load_practice_text(path: Path | str, size: ChunkSize = ChunkSize.MEDIUM, rng: Optional[random.Random] = None) -> str:
    p = Path(path)
    return extract_snippet(load_text_file(p), p.name, size, rng)


def load_inception(size: ChunkSize = ChunkSize.MEDIUM, rng: Optional[random.Random] = None) -> str:
    """Practice on the typing engine's own source code."""
    source = Path(__file__).resolve().parent.parent / "services" / "typing_engine.py"
    return load_practice_text(source, size, rng)


def load_default_text() -> str:
    try:
        if _DEFAULT_FILE.exists():
            return normalize_text(_DEFAULT_FILE.read_text(encoding="utf-8"))
    except OSError as e:
        log.warning("Failed to read %s: %s", _DEFAULT_FILE, e)
    return DEFAULT_TEXT
