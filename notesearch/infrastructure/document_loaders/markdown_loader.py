import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

_FRONTMATTER_RE = re.compile(r"\A---\s*\n(.*?)\n---\s*(?:\n|\Z)", re.DOTALL)
_INLINE_TAG_RE = re.compile(r"(?<![\w/#&])#([^\s#.,;:!?()\[\]{}\"'`]+)")
_FRONTMATTER_TAGS_RE = re.compile(r"^tags?\s*:\s*(.*)$", re.IGNORECASE)
_LIST_ITEM_RE = re.compile(r"^\s*-\s*(.+)$")


@dataclass
class NoteFile:
    """Note text plus the metadata search needs."""
    title: str
    content: str
    tags: list[str] = field(default_factory=list)
    mtime: Optional[int] = None
    ctime: Optional[int] = None


def _normalize_tag(raw: str) -> Optional[str]:
    tag = raw.strip().strip("\"'").lstrip("#").rstrip("/")
    if not tag or tag.isdigit():
        return None
    return f"#{tag}"


def _frontmatter_tags(block: str) -> list[str]:
    tags = []
    lines = block.splitlines()
    for i, line in enumerate(lines):
        match = _FRONTMATTER_TAGS_RE.match(line.strip())
        if not match:
            continue

        value = match.group(1).strip()
        if value:
            tags.extend(value.strip("[]").replace(",", " ").split())
        else:
            for item in lines[i + 1 :]:
                item_match = _LIST_ITEM_RE.match(item)
                if not item_match:
                    break
                tags.append(item_match.group(1))
        break
    return tags


def extract_tags(text: str) -> list[str]:
    """Front-matter and inline #tags, lower-cased, first occurrence order."""
    raw: list[str] = []

    match = _FRONTMATTER_RE.match(text)
    if match:
        raw.extend(_frontmatter_tags(match.group(1)))
        text = text[match.end():]

    raw.extend(_INLINE_TAG_RE.findall(text))

    tags = [t.lower() for t in (_normalize_tag(r) for r in raw) if t]
    return list(dict.fromkeys(tags))


def strip_frontmatter(text: str) -> str:
    match = _FRONTMATTER_RE.match(text)
    return text[match.end():] if match else text


class MarkdownLoader:
    """Load vault notes with tags and timestamps."""

    EXTENSIONS = {".md", ".markdown", ".txt"}

    def supports(self, file_path: Path) -> bool:
        return file_path.suffix.lower() in self.EXTENSIONS

    def load(self, file_path: Path) -> Optional[NoteFile]:
        try:
            text = file_path.read_text(encoding="utf-8")
            stat = file_path.stat()
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to load {file_path}: {e}")
            return None

        created = getattr(stat, "st_birthtime", None) or stat.st_ctime
        return NoteFile(
            title=file_path.stem,
            content=strip_frontmatter(text),
            tags=extract_tags(text),
            mtime=int(stat.st_mtime * 1000),
            ctime=int(created * 1000),
        )
