"""Note loader implementations."""
from .markdown_loader import MarkdownLoader, NoteFile, extract_tags, strip_frontmatter

__all__ = ["MarkdownLoader", "NoteFile", "extract_tags", "strip_frontmatter"]
