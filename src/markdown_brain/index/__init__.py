"""
Index module for markdown-brain.

Holds the in-memory document store and the structures derived from it:
the fuzzy search index and token-overlap similarity. The markdown files are
always the source of truth; everything here can be rebuilt from them.
"""

from markdown_brain.index.models import Document, SearchHit, SimilarHit
from markdown_brain.index.normalizer import normalize
from markdown_brain.index.parser import derive_title, parse_frontmatter
from markdown_brain.index.search import SearchIndex, SearchIndexHandle
from markdown_brain.index.similarity import find_similar, jaccard, similarity
from markdown_brain.index.store import DocumentStore
from markdown_brain.index.walker import FileInfo, walk_root

__all__ = [
    "Document",
    "DocumentStore",
    "FileInfo",
    "SearchHit",
    "SearchIndex",
    "SearchIndexHandle",
    "SimilarHit",
    "derive_title",
    "find_similar",
    "jaccard",
    "normalize",
    "parse_frontmatter",
    "similarity",
    "walk_root",
]
