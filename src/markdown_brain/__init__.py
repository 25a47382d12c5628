"""
markdown-brain - MCP server over a folder of markdown notes.

Keeps a live in-memory index of a directory of markdown documents (with
optional YAML frontmatter) and answers search, retrieval, similarity and
date queries for any MCP client.

Stack:
- Python + FastMCP (MCP SDK)
- watchdog (filesystem notifications)
- rapidfuzz (fuzzy matching)
- markdown-it-py + PyYAML (markdown and frontmatter)
"""

__version__ = "0.1.0"
