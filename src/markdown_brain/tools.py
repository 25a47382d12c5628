"""MCP tools for the markdown-brain server.

This module defines the tools exposed by the MCP server:
- search_documents: Fuzzy search across titles, content and tags
- get_document: Read a complete document by id
- list_documents: List documents, optionally by tag
- find_similar: Documents with the most word overlap with a given one
- search_by_date: Documents modified within a date range
- index_status: Document count and index readiness
"""

from fastmcp import FastMCP

from markdown_brain.dispatcher import QueryDispatcher


def register_tools(mcp: FastMCP, dispatcher: QueryDispatcher) -> None:
    """Register all read tools with the FastMCP server.

    Args:
        mcp: FastMCP server instance
        dispatcher: Query dispatcher serving the tools
    """

    @mcp.tool()
    def search_documents(query: str, limit: int = 5) -> list[dict] | dict:
        """Search through markdown documents with fuzzy matching.

        Matches tolerate typos. Titles weigh more than body text, tags least.

        Args:
            query: Search query
            limit: Maximum number of results (default: 5)

        Returns:
            List of results, best match first, each with:
            - id: Document id (path relative to the docs folder)
            - title: Document title
            - score: Match distance (lower is better, 0 is exact)
            - excerpt: Beginning of the document text
            - tags: Tags from frontmatter
            - matched_fields: Which of title/content/tags matched
            Or an error mapping with "error" and "code".
        """
        return dispatcher.search(query, limit)

    @mcp.tool()
    def get_document(id: str) -> dict:
        """Get the full content of a specific document.

        Args:
            id: Document id (relative path from the docs folder)

        Returns:
            Document with id, title, metadata (frontmatter), content (plain
            text) and lastModified, or an error mapping with code "not_found".
        """
        return dispatcher.get_document(id)

    @mcp.tool()
    def list_documents(tag: str | None = None) -> list[dict] | dict:
        """List all available documents.

        Args:
            tag: Only list documents carrying this tag (optional)

        Returns:
            List of documents with id, title, tags and lastModified.
        """
        return dispatcher.list_documents(tag)

    @mcp.tool()
    def find_similar(id: str, limit: int = 3) -> list[dict] | dict:
        """Find documents similar to a given document.

        Similarity is the word overlap (Jaccard index) between documents.

        Args:
            id: Document id to find similar documents for
            limit: Maximum number of results (default: 3)

        Returns:
            List of documents with id, title and score (0 to 1, higher is
            more similar), or an error mapping with code "not_found".
        """
        return dispatcher.find_similar(id, limit)

    @mcp.tool()
    def search_by_date(after: str | None = None, before: str | None = None) -> list[dict] | dict:
        """Search documents by modification date.

        Args:
            after: ISO date string - find documents modified after this date
            before: ISO date string - find documents modified before this date

        Returns:
            List of documents with id, title, lastModified and excerpt,
            newest first.
        """
        return dispatcher.search_by_date(after, before)

    @mcp.tool()
    def index_status() -> dict:
        """Report how many documents are loaded and whether search is ready."""
        return dispatcher.status()
