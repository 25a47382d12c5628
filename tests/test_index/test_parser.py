"""Tests for the frontmatter parser."""

from markdown_brain.index.models import tags_from_metadata
from markdown_brain.index.parser import derive_title, parse_frontmatter


class TestParseFrontmatter:
    def test_parses_yaml_frontmatter(self):
        content = """---
title: Weekly Review
updated: 2025-02-09
tags: [foo, bar]
priority: 2
draft: false
---
# Content"""
        metadata, body = parse_frontmatter(content, "notes/review.md")

        assert metadata["title"] == "Weekly Review"
        assert metadata["updated"] == "2025-02-09"
        assert metadata["tags"] == ["foo", "bar"]
        assert metadata["priority"] == 2
        assert metadata["draft"] is False
        assert body == "# Content"

    def test_datetimes_become_iso_strings(self):
        content = "---\ncreated: 2024-01-01 10:30:00\n---\nbody"
        metadata, _ = parse_frontmatter(content)
        assert metadata["created"] == "2024-01-01T10:30:00"

    def test_nested_values_are_coerced(self):
        content = "---\nauthor:\n  name: Sam\n  joined: 2020-05-01\n---\nbody"
        metadata, _ = parse_frontmatter(content)
        assert metadata["author"] == {"name": "Sam", "joined": "2020-05-01"}

    def test_no_frontmatter(self):
        content = "# No frontmatter\n\nJust content"
        metadata, body = parse_frontmatter(content)
        assert metadata == {}
        assert body == content

    def test_empty_frontmatter(self):
        metadata, body = parse_frontmatter("---\n---\nContent")
        assert metadata == {}
        assert body == "Content"

    def test_invalid_yaml_keeps_content(self):
        content = "---\ntitle: [unclosed\n---\nBody"
        metadata, body = parse_frontmatter(content)
        assert metadata == {}
        assert body == content

    def test_non_mapping_yaml_keeps_content(self):
        content = "---\n- just\n- a list\n---\nBody"
        metadata, body = parse_frontmatter(content)
        assert metadata == {}
        assert body == content

    def test_unterminated_block(self):
        content = "---not frontmatter\ncontent"
        metadata, body = parse_frontmatter(content)
        assert metadata == {}
        assert body == content


class TestDeriveTitle:
    def test_prefers_frontmatter_title(self):
        assert derive_title({"title": "From Frontmatter"}, "notes/file-name.md") == "From Frontmatter"

    def test_falls_back_to_filename(self):
        assert derive_title({}, "notes/weekly-review.md") == "weekly review"

    def test_underscores_become_spaces(self):
        assert derive_title({}, "meeting_notes.md") == "meeting notes"

    def test_blank_title_ignored(self):
        assert derive_title({"title": "  "}, "a-b.md") == "a b"

    def test_numeric_title(self):
        assert derive_title({"title": 2024}, "x.md") == "2024"


class TestTags:
    def test_list_tags(self):
        assert tags_from_metadata({"tags": ["a", 1]}) == ["a", "1"]

    def test_comma_separated_string(self):
        assert tags_from_metadata({"tags": "urgent, work ,"}) == ["urgent", "work"]

    def test_missing_or_unusable(self):
        assert tags_from_metadata({}) == []
        assert tags_from_metadata({"tags": 5}) == []
        assert tags_from_metadata({"tags": None}) == []
