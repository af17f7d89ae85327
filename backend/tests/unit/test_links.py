from backend.src.services.links import (
    extract_wikilinks,
    parse_wikilinks,
    plan_link_sync,
    unlink_references,
)


def test_extract_returns_empty_for_empty_content() -> None:
    assert extract_wikilinks("") == []
    assert extract_wikilinks(None) == []


def test_extract_dedupes_and_preserves_order() -> None:
    content = "See [[A]] and [[B|Beta]] and [[A]] again"

    assert extract_wikilinks(content) == ["A", "B"]


def test_extract_trims_target_whitespace() -> None:
    assert extract_wikilinks("[[  my note title  ]] and [[ other |Other]]") == [
        "my note title",
        "other",
    ]


def test_extract_is_case_sensitive() -> None:
    assert extract_wikilinks("[[Note]] [[note]]") == ["Note", "note"]


def test_extract_ignores_malformed_tokens() -> None:
    content = "[[unclosed and [single] and [[ ]] and [[|display]] and ]]stray[["

    assert extract_wikilinks(content) == []


def test_extract_skips_outer_token_of_nested_brackets() -> None:
    assert extract_wikilinks("[[outer [[inner]] tail]]") == ["inner"]


def test_extract_requires_display_text_after_pipe() -> None:
    assert extract_wikilinks("[[target|]]") == []


def test_parse_reports_display_and_span() -> None:
    content = "x [[A|Alpha]] y [[B]]"

    links = parse_wikilinks(content)

    assert [(link.target, link.display) for link in links] == [("A", "Alpha"), ("B", None)]
    assert content[links[0].start:links[0].end] == "[[A|Alpha]]"
    assert links[0].text == "Alpha"
    assert links[1].text == "B"


def test_parse_keeps_duplicate_occurrences() -> None:
    links = parse_wikilinks("[[A|first]] [[A|second]]")

    assert [link.display for link in links] == ["first", "second"]


def test_plan_inserts_and_deletes_difference() -> None:
    plan = plan_link_sync(["A", "B", "Z"], "[[C]] [[A]] [[D]]")

    assert plan.desired == ("C", "A", "D")
    assert plan.to_delete == ("B", "Z")
    assert plan.to_insert == ("C", "D")
    assert not plan.is_noop


def test_plan_is_noop_when_content_matches() -> None:
    plan = plan_link_sync(["B", "A"], "[[A]] then [[B|bee]]")

    assert plan.is_noop


def test_plan_removes_everything_for_empty_content() -> None:
    plan = plan_link_sync(["A", "B"], "")

    assert plan.to_delete == ("A", "B")
    assert plan.to_insert == ()


def test_unlink_uses_display_or_fallback() -> None:
    content = "Read [[Guide]] or [[Guide|the guide]], not [[Other]]."

    updated = unlink_references(content, "Guide", "User Guide")

    assert updated == "Read User Guide or the guide, not [[Other]]."


def test_unlink_without_fallback_uses_target() -> None:
    assert unlink_references("[[ Guide ]]!", "Guide") == "Guide!"


def test_unlink_leaves_unrelated_content_untouched() -> None:
    content = "Nothing to see [[Else]]"

    assert unlink_references(content, "Guide", "x") is content
    assert unlink_references("", "Guide") == ""
