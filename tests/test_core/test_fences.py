"""Tests for depman.core.fences module."""

from rich.console import Console

from depman.core.fences import CODE, TEXT, code_blocks, print_fenced, split_fenced


class TestSplitFenced:
    def test_plain_text(self):
        segments = split_fenced("Just some text.")
        assert [(s.kind, s.text) for s in segments] == [(TEXT, "Just some text.")]

    def test_text_code_text(self):
        content = "Add this:\n```kotlin\nval x = 1\n```\nthen sync."
        segments = split_fenced(content)

        assert [s.kind for s in segments] == [TEXT, CODE, TEXT]
        assert segments[0].text == "Add this:\n"
        assert segments[1].text == "val x = 1"
        assert segments[1].language == "kotlin"
        assert segments[2].text == "\nthen sync."

    def test_code_without_language(self):
        (segment,) = split_fenced("```\nls -la\n```")
        assert segment.is_code
        assert segment.language is None
        assert segment.text == "ls -la"

    def test_code_text_is_stripped(self):
        (segment,) = split_fenced("```bash\n\n  ./gradlew build  \n\n```")
        assert segment.text == "./gradlew build"

    def test_adjacent_fences(self):
        segments = split_fenced("```a\none\n``````b\ntwo\n```")
        assert [(s.language, s.text) for s in segments] == [("a", "one"), ("b", "two")]

    def test_unclosed_fence_stays_text(self):
        content = "before\n```kotlin\nval x = 1\n"
        segments = split_fenced(content)
        assert len(segments) == 1
        assert not segments[0].is_code
        assert segments[0].text == content

    def test_fence_without_newline_stays_text(self):
        segments = split_fenced("inline ```code``` here")
        assert all(not s.is_code for s in segments)
        assert "".join(s.text for s in segments) == "inline ```code``` here"

    def test_empty_content(self):
        assert split_fenced("") == []

    def test_code_blocks(self):
        content = "a\n```python\nprint(1)\n```\nb\n```sh\necho hi\n```"
        assert [s.text for s in code_blocks(content)] == ["print(1)", "echo hi"]


def test_print_fenced_renders_text_and_code():
    console = Console(record=True, width=80)
    print_fenced(console, "Install:\n```bash\npip install depman\n```\nDone.")

    output = console.export_text()
    assert "Install:" in output
    assert "pip install depman" in output
    assert "Done." in output
    assert "```" not in output
