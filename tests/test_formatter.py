import unittest
from pathlib import Path

from core.contracts.models import CommitRequest, MarkdownRequest
from core.formatter.conventional import render_commit_message
from core.formatter.jinja_formatter import Jinja2Formatter, frontmatter_value
from utils.errors import FormatterError


class TestConventionalCommit(unittest.TestCase):

    def _render(self, **fields):
        return render_commit_message(CommitRequest(root_dir=".", **fields))

    def test_type_scope_description(self):
        self.assertEqual(
            self._render(type="feat", scope="auth", description="add login", breaking_change=False),
            "feat(auth): add login",
        )

    def test_without_scope(self):
        self.assertEqual(self._render(type="docs", description="fix typo"), "docs: fix typo")

    def test_body(self):
        self.assertEqual(
            self._render(type="refactor", description="split module", body="Moves parsing out."),
            "refactor: split module\n\nMoves parsing out.",
        )

    def test_breaking_change_with_description(self):
        self.assertEqual(
            self._render(
                type="fix",
                description="bug",
                breaking_change=True,
                breaking_change_description="removes endpoint",
            ),
            "fix!: bug\n\nBREAKING CHANGE: removes endpoint",
        )

    def test_breaking_change_falls_back_to_body(self):
        self.assertEqual(
            self._render(type="feat", scope="api", description="v2", body="Drops v1.", breaking_change=True),
            "feat(api)!: v2\n\nDrops v1.\n\nBREAKING CHANGE: Drops v1.",
        )

    def test_breaking_change_default_text(self):
        self.assertEqual(
            self._render(type="chore", description="drop node 16", breaking_change=True),
            "chore!: drop node 16\n\nBREAKING CHANGE: Breaking change introduced",
        )

    def test_camel_case_aliases(self):
        request = CommitRequest.model_validate({
            "rootDir": ".",
            "type": "feat",
            "description": "x",
            "breakingChange": True,
            "breakingChangeDescription": "y",
        })
        self.assertEqual(render_commit_message(request), "feat!: x\n\nBREAKING CHANGE: y")


class TestJinja2Formatter(unittest.TestCase):
    def setUp(self):
        self.formatter = Jinja2Formatter()

    def test_plain_document(self):
        request = MarkdownRequest(file_path="r.md", title="T", content="C")
        self.assertEqual(self.formatter.render_markdown(request), "# T\n\nC")

    def test_content_kept_verbatim(self):
        content = "## Findings\n\n- {{ not a template }}\n"
        request = MarkdownRequest(file_path="r.md", title="T", content=content)
        self.assertEqual(self.formatter.render_markdown(request), "# T\n\n" + content)

    def test_front_matter(self):
        request = MarkdownRequest(
            file_path="r.md", title="T", content="C", include_metadata=True, metadata={"status": "draft", "round": 2}
        )
        self.assertEqual(
            self.formatter.render_markdown(request),
            "---\nstatus: draft\nround: 2\n---\n\n# T\n\nC",
        )

    def test_empty_metadata_keeps_delimiters(self):
        request = MarkdownRequest(file_path="r.md", title="T", content="C", include_metadata=True, metadata={})
        self.assertEqual(self.formatter.render_markdown(request), "---\n---\n\n# T\n\nC")

    def test_missing_metadata_has_no_front_matter(self):
        request = MarkdownRequest(file_path="r.md", title="T", content="C", include_metadata=True)
        self.assertEqual(self.formatter.render_markdown(request), "# T\n\nC")

    def test_frontmatter_value(self):
        self.assertEqual(frontmatter_value("text"), "text")
        self.assertEqual(frontmatter_value(True), "true")
        self.assertEqual(frontmatter_value(None), "null")
        self.assertEqual(frontmatter_value(42), "42")
        self.assertEqual(frontmatter_value(0.5), "0.5")

    def test_frontmatter_value_integral_and_non_finite_floats(self):
        self.assertEqual(frontmatter_value(1.0), "1")
        self.assertEqual(frontmatter_value(-3.0), "-3")
        self.assertEqual(frontmatter_value(float("nan")), "null")
        self.assertEqual(frontmatter_value(float("inf")), "null")

    def test_integral_float_in_front_matter(self):
        request = MarkdownRequest.model_validate({
            "filePath": "r.md",
            "title": "T",
            "content": "C",
            "includeMetadata": True,
            "metadata": {"version": 1.0},
        })
        self.assertEqual(self.formatter.render_markdown(request), "---\nversion: 1\n---\n\n# T\n\nC")

    def test_template_not_found(self):
        formatter = Jinja2Formatter(template_name="non_existent_template.j2")
        with self.assertRaises(FormatterError):
            formatter.render_markdown(MarkdownRequest(file_path="r.md", title="T", content="C"))

    def test_custom_template_dir(self):
        # Test with a custom template directory
        custom_template_dir = Path(__file__).parent / "custom_templates"
        custom_template_dir.mkdir(exist_ok=True)
        custom_template_path = custom_template_dir / "custom.j2"
        with open(custom_template_path, "w") as f:
            f.write("{{ request.title | upper }}: {{ request.content }}")

        formatter = Jinja2Formatter(template_dir=str(custom_template_dir), template_name="custom.j2")
        rendered = formatter.render_markdown(MarkdownRequest(file_path="r.md", title="t", content="c"))
        self.assertEqual(rendered, "T: c")

        # Clean up the custom template
        custom_template_path.unlink()
        custom_template_dir.rmdir()


if __name__ == "__main__":
    unittest.main()
