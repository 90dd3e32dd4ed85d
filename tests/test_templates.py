# Tests for templates.py and files.py
# Created: 2026-10-18

import pytest

from iamdebug.errors import ResourceReadError, TemplateError
from iamdebug.files import extract_file_name, read_text_file, resource_key
from iamdebug.templates import TemplateRenderer


class TestTemplateRenderer:
    def test_substitutes_placeholders(self):
        html = TemplateRenderer().render("<h1>{{ title }}</h1>", {"title": "SAML Request"})
        assert html == "<h1>SAML Request</h1>"

    def test_unresolved_placeholder_left_verbatim(self):
        html = TemplateRenderer().render("{{ known }} / {{ unknown }}", {"known": "x"})
        assert html == "x / {{ unknown }}"

    def test_values_are_escaped(self):
        html = TemplateRenderer().render("<pre>{{ myXML }}</pre>", {"myXML": "<a b='1'/>"})
        assert "<a " not in html
        assert "&lt;a" in html

    def test_malformed_template(self):
        with pytest.raises(TemplateError, match="Malformed"):
            TemplateRenderer().render("{% if %}", {})

    def test_single_braces_untouched(self):
        html = TemplateRenderer().render("const m = {command: 'x'};", {})
        assert html == "const m = {command: 'x'};"

    async def test_render_file(self, tmp_path):
        path = tmp_path / "t.html"
        path.write_text("Hello {{ name }}")
        assert await TemplateRenderer().render_file(path, {"name": "idp"}) == "Hello idp"

    async def test_render_missing_file(self, tmp_path):
        with pytest.raises(ResourceReadError):
            await TemplateRenderer().render_file(tmp_path / "missing.html", {})


class TestFiles:
    def test_extract_file_name(self):
        assert extract_file_name("/a/b/Service.xml") == "Service"

    @pytest.mark.parametrize(
        "path,key",
        [
            ("/debug/My%20Service.xml", "My Service"),
            ("/debug/plain.xml", "plain"),
            ("/debug/a%20b%20c.xml", "a b%20c"),
        ],
    )
    def test_resource_key(self, path, key):
        assert resource_key(path) == key

    async def test_read_text_file(self, tmp_path):
        path = tmp_path / "s.xml"
        path.write_text("<x/>", encoding="utf-8")
        assert await read_text_file(path) == "<x/>"

    async def test_read_missing_file(self, tmp_path):
        with pytest.raises(ResourceReadError) as exc_info:
            await read_text_file(tmp_path / "nope.xml")
        assert "nope.xml" in str(exc_info.value)
