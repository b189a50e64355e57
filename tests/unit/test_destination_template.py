"""Unit tests for DestinationTemplate rendering."""

import pytest

from assetrev.templating import DEFAULT_TEMPLATE, DestinationTemplate, split_filename


class TestSplitFilename:
    """Tests for extension splitting."""

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("photo.png", ("photo", ".png")),
            ("archive.tar.gz", ("archive.tar", ".gz")),
            ("README", ("README", "")),
            (".bashrc", ("", ".bashrc")),
            ("trailing.", ("trailing", ".")),
        ],
    )
    def test_split(self, name, expected) -> None:
        assert split_filename(name) == expected


class TestDestinationTemplateRender:
    """Rendering tests."""

    def test_default_template_example(self) -> None:
        """Test the canonical photo example renders as documented."""
        template = DestinationTemplate("%srcdir%%srcfilename%.%crc32%%srcext%")

        assert template.render("images/", "photo", ".png", "a1b2c3d4") == "images/photo.a1b2c3d4.png"

    def test_default_is_used_for_empty_template(self) -> None:
        assert DestinationTemplate("").template == DEFAULT_TEMPLATE
        assert DestinationTemplate().render("/", "app", ".js", "00ff00ff") == "/app.00ff00ff.js"

    def test_no_placeholders_returns_template(self) -> None:
        template = DestinationTemplate("static/bundle.js")

        assert template.render("/css/", "site", ".css", "deadbeef") == "static/bundle.js"

    def test_unknown_placeholders_left_verbatim(self) -> None:
        template = DestinationTemplate("%cdn%/%srcfilename%-%crc32%%srcext%?v=%mtime%")

        assert template.render("/", "logo", ".svg", "12345678") == "%cdn%/logo-12345678.svg?v=%mtime%"

    def test_repeated_placeholders_all_replaced(self) -> None:
        template = DestinationTemplate("%crc32%/%srcfilename%.%crc32%")

        assert template.render("/", "a", ".txt", "abcd0123") == "abcd0123/a.abcd0123"

    def test_file_without_extension(self) -> None:
        template = DestinationTemplate()

        assert template.render_for("/bin/", "LICENSE", "cafebabe") == "/bin/LICENSE.cafebabe"

    def test_fingerprint_alias(self) -> None:
        template = DestinationTemplate("%srcdir%%fingerprint%/%srcfilename%%srcext%")

        assert template.render("/img/", "cat", ".gif", "0badf00d") == "/img/0badf00d/cat.gif"

    def test_substitution_order(self) -> None:
        """Test the directory is substituted before the filename.

        A directory value containing the filename placeholder text is itself
        substituted by the later filename step.
        """
        template = DestinationTemplate("%srcdir%%srcfilename%")

        assert template.render("/%srcfilename%/", "x", "", "00000000") == "/x/x"
