# =============================================================================
# tests/test_email_content.py - Admin Email Content Tests
# =============================================================================
# Admin emails are written as plain text or HTML with placeholders. These
# tests cover placeholder filling, the plain text to HTML conversion and the
# plain text alternative derived from the final HTML.
#
# Run with: pytest tests/test_email_content.py -v
# =============================================================================

from datetime import datetime

from app.email_templates import reminder_email_template
from app.utils.email_content import (
    convert_text_to_html,
    html_to_plain_text,
    looks_like_html,
    replace_placeholders,
    text_to_html_body,
)


class TestReplacePlaceholders:
    """Tests for replace_placeholders."""

    def test_all_placeholders_filled(self):
        content = "Hi {{userName}}, {{sessionCount}} sessions, {{cpdHours}}h CPD, last {{lastActivityDate}}"
        result = replace_placeholders(
            content,
            user_name="Jo",
            session_count=12,
            cpd_hours=7.26,
            last_activity_date=datetime(2024, 3, 5),
        )
        assert result == "Hi Jo, 12 sessions, 7.3h CPD, last 05/03/2024"

    def test_missing_values_use_fallbacks(self):
        result = replace_placeholders("{{userName}}|{{sessionCount}}|{{cpdHours}}|{{lastActivityDate}}")
        assert result == "Valued Coach|0|0|No recent activity"

    def test_repeated_placeholder(self):
        assert replace_placeholders("{{userName}} {{userName}}", user_name="Al") == "Al Al"


class TestTextToHtmlBody:
    """Tests for text_to_html_body."""

    def test_urls_become_links(self):
        html = text_to_html_body("Visit https://icflog.com/dashboard today")
        assert '<a href="https://icflog.com/dashboard"' in html

    def test_bullets_become_one_list(self):
        html = text_to_html_body("Intro\n• First\n- Second\n1. Third\nOutro")
        assert html.count("<ul") == 1
        assert html.count("<li") == 3
        assert "First</li>" in html
        assert "Third</li>" in html
        # Markers are removed from the item text
        assert "• First" not in html
        assert "1. Third" not in html

    def test_blank_lines_become_breaks(self):
        html = text_to_html_body("Line one\n\nLine two")
        assert "Line one" in html
        assert "Line two" in html
        assert "<br><br><br>" in html

    def test_list_closed_at_end(self):
        html = text_to_html_body("- only item")
        assert html.endswith("</ul>")

    def test_markers_without_space(self):
        html = text_to_html_body("-Reflect\n1.Review notes")
        assert html.count("<ul") == 1
        assert "Reflect</li>" in html
        assert "Review notes</li>" in html

    def test_marker_without_text_is_not_a_list_item(self):
        assert "<li" not in text_to_html_body("-")


class TestConvertTextToHtml:
    """Tests for convert_text_to_html and html_to_plain_text."""

    def test_looks_like_html(self):
        assert looks_like_html("<p>Hello</p>") is True
        assert looks_like_html("5 < 6 and 7 > 3") is False

    def test_plain_text_is_wrapped_in_template(self, mock_resend):
        html = convert_text_to_html("Hello {{userName}}", user_name="Jo")
        assert "Hello Jo" in html
        assert html.startswith("<html>")

    def test_html_content_kept(self, mock_resend):
        html = convert_text_to_html("<p>Hi <strong>{{userName}}</strong></p>", user_name="Jo")
        assert "<strong>Jo</strong>" in html

    def test_plain_text_from_html(self):
        html = "<html><head><style>p { color: red; }</style></head><body><p>Hi &amp; welcome</p>\n<p>Bye</p></body></html>"
        assert html_to_plain_text(html) == "Hi & welcome Bye"


class TestReminderTemplate:
    """Tests for reminder_email_template."""

    def test_greeting_defaults_to_valued_coach(self):
        assert "Hi Valued Coach," in reminder_email_template(None)
        assert "Hi Jo," in reminder_email_template("Jo")

    def test_custom_message_replaces_intro(self):
        mjml = reminder_email_template("Jo", custom_message="Log your session from Tuesday.")
        assert "Log your session from Tuesday." in mjml
        assert "it's been a while" not in mjml
