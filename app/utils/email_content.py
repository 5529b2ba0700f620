"""
Turning admin-written email content into per-recipient HTML.

Admins write either plain text or HTML. Both may carry placeholders that
are filled with the recipient's own numbers:

    {{userName}} {{sessionCount}} {{cpdHours}} {{lastActivityDate}}
"""

import re
from datetime import datetime
from typing import Optional

from ..email_service import compile_mjml_to_html
from ..email_templates import DEFAULT_USER_NAME, THEME, custom_content_template, html_content_template
from ..security_utils import strip_html_tags

HTML_TAG_PATTERN = re.compile(r"<[a-z][\s\S]*>", re.IGNORECASE)
URL_PATTERN = re.compile(r'(?<!href=")(https?://[^\s<>]+)')
LIST_ITEM_PATTERN = re.compile(r"^(?:[•\-]|\d+\.)\s*")
NON_TEXT_BLOCKS = re.compile(r"<(head|style|script)\b[^>]*>[\s\S]*?</\1>", re.IGNORECASE)

UL_OPEN = '<ul style="margin: 10px 0; padding-left: 20px;">'
LI_TEMPLATE = '<li style="margin: 5px 0;">{}</li>'


def looks_like_html(content: str) -> bool:
    return bool(HTML_TAG_PATTERN.search(content or ""))


def replace_placeholders(
    content: str,
    user_name: Optional[str] = None,
    session_count: Optional[int] = None,
    cpd_hours: Optional[float] = None,
    last_activity_date: Optional[datetime] = None,
) -> str:
    values = {
        "{{userName}}": user_name or DEFAULT_USER_NAME,
        "{{sessionCount}}": str(session_count) if session_count is not None else "0",
        "{{cpdHours}}": f"{cpd_hours:.1f}" if cpd_hours is not None else "0",
        "{{lastActivityDate}}": (
            last_activity_date.strftime("%d/%m/%Y") if last_activity_date else "No recent activity"
        ),
    }
    for placeholder, value in values.items():
        content = content.replace(placeholder, value)
    return content


def linkify(text: str) -> str:
    return URL_PATTERN.sub(
        lambda m: f'<a href="{m.group(1)}" style="color: {THEME["link"]};">{m.group(1)}</a>', text
    )


def text_to_html_body(text: str) -> str:
    """
    Convert plain text to an HTML fragment.

    - bare URLs become links
    - consecutive lines starting with "•", "-" or "1." become one <ul>
    - blank lines become <br>
    - remaining newlines become <br>
    """
    lines = linkify(text).split("\n")
    output: list[str] = []
    in_list = False

    for line in lines:
        stripped = line.strip()
        marker = LIST_ITEM_PATTERN.match(stripped)

        if marker and stripped[marker.end():]:
            if not in_list:
                output.append(UL_OPEN)
                in_list = True
            output.append(LI_TEMPLATE.format(stripped[marker.end():].strip()))
            continue

        if in_list:
            output.append("</ul>")
            in_list = False

        output.append(line if stripped else "<br>")

    if in_list:
        output.append("</ul>")

    return "\n".join(output).replace("\n", "<br>")


def convert_text_to_html(
    content: str,
    user_name: Optional[str] = None,
    session_count: Optional[int] = None,
    cpd_hours: Optional[float] = None,
    last_activity_date: Optional[datetime] = None,
) -> str:
    """Full email HTML for one recipient"""
    content = replace_placeholders(content, user_name, session_count, cpd_hours, last_activity_date)

    if looks_like_html(content):
        return compile_mjml_to_html(html_content_template(content))
    return compile_mjml_to_html(custom_content_template(text_to_html_body(content)))


def html_to_plain_text(html: str) -> str:
    html = NON_TEXT_BLOCKS.sub(" ", html)
    text = strip_html_tags(html)
    for entity, char in (("&nbsp;", " "), ("&lt;", "<"), ("&gt;", ">"), ("&quot;", '"'), ("&amp;", "&")):
        text = text.replace(entity, char)
    return re.sub(r"\s+", " ", text).strip()
