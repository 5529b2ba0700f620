"""
MJML Email Templates
Every templated ICF Log email is built here and compiled to HTML by email_service
"""

from datetime import datetime
from typing import Optional

from .config import APP_URL, SUPPORT_EMAIL

# ICF Log brand colours - indigo/violet header band
THEME = {
    "primary": "#667eea",
    "primary_dark": "#764ba2",
    "background": "#f8fafc",
    "card_bg": "#ffffff",
    "text_primary": "#1f2937",
    "text_secondary": "#374151",
    "text_muted": "#6b7280",
    "border": "#e5e7eb",
    "tip_bg": "#f0f9ff",
    "link": "#3b82f6",
}

FONT_STACK = "-apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, 'Helvetica Neue', Arial, sans-serif"

# Greeting used when a coach has not set a name
DEFAULT_USER_NAME = "Valued Coach"


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
    show_preferences_link: bool = False,
) -> str:
    """Base MJML wrapper: brand header band, white content card, footer"""

    cta_section = ""
    if cta_url and cta_label:
        cta_section = f"""
        <mj-section background-color="{THEME['card_bg']}" padding="0 30px 30px 30px">
          <mj-column>
            <mj-button
              href="{cta_url}"
              background-color="{THEME['primary']}"
              color="#ffffff"
              font-weight="600"
              border-radius="8px"
              padding="10px 0"
              inner-padding="15px 30px"
              font-size="16px">
              {cta_label}
            </mj-button>
          </mj-column>
        </mj-section>
        """

    preferences = ""
    if show_preferences_link:
        preferences = f"""
            <mj-text align="center" font-size="12px" color="{THEME['text_muted']}" padding="0 0 8px 0">
              <a href="{APP_URL}/dashboard" style="color: {THEME['text_muted']};">Manage your email preferences</a>
            </mj-text>
        """

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{title}</mj-title>
        <mj-preview>{preview_text}</mj-preview>
        <mj-attributes>
          <mj-all font-family="{FONT_STACK}" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <mj-section background-color="{THEME['primary']}" border-radius="10px 10px 0 0" padding="30px 20px">
          <mj-column>
            <mj-text align="center" color="#ffffff" font-size="28px" font-weight="700" padding="0">
              ICF Log
            </mj-text>
            <mj-text align="center" color="#ffffff" font-size="16px" padding="8px 0 0 0">
              {title}
            </mj-text>
          </mj-column>
        </mj-section>

        <mj-section background-color="{THEME['card_bg']}" padding="30px 30px 10px 30px">
          <mj-column>
            {content_sections}
          </mj-column>
        </mj-section>

        {cta_section}

        <mj-section padding="20px">
          <mj-column>
            {preferences}
            <mj-text align="center" font-size="12px" color="{THEME['text_muted']}" padding="0">
              © {datetime.utcnow().year} ICF Log. All rights reserved.
            </mj-text>
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def reminder_email_template(
    user_name: Optional[str],
    last_activity_date: Optional[datetime] = None,
    session_count: Optional[int] = None,
    cpd_hours: Optional[float] = None,
    custom_message: Optional[str] = None,
) -> str:
    """Standard "keep your log updated" reminder with the coach's current numbers"""
    name = user_name or DEFAULT_USER_NAME
    intro = custom_message or (
        "We noticed it's been a while since you last updated your ICF Log. "
        "Keeping your coaching log current helps you stay on track for your ICF credential "
        "renewal and gives you a clear picture of your coaching practice."
    )

    status_items = []
    if last_activity_date:
        status_items.append(f"<li><strong>Last Activity:</strong> {last_activity_date.strftime('%d %B %Y')}</li>")
    if session_count is not None:
        status_items.append(f"<li><strong>Total Sessions:</strong> {session_count}</li>")
    if cpd_hours is not None:
        status_items.append(f"<li><strong>CPD Hours:</strong> {cpd_hours}h</li>")

    status_block = ""
    if status_items:
        status_block = f"""
        <mj-text padding="0 0 16px 0">
          <h3 style="margin: 0 0 10px 0; color: {THEME['text_primary']};">Your Current Status</h3>
          <ul style="margin: 0; padding-left: 20px;">{''.join(status_items)}</ul>
        </mj-text>
        """

    content = f"""
    <mj-text>Hi {name},</mj-text>
    <mj-text>{intro}</mj-text>
    {status_block}
    <mj-text>
      <h3 style="margin: 0 0 10px 0; color: {THEME['text_primary']};">Why Keep Your Log Updated?</h3>
      <ul style="margin: 0; padding-left: 20px;">
        <li>Track your progress towards ICF credential requirements</li>
        <li>Maintain accurate records of your coaching hours</li>
        <li>Reflect on your growth as a coach</li>
        <li>Be ready when it's time to renew your credential</li>
      </ul>
    </mj-text>
    <mj-text container-background-color="{THEME['tip_bg']}" padding="15px" font-size="14px">
      <strong>Quick Tip:</strong> Log sessions right after they happen while the details are fresh in your mind.
    </mj-text>
    <mj-text font-size="14px" color="{THEME['text_muted']}">
      Questions? Reply to this email or contact us at
      <a href="mailto:{SUPPORT_EMAIL}" style="color: {THEME['link']};">{SUPPORT_EMAIL}</a>
    </mj-text>
    """

    return get_base_template(
        title="Time to update your coaching log",
        preview_text="Keep your ICF Log up to date",
        content_sections=content,
        cta_url=f"{APP_URL}/dashboard",
        cta_label="Update Your Log Now",
    )


def custom_content_template(body_html: str) -> str:
    """Admin-written plain text message, already converted to HTML"""
    content = f"""
    <mj-text>
      <div style="white-space: pre-wrap;">{body_html}</div>
    </mj-text>
    """
    return get_base_template(
        title="A message from ICF Log",
        preview_text="A message from ICF Log",
        content_sections=content,
        show_preferences_link=True,
    )


def html_content_template(html_body: str) -> str:
    """Admin-written HTML message placed in a plain card"""
    return get_base_template(
        title="A message from ICF Log",
        preview_text="A message from ICF Log",
        content_sections=f"<mj-raw>{html_body}</mj-raw>",
        show_preferences_link=True,
    )


def calendly_booking_template(
    client_name: str, event_date: datetime, duration: int, is_test: bool = False
) -> str:
    """New Calendly booking notification for the coach"""
    banner = ""
    if is_test:
        banner = f"""
        <mj-text container-background-color="{THEME['tip_bg']}" padding="12px" font-size="14px">
          This is a test email. Your Calendly event notifications are working.
        </mj-text>
        """

    content = f"""
    {banner}
    <mj-text>A new session has been booked through Calendly and added to your ICF Log.</mj-text>
    <mj-text>
      <ul style="margin: 0; padding-left: 20px;">
        <li><strong>Client:</strong> {client_name}</li>
        <li><strong>Date:</strong> {event_date.strftime('%A, %d %B %Y at %H:%M')} UTC</li>
        <li><strong>Duration:</strong> {duration} minutes</li>
      </ul>
    </mj-text>
    <mj-text font-size="14px" color="{THEME['text_muted']}">
      After the session, remember to add your notes and reflections.
    </mj-text>
    """

    return get_base_template(
        title="New Calendly Booking",
        preview_text=f"{client_name} booked a session",
        content_sections=content,
        cta_url=f"{APP_URL}/dashboard/sessions",
        cta_label="View Sessions",
        show_preferences_link=True,
    )
