"""
Email templates for CollabEx notifications.

All templates use inline CSS for maximum email client compatibility.
Every user-supplied value is HTML-escaped before interpolation.

Each template function returns (subject, html_body, text_body).
"""

from __future__ import annotations

from collections.abc import Callable
from html import escape

from collabex.config import get_settings
from collabex.notifications.payloads import (
    CollabCompletedData,
    CollabInterestData,
    CollabRequestData,
    NotificationPayload,
)

# Color constants
PURPLE = "#667EEA"
PURPLE_DARK = "#764BA2"
BG_LIGHT = "#F9F9F9"
TEXT_PRIMARY = "#333333"
TEXT_MUTED = "#888888"


def _base_layout(content: str, app_name: str = "CollabEx") -> str:
    """Wrap content in the base email layout."""
    return f"""\
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{app_name}</title>
</head>
<body style="margin: 0; padding: 0; font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; line-height: 1.6; color: {TEXT_PRIMARY};">
    <table role="presentation" cellspacing="0" cellpadding="0" border="0" width="100%">
        <tr>
            <td align="center" style="padding: 20px;">
                <table role="presentation" cellspacing="0" cellpadding="0" border="0" width="600" style="max-width: 600px; width: 100%;">
                    <tr>
                        <td align="center" style="background: linear-gradient(135deg, {PURPLE} 0%, {PURPLE_DARK} 100%); color: #FFFFFF; padding: 30px; border-radius: 10px 10px 0 0;">
                            <h1 style="margin: 0;">{app_name}</h1>
                        </td>
                    </tr>
                    <tr>
                        <td style="background-color: {BG_LIGHT}; padding: 30px; border-radius: 0 0 10px 10px;">
                            {content}
                        </td>
                    </tr>
                    <tr>
                        <td align="center" style="padding-top: 20px;">
                            <p style="color: {TEXT_MUTED}; font-size: 12px; margin: 0;">
                                This is an automated notification from {app_name}.
                            </p>
                        </td>
                    </tr>
                </table>
            </td>
        </tr>
    </table>
</body>
</html>"""


def _app_url(path: str) -> str:
    return get_settings().frontend_base_url.rstrip("/") + path


def _button(url: str, label: str) -> str:
    return (
        f'<p style="text-align: center; margin: 30px 0;">'
        f'<a href="{escape(url)}" style="background: {PURPLE}; color: #FFFFFF; padding: 12px 30px; '
        f'text-decoration: none; border-radius: 6px; font-weight: bold;">{label}</a></p>'
    )


def _text_footer() -> str:
    return "\n\n-- This is an automated notification from CollabEx."


def collab_request_email(
    sender_name: str, message: str, payload: CollabRequestData | None = None,
) -> tuple[str, str, str]:
    """New collaboration request."""
    name = escape(sender_name)
    body = escape(message)
    subject = f"{sender_name} wants to collaborate with you!"
    url = _app_url("/collaborations")
    project = ""
    if payload is not None and payload.collaboration_title:
        project = f"<p>Project: <strong>{escape(payload.collaboration_title)}</strong></p>"
    content = f"""\
<h2>New Collaboration Request</h2>
<p><strong>{name}</strong> has sent you a collaboration request.</p>
{project}
<p>{body}</p>
<p>Log in to your account to accept or decline this request.</p>
{_button(url, "View Request")}"""
    text_body = (
        f"{sender_name} has sent you a collaboration request.\n\n"
        f"{message}\n\n"
        f"Log in to your account to accept or decline this request: {url}"
        f"{_text_footer()}"
    )
    return subject, _base_layout(content), text_body


def collab_accepted_email(sender_name: str, message: str, payload: NotificationPayload | None = None) -> tuple[str, str, str]:
    """Recipient accepted the caller's request."""
    name = escape(sender_name)
    subject = f"{sender_name} accepted your collaboration request!"
    url = _app_url("/collaborations")
    content = f"""\
<h2>Collaboration Accepted!</h2>
<p><strong>{name}</strong> has accepted your collaboration request.</p>
<p>{escape(message)}</p>
<p>You can now start working together. Good luck!</p>
{_button(url, "Open Collaboration")}"""
    text_body = (
        f"{sender_name} has accepted your collaboration request.\n\n"
        f"{message}\n\n"
        f"You can now start working together. Good luck!\n\n{url}"
        f"{_text_footer()}"
    )
    return subject, _base_layout(content), text_body


def collab_completed_email(
    sender_name: str, message: str, payload: CollabCompletedData | None = None,
) -> tuple[str, str, str]:
    """A collaboration was marked complete; prompts for a review."""
    name = escape(sender_name)
    subject = f"Your collaboration with {sender_name} is complete!"
    url = _app_url("/collaborations")
    content = f"""\
<h2>Collaboration Completed</h2>
<p>Your collaboration with <strong>{name}</strong> has been marked as complete.</p>
<p>{escape(message)}</p>
<p>Don't forget to leave a review for your collaborator!</p>
{_button(url, "Leave a Review")}"""
    text_body = (
        f"Your collaboration with {sender_name} has been marked as complete.\n\n"
        f"{message}\n\n"
        f"Don't forget to leave a review for your collaborator: {url}"
        f"{_text_footer()}"
    )
    return subject, _base_layout(content), text_body


def collab_interest_email(
    sender_name: str, message: str, payload: CollabInterestData | None = None,
) -> tuple[str, str, str]:
    """Someone applied to one of the recipient's posts."""
    name = escape(sender_name)
    subject = f"{sender_name} is interested in your collaboration!"
    url = _app_url(f"/posts/{payload.post_id}" if payload is not None else "/posts/mine")
    post_line = ""
    post_text = ""
    if payload is not None and payload.post_title:
        post_line = f"<p>Listing: <strong>{escape(payload.post_title)}</strong></p>"
        post_text = f"Listing: {payload.post_title}\n\n"
    content = f"""\
<h2>Someone's Interested!</h2>
<p><strong>{name}</strong> has shown interest in your collaboration opportunity.</p>
{post_line}
<p>{escape(message)}</p>
<p>Log in to view their profile and start a collaboration!</p>
{_button(url, "View Applicants")}"""
    text_body = (
        f"{sender_name} has shown interest in your collaboration opportunity.\n\n"
        f"{post_text}"
        f"{message}\n\n"
        f"Log in to view their profile and start a collaboration: {url}"
        f"{_text_footer()}"
    )
    return subject, _base_layout(content), text_body


NOTIFICATION_TEMPLATES: dict[str, Callable[..., tuple[str, str, str]]] = {
    "collab_request": collab_request_email,
    "collab_accepted": collab_accepted_email,
    "collab_completed": collab_completed_email,
    "collab_interest": collab_interest_email,
}


def render_notification_email(
    type_: str,
    sender_name: str,
    message: str,
    payload: NotificationPayload | None = None,
) -> tuple[str, str, str]:
    """
    Render the email for a notification type.

    Raises:
        ValueError: If the notification type has no template.
    """
    template = NOTIFICATION_TEMPLATES.get(type_)
    if template is None:
        msg = f"Unknown notification template: {type_}"
        raise ValueError(msg)
    return template(sender_name, message, payload)
