"""
HTML and plain-text bodies for the concert digest email.
"""
from __future__ import annotations

import html
from datetime import date
from typing import Dict, List

from core.shows import group_by_date


def format_date(date_str: str) -> str:
    """'2025-05-01' -> 'Thursday, May 1'."""
    try:
        d = date.fromisoformat(date_str)
    except ValueError:
        return date_str
    return f"{d.strftime('%A, %B')} {d.day}"


def _bill_html(bill: List[Dict]) -> str:
    parts = []
    for entry in bill:
        name = html.escape(entry["name"])
        if entry["is_match"]:
            parts.append(f'<strong style="color:#2F4F3F;">{name}</strong>')
        else:
            parts.append(f'<span style="color:#888;">{name}</span>')
    return '<span style="color:#bbb;"> + </span>'.join(parts)


def build_digest_html(shows: List[Dict], unsubscribe_url: str) -> str:
    date_blocks = ""
    for date_str, date_shows in group_by_date(shows).items():
        cards = ""
        for show in date_shows:
            time_str = f" &middot; {html.escape(show['time'])}" if show.get("time") else ""
            ticket_link = ""
            if show.get("ticket_url"):
                ticket_link = (
                    f'<a href="{html.escape(show["ticket_url"], quote=True)}" '
                    'style="display:inline-block;margin-top:10px;font-size:12px;color:#2F4F3F;'
                    'text-decoration:none;border:1px solid #2F4F3F;border-radius:20px;padding:4px 12px;">'
                    "Get tickets</a>"
                )
            cards += f"""
            <div style="background:#fff;border-radius:12px;padding:20px 24px;margin-bottom:10px;border:1px solid #e8e2d9;">
              <p style="margin:0;font-size:16px;font-family:Georgia,serif;color:#2A2A2A;line-height:1.4;">{_bill_html(show["bill"])}</p>
              <p style="margin:6px 0 0;font-size:13px;color:#888;">{html.escape(show["venue"])}{time_str}</p>
              {ticket_link}
            </div>"""

        date_blocks += f"""
        <div style="margin-bottom:32px;">
          <p style="margin:0 0 12px;font-size:13px;font-weight:600;letter-spacing:0.06em;text-transform:uppercase;color:#999;">{format_date(date_str)}</p>
          {cards}
        </div>"""

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1.0" />
  <title>Your upcoming shows</title>
</head>
<body style="margin:0;padding:0;background:#F6F2EA;font-family:system-ui,-apple-system,sans-serif;">
  <table width="100%" cellpadding="0" cellspacing="0" style="background:#F6F2EA;padding:40px 16px;">
    <tr>
      <td align="center">
        <table width="100%" style="max-width:560px;">
          <tr>
            <td style="padding-bottom:32px;">
              <p style="margin:0;font-size:22px;font-family:Georgia,serif;color:#2F4F3F;">Concert Calendar</p>
              <p style="margin:6px 0 0;font-size:14px;color:#888;">Your upcoming shows</p>
            </td>
          </tr>
          <tr>
            <td>{date_blocks}</td>
          </tr>
          <tr>
            <td style="padding-top:32px;border-top:1px solid #e0d9ce;">
              <p style="margin:0;font-size:12px;color:#aaa;line-height:1.6;">
                You're getting this because you connected Spotify to Concert Calendar.
                <br />
                <a href="{html.escape(unsubscribe_url, quote=True)}" style="color:#aaa;">Manage email preferences</a>
              </p>
            </td>
          </tr>
        </table>
      </td>
    </tr>
  </table>
</body>
</html>"""


def build_digest_text(shows: List[Dict], unsubscribe_url: str | None = None) -> str:
    lines: List[str] = ["Your upcoming shows", ""]

    for date_str, date_shows in group_by_date(shows).items():
        lines.append(format_date(date_str))
        for show in date_shows:
            bill = " + ".join(entry["name"] for entry in show["bill"])
            time_str = f" · {show['time']}" if show.get("time") else ""
            lines.append(f"  {bill} @ {show['venue']}{time_str}")
            if show.get("ticket_url"):
                lines.append(f"  Tickets: {show['ticket_url']}")
        lines.append("")

    if unsubscribe_url:
        lines.append(f"Manage email preferences: {unsubscribe_url}")

    return "\n".join(lines)


__all__ = ["format_date", "build_digest_html", "build_digest_text"]
