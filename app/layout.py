"""
Shared HTML layout and styling helpers.
"""
import html as html_lib

from fastapi.responses import HTMLResponse


def render_page(title: str, body: str, user: dict | None = None, status_code: int = 200) -> HTMLResponse:
    """
    Shared layout: warm paper background, nav bar, and optional 'signed in as' line.
    """
    if user:
        who = html_lib.escape(user.get("display_name") or user.get("email") or "Spotify listener")
        nav_links = """
          <a href="/weekly">This week</a>
          <a href="/monthly">Calendar</a>
          <a href="/settings">Settings</a>
          <a href="/logout">Log out</a>
        """
        signed_in_text = f"Signed in as <strong>{who}</strong>"
    else:
        nav_links = """
          <a href="/login">Connect Spotify</a>
        """
        signed_in_text = "Not signed in"

    html = f"""
    <!DOCTYPE html>
    <html>
      <head>
        <meta charset="utf-8" />
        <meta name="viewport" content="width=device-width, initial-scale=1.0" />
        <title>{title}</title>
        <style>
          * {{
            box-sizing: border-box;
          }}
          body {{
            font-family: system-ui, -apple-system, BlinkMacSystemFont, "Segoe UI", sans-serif;
            margin: 0;
            padding: 0;
            background: #F6F2EA;
            color: #2A2A2A;
          }}
          .page {{
            max-width: 880px;
            margin: 0 auto;
            padding: 1.5rem 1rem 3rem;
          }}
          header {{
            display: flex;
            justify-content: space-between;
            align-items: center;
            margin-bottom: 1.5rem;
            padding: 0.75rem 0;
            border-bottom: 1px solid #e0d9ce;
          }}
          header h1 {{
            font-family: Georgia, serif;
            font-weight: 500;
            font-size: 1.5rem;
            color: #2F4F3F;
            margin: 0;
          }}
          nav {{
            display: flex;
            gap: 0.5rem;
            flex-wrap: wrap;
          }}
          nav a {{
            text-decoration: none;
            color: #2F4F3F;
            font-size: 0.9rem;
            padding: 6px 12px;
            border-radius: 999px;
            border: 1px solid transparent;
          }}
          nav a:hover {{
            border-color: #2F4F3F;
          }}
          .signed-in {{
            font-size: 0.8rem;
            color: #888;
            margin-top: 0.25rem;
          }}
          a {{
            color: #2F4F3F;
          }}
          .card {{
            background: #fff;
            border-radius: 12px;
            border: 1px solid #e8e2d9;
            padding: 1rem 1.25rem;
            margin-bottom: 0.75rem;
          }}
          .date-header {{
            margin: 2rem 0 0.75rem;
            font-size: 0.8rem;
            font-weight: 600;
            letter-spacing: 0.06em;
            text-transform: uppercase;
            color: #999;
          }}
          .bill {{
            margin: 0;
            font-family: Georgia, serif;
            font-size: 1.05rem;
            line-height: 1.4;
          }}
          .bill .match {{
            color: #2F4F3F;
            font-weight: 700;
          }}
          .bill .other {{
            color: #888;
          }}
          .bill .sep {{
            color: #bbb;
          }}
          .muted {{
            color: #888;
            font-size: 0.85rem;
          }}
          .tickets {{
            display: inline-block;
            margin-top: 0.6rem;
            font-size: 0.8rem;
            text-decoration: none;
            border: 1px solid #2F4F3F;
            border-radius: 20px;
            padding: 3px 12px;
          }}
          label {{
            display: block;
            margin-top: 1rem;
            font-size: 0.95rem;
          }}
          select {{
            width: 100%;
            padding: 0.5rem;
            margin-top: 0.25rem;
            border-radius: 0.375rem;
            border: 1px solid #d6cfc3;
            background: #fff;
          }}
          input[type="radio"] {{
            accent-color: #2F4F3F;
          }}
          button {{
            margin-top: 1.25rem;
            padding: 0.6rem 1.4rem;
            border-radius: 999px;
            border: none;
            background: #2F4F3F;
            color: #F6F2EA;
            font-weight: 600;
            cursor: pointer;
          }}
          table.calendar {{
            width: 100%;
            border-collapse: collapse;
            table-layout: fixed;
          }}
          table.calendar th {{
            font-size: 0.75rem;
            color: #999;
            font-weight: 600;
            padding: 0.4rem 0;
          }}
          table.calendar td {{
            height: 84px;
            vertical-align: top;
            border: 1px solid #e8e2d9;
            background: #fff;
            padding: 0.3rem;
            font-size: 0.75rem;
          }}
          table.calendar td.empty {{
            background: transparent;
            border-color: transparent;
          }}
          table.calendar td.today {{
            outline: 2px solid #2F4F3F;
          }}
          table.calendar .day {{
            font-weight: 600;
            color: #555;
          }}
          table.calendar .pill {{
            display: block;
            margin-top: 2px;
            color: #2F4F3F;
            text-decoration: none;
            white-space: nowrap;
            overflow: hidden;
            text-overflow: ellipsis;
          }}
          footer {{
            margin-top: 2.5rem;
            padding: 1rem 0;
            border-top: 1px solid #e0d9ce;
            font-size: 0.8rem;
            color: #aaa;
            text-align: center;
          }}
        </style>
      </head>
      <body>
        <div class="page">
          <header>
            <div>
              <h1>Concert Calendar</h1>
              <div class="signed-in">{signed_in_text}</div>
            </div>
            <nav>
              {nav_links}
            </nav>
          </header>
          <main>
            {body}
          </main>
          <footer>
            <div>Live shows from the artists you already listen to.</div>
          </footer>
        </div>
      </body>
    </html>
    """
    return HTMLResponse(content=html, status_code=status_code)
