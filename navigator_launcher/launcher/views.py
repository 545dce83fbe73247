"""Pages served by the unlock-prompt listener."""
import html

_PAGE = """<!DOCTYPE html>
<html lang="en">
<head><meta charset="utf-8"><title>{title}</title></head>
<body>
<main>
{body}
</main>
</body>
</html>
"""

_UNLOCK_FORM = """<form method="post" action="/unlock">
  <label for="password">Password</label>
  <input type="password" id="password" name="password" autofocus>
  <button type="submit">Unlock</button>
</form>"""


def _page(title: str, body: str) -> str:
    return _PAGE.format(title=html.escape(title), body=body)


def index_page() -> str:
    return _page(
        "Locked",
        '<h1>Service locked</h1>\n<p><a href="/unlock">Unlock</a></p>',
    )


def unlock_page() -> str:
    return _page("Unlock", f"<h1>Unlock service</h1>\n{_UNLOCK_FORM}")


def wrong_password_page() -> str:
    return _page(
        "Unlock failed",
        f"<h1>Unlock failed</h1>\n<p>Wrong password.</p>\n{_UNLOCK_FORM}",
    )


def starting_page(health_check_url: str) -> str:
    body = "<h1>Service starting</h1>"
    if health_check_url:
        url = html.escape(str(health_check_url), quote=True)
        body += (
            f'\n<p data-health-check="{url}">'
            f'Health check: <a href="{url}">{url}</a></p>'
        )
    return _page("Starting", body)
