"""
HTML for the connector pages.

Plain f-string templates; every interpolated value goes through ``_e``.
"""

from __future__ import annotations

from html import escape
from typing import Iterable, List, Optional, Sequence

from connectors.form import ConnectorFormState, is_form_valid
from connectors.schedule import HOUR_ITEMS, MINUTE_ITEMS, TIMEZONE_ITEMS, describe_schedule
from connectors.schemas import Collection, ConnectorOut, PreviewItem
from web.pipeline import PageFailure

SUCCESS_GLYPH = "✓"
FAILURE_GLYPH = "✗"

_STYLE = """
    body {
        font-family: 'Inter', system-ui, sans-serif;
        background: #0b0d11; color: #e4e7ee; margin: 0;
        display: flex; flex-direction: column; min-height: 100vh;
    }
    header, footer { padding: 16px 32px; color: #a0a6b8; font-size: 0.85rem; }
    header { display: flex; justify-content: space-between; border-bottom: 1px solid #1f2330; }
    footer { margin-top: auto; border-top: 1px solid #1f2330; }
    main { width: 100%; max-width: 700px; margin: 0 auto; padding: 0 16px; }
    a { color: #93c5fd; }
    h1 { font-size: 2.5rem; margin: 0; }
    .back { display: inline-block; margin: 32px 0; color: #9ca3af; font-weight: 600; }
    .title-row { display: flex; align-items: center; }
    .glyph { margin-left: auto; font-size: 2rem; }
    .glyph.ok { color: #4ade80; }
    .glyph.failed { color: #dc2626; }
    .schedule { border-bottom: 1px solid #374151; padding: 4px 8px; color: #9ca3af; font-size: 0.85rem; }
    .files { display: flex; flex-wrap: wrap; gap: 8px; margin-top: 16px; padding: 0 8px; }
    .file { border: 1px solid #60a5fa; border-radius: 6px; padding: 0 8px; font-size: 0.85rem; text-decoration: none; }
    .error { color: #fca5a5; font-size: 0.85rem; padding: 8px; }
    form.connector { display: flex; flex-direction: column; gap: 24px; }
    label { font-weight: 600; font-size: 0.9rem; }
    .hint { color: #6b7280; font-size: 0.85rem; margin: 4px 0; }
    input, select { background: #12151b; color: #e4e7ee; border: 1px solid #1f2330; border-radius: 6px; padding: 6px; }
    button { background: #ea580c; color: #fff; border: 0; border-radius: 6px; padding: 6px 12px; font-weight: 600; }
    button:disabled { opacity: 0.5; }
    button.danger { background: #b91c1c; margin-top: 32px; }
    table { width: 100%; border-collapse: collapse; font-size: 0.85rem; }
    td, th { border-bottom: 1px solid #1f2330; padding: 4px 8px; text-align: left; }
"""


def _e(value: object) -> str:
    return escape("" if value is None else str(value), quote=True)


def status_glyph(succeeded: bool) -> str:
    return SUCCESS_GLYPH if succeeded else FAILURE_GLYPH


def layout(title: str, body: str, user_email: Optional[str] = None) -> str:
    user = f"<span>{_e(user_email)}</span>" if user_email else ""
    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>{_e(title)}</title>
    <style>{_STYLE}</style>
</head>
<body>
    <header><span>Needle Connectors</span>{user}</header>
    <main>
{body}
    </main>
    <footer>Needle Connectors</footer>
</body>
</html>"""


# ── Pages ──────────────────────────────────────────────────────────────


def error_page(failure: PageFailure) -> str:
    body = f"""
        <h1>{failure.status_code}</h1>
        <p class="error">{_e(failure.message)}</p>
        <a class="back" href="/connectors">← Back</a>"""
    return layout("Error", body)


def connectors_list_page(
    user_email: str,
    connectors: Sequence[ConnectorOut],
    providers: Iterable[dict],
) -> str:
    rows = "\n".join(
        f"""            <tr>
                <td><a href="/connectors/{_e(c.id)}">{_e(c.name)}</a></td>
                <td>{_e(c.provider)}</td>
                <td>{_e(describe_schedule(c.cron_job, c.cron_job_timezone))}</td>
                <td class="glyph {'ok' if c.succeeded else 'failed'}">{status_glyph(c.succeeded)}</td>
            </tr>"""
        for c in connectors
    )
    if not rows:
        rows = '            <tr><td colspan="4">No connectors yet.</td></tr>'

    new_links = " ".join(
        f'<a href="/connectors/{_e(p["provider"])}/connect">{_e(p["icon"])} New {_e(p["display_name"])} connector</a>'
        for p in providers
        if p.get("configured")
    )
    body = f"""
        <h1 style="margin-top: 32px">Connectors</h1>
        <p>{new_links}</p>
        <table>
            <tr><th>Name</th><th>Provider</th><th>Schedule</th><th></th></tr>
{rows}
        </table>"""
    return layout("Connectors", body, user_email)


def connector_detail_page(user_email: str, connector: ConnectorOut) -> str:
    files = "\n".join(
        f'            <a class="file" href="{_e(f.url)}" target="_blank" rel="noopener">↗ {_e(f.url)}</a>'
        for f in connector.files
    )
    error = f'\n        <div class="error">{_e(connector.error)}</div>' if connector.error else ""
    glyph_class = "ok" if connector.succeeded else "failed"
    body = f"""
        <a class="back" href="/connectors">← Back</a>
        <div class="title-row">
            <h1>{_e(connector.name)}</h1>
            <span class="glyph {glyph_class}">{status_glyph(connector.succeeded)}</span>
        </div>
        <div class="schedule">{_e(describe_schedule(connector.cron_job, connector.cron_job_timezone))}</div>{error}
        <div class="files">
            <strong>Files: </strong>
{files}
        </div>
        <form method="post" action="/connectors/{_e(connector.id)}/delete"
              onsubmit="if (!confirm('Delete this connector?')) return false; this.querySelector('button').disabled = true; return true;">
            <button class="danger" type="submit">Delete connector</button>
        </form>"""
    return layout(connector.name, body, user_email)


def _options(items: Iterable[tuple], selected: object, placeholder: str) -> str:
    out = [f'<option value=""{" selected" if selected is None else ""}>{_e(placeholder)}</option>']
    for value, label in items:
        sel = " selected" if selected is not None and str(selected) == str(value) else ""
        out.append(f'<option value="{_e(value)}"{sel}>{_e(label)}</option>')
    return "".join(out)


def create_connector_page(
    user_email: str,
    provider: str,
    display_name: str,
    preview: List[PreviewItem],
    collections: List[Collection],
    state: ConnectorFormState,
    access_token: Optional[str] = None,
) -> str:
    """
    The create form. ``access_token`` is echoed as a hidden field only when
    the token was delivered in the URL; in cookie mode the POST reads it from
    the cookie.
    """
    preview_rows = "\n".join(
        f"""                <tr><td>{_e(item.kind.value)}</td><td><a href="{_e(item.url)}" target="_blank" rel="noopener">{_e(item.title or item.id)}</a></td></tr>"""
        for item in preview
    ) or '                <tr><td colspan="2">Nothing shared with this integration yet.</td></tr>'

    selected = set(state.collection_ids)
    collection_options = "".join(
        f'<option value="{_e(c.id)}"{" selected" if c.id in selected else ""}>{_e(c.name)}</option>'
        for c in collections
    )
    token_field = (
        f'<input type="hidden" name="access_token" value="{_e(access_token)}">' if access_token else ""
    )
    disabled = "" if is_form_valid(state) else " disabled"

    body = f"""
        <a class="back" href="/connectors">← Back</a>
        <h1>New {_e(display_name)} connector</h1>
        <form class="connector" method="post" action="/connectors/{_e(provider)}" id="connector-form">
            {token_field}
            <div>
                <label>Preview</label>
                <table>
{preview_rows}
                </table>
            </div>
            <div>
                <label for="name">Name</label>
                <p class="hint">Enter a display name for this connector.</p>
                <input id="name" name="name" type="text" placeholder="Connector name" value="{_e(state.name)}">
            </div>
            <div>
                <label for="collection_ids">Collections</label>
                <p class="hint">Select the collections you want to sync data to.</p>
                <select id="collection_ids" name="collection_ids" multiple>{collection_options}</select>
            </div>
            <div>
                <label>Schedule</label>
                <p class="hint">We will run your connector every day, please pick a time and time zone.</p>
                <select name="hour">{_options(HOUR_ITEMS, state.hour, "Hour")}</select>
                <span>:</span>
                <select name="minute">{_options(MINUTE_ITEMS, state.minute, "Minute")}</select>
                <span>in</span>
                <select name="timezone">{_options(((tz, tz) for tz in TIMEZONE_ITEMS), state.timezone, "Select timezone")}</select>
            </div>
            <button type="submit" id="submit"{disabled}>Create Connector</button>
        </form>
        <script>
            const form = document.getElementById('connector-form');
            const submit = document.getElementById('submit');
            function isFormValid() {{
                const name = form.elements['name'].value.trim();
                const collections = form.elements['collection_ids'].selectedOptions.length;
                return name !== '' && collections > 0
                    && form.elements['hour'].value !== ''
                    && form.elements['minute'].value !== ''
                    && form.elements['timezone'].value !== '';
            }}
            form.addEventListener('input', () => {{ submit.disabled = !isFormValid(); }});
            form.addEventListener('change', () => {{ submit.disabled = !isFormValid(); }});
            form.addEventListener('submit', () => {{
                submit.disabled = true;
                submit.textContent = 'Creating…';
            }});
        </script>"""
    return layout(f"New {display_name} connector", body, user_email)


def connect_provider_page(user_email: str, provider: str, display_name: str) -> str:
    body = f"""
        <a class="back" href="/connectors">← Back</a>
        <h1>New {_e(display_name)} connector</h1>
        <p>Connect your {_e(display_name)} account to pick what to sync.</p>
        <a href="/connectors/{_e(provider)}/connect"><button type="button">Connect {_e(display_name)}</button></a>"""
    return layout(f"Connect {display_name}", body, user_email)
