"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a StringIO-backed Console; :func:`render_result`
returns the captured text. Renderers are picked by ``result.op`` and unknown
ops fall back to a plain key-value listing.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from privateplot.output.console import create_console, get_output, style_for_status

if TYPE_CHECKING:
    from rich.console import Console

    from privateplot.services.result import ServiceResult

Renderer = Callable[..., None]


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render *result* to text, plain when there is no terminal."""
    console = create_console()
    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
        if verbose:
            _render_meta(console, result)
    else:
        _render_error(result, console, verbose=verbose)
    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Minimal output for ``--quiet``: ids for listings, counts for publish."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op}: {msg}"

    items = result.data.get("items")
    if isinstance(items, list):
        return "\n".join(str(item["id"]) for item in items if item.get("id"))

    if result.op == "publish" and "published" in result.data:
        d = result.data
        return f"published={d['published']} skipped={d['skipped']} failed={d['failed']}"

    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult, note: str | None = None) -> None:
    line = Text.assemble(("OK", "plot.ok"), (f"  {result.op}", "plot.op"))
    if note:
        line.append(f"  {note}", style="plot.warning")
    console.print(line)


def _field(console: Console, key: str, value: Any) -> None:
    if key == "id" or key.endswith("_id"):
        style = "plot.id"
    elif key in ("path", "config_path"):
        style = "plot.path"
    elif key == "title":
        style = "plot.title"
    else:
        style = ""
    console.print(Text.assemble((f"  {key}: ", "plot.key"), (str(value), style)))


def _render_meta(console: Console, result: ServiceResult) -> None:
    if not result.meta:
        return
    console.print(Text("  meta:", style="dim"))
    for key, value in result.meta.items():
        console.print(f"    {key}: {value}")


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    console.print(
        Text.assemble(("ERROR", "plot.error"), (f"  {result.op}", "plot.op"), f": {msg}")
    )
    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for key, value in err.detail.items():
            console.print(f"    {key}: {value}")


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)


# ── Articles ──────────────────────────────────────────────────────────


def _render_publish(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    if d.get("cancelled"):
        _status_line(console, result, "cancelled")
        return
    _status_line(console, result)
    _field(console, "path", d.get("path", ""))
    for key in ("total", "published", "skipped", "failed", "drafts"):
        if key in d:
            _field(console, key, d[key])

    retry = d.get("retry")
    if retry:
        console.print(Text("  retry:", style="plot.key"))
        for key in ("total", "published", "skipped", "failed"):
            console.print(f"    {key}: {retry.get(key, 0)}")

    if verbose:
        failures = [*d.get("auth_failed_articles", []), *d.get("failed_articles", [])]
        for failed in failures:
            console.print(
                f"  [plot.error]failed[/plot.error] {failed['title']} "
                f"([plot.path]{failed['path']}[/plot.path]): {failed['error']}"
            )


def _render_delete_article(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    d = result.data
    _status_line(console, result, "cancelled" if d.get("cancelled") else None)
    for key in ("id", "title", "path"):
        if key in d:
            _field(console, key, d[key])


def _render_list_articles(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    d = result.data
    items = d.get("items", [])
    if not items:
        console.print("No articles found")
        return

    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="plot.id", no_wrap=True)
    table.add_column("Title", style="plot.title")
    table.add_column("Last Updated")
    if verbose:
        table.add_column("Slug", style="dim")
    for item in items:
        row = [str(item.get("id", "")), item.get("title", ""), item.get("updated", "")]
        if verbose:
            row.append(item.get("slug") or "")
        table.add_row(*row)
    console.print(table)

    footer = f"\nTotal articles: {d.get('total', len(items))}"
    if d.get("has_more"):
        footer += f" (page {d.get('page', 1)}, more with --page {d.get('page', 1) + 1})"
    console.print(footer)


# ── Links ─────────────────────────────────────────────────────────────


def _render_list_links(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    if not items:
        console.print("No friend links found")
        return

    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="plot.id", no_wrap=True)
    table.add_column("Name", style="plot.title")
    table.add_column("URL")
    table.add_column("Status")
    if verbose:
        table.add_column("Description", style="dim")
    for link in items:
        status = link.get("status") or ""
        row: list[Any] = [
            str(link.get("id", "")),
            link.get("name", ""),
            link.get("url", ""),
            Text(status, style=style_for_status(status)),
        ]
        if verbose:
            row.append(link.get("description") or "")
        table.add_row(*row)
    console.print(table)
    console.print(f"\nTotal links: {len(items)}")


def _render_link_mutation(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    _status_line(console, result)
    for key in ("id", "name", "url", "status"):
        if result.data.get(key) is not None:
            _field(console, key, result.data[key])


# ── Settings ──────────────────────────────────────────────────────────


def _render_settings(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    _status_line(console, result)
    host = d.get("host") or "(not set)"
    if d.get("default_host"):
        host = f"{host} (default)"
    _field(console, "host", host)
    _field(console, "token", d.get("token") or "(not set)")
    _field(console, "config_path", d.get("config_path") or "(none)")
    if d.get("updated"):
        _field(console, "updated", ", ".join(d["updated"]))


_OP_RENDERERS: dict[str, Renderer] = {
    "publish": _render_publish,
    "delete_article": _render_delete_article,
    "list_articles": _render_list_articles,
    "list_links": _render_list_links,
    "add_link": _render_link_mutation,
    "modify_link": _render_link_mutation,
    "delete_link": _render_link_mutation,
    "settings_show": _render_settings,
    "settings_update": _render_settings,
}
