"""Command group: friend-link management."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import click

from privateplot.commands._base import PlotGroup
from privateplot.services.links import (
    LINK_STATUSES,
    LinkService,
    build_link_payload,
    is_valid_url,
)

if TYPE_CHECKING:
    from privateplot.commands._context import AppContext

_LINKS_EXAMPLES = """\
  privateplot links list
  privateplot links add --name "Jane" --url https://jane.dev
  privateplot links modify 12 --status inactive
  privateplot links delete 12 --yes"""


def _url_value(value: str) -> str:
    value = value.strip()
    if not is_valid_url(value):
        raise click.UsageError("Please enter a valid URL")
    return value


def _optional_url_value(value: str) -> str:
    return _url_value(value) if value.strip() else ""


def _gather(app: AppContext, current: dict[str, Any], given: dict[str, Any]) -> dict[str, Any]:
    """Fill the link fields from options, prompting for the missing ones."""

    def ask(key: str, text: str, **kwargs: Any) -> Any:
        if given.get(key) is not None:
            return given[key]
        if current.get(key) is not None:
            kwargs.setdefault("default", current[key])
        return app.prompt(text, **kwargs)

    return build_link_payload(
        name=ask("name", "Name"),
        url=ask("url", "URL", value_proc=_url_value),
        description=ask("description", "Description", default="", show_default=False),
        avatar=ask(
            "avatar", "Avatar URL", default="", show_default=False, value_proc=_optional_url_value
        ),
        status=ask("status", "Status", default="active", type=click.Choice(LINK_STATUSES)),
    )


def _link_options(fn: Any) -> Any:
    fn = click.option("--status", type=click.Choice(LINK_STATUSES), default=None)(fn)
    fn = click.option("--avatar", default=None, help="Avatar image URL.")(fn)
    fn = click.option("--description", default=None)(fn)
    fn = click.option("--url", default=None, help="Site URL (http or https).")(fn)
    fn = click.option("--name", default=None, help="Display name.")(fn)
    return fn


@click.group(cls=PlotGroup, examples=_LINKS_EXAMPLES)
@click.pass_obj
def links(app: AppContext) -> None:
    """Manage friend links on the instance."""
    app.check_host()


@links.command(
    "list",
    examples="""\
  privateplot links list
  privateplot --json links list""",
)
@click.pass_obj
def list_links(app: AppContext) -> None:
    """List all friend links."""
    app.emit(LinkService(app.settings).list_links())


@links.command(
    examples="""\
  privateplot links add
  privateplot links add --name "Jane" --url https://jane.dev --status active""",
)
@_link_options
@click.pass_obj
def add(app: AppContext, **given: Any) -> None:
    """Add a friend link, prompting for missing fields."""
    payload = _gather(app, {}, given)
    app.emit(LinkService(app.settings).add_link(payload))


@links.command(
    examples="""\
  privateplot links modify 12
  privateplot links modify 12 --url https://jane.example.org""",
)
@click.argument("link_id")
@_link_options
@click.pass_obj
def modify(app: AppContext, link_id: str, **given: Any) -> None:
    """Modify a friend link; current values are offered as defaults."""
    service = LinkService(app.settings)
    current = service.get_link(link_id)
    if not current.ok:
        app.emit(current)
        return
    payload = _gather(app, current.data, given)
    app.emit(service.modify_link(link_id, payload))


@links.command(
    examples="""\
  privateplot links delete 12
  privateplot links delete 12 --yes""",
)
@click.argument("link_id")
@click.option("-y", "--yes", "assume_yes", is_flag=True, help="Skip the confirmation prompt.")
@click.pass_obj
def delete(app: AppContext, link_id: str, assume_yes: bool) -> None:
    """Delete a friend link."""
    if not assume_yes and not app.confirm(f"Are you sure you want to delete link {link_id}?"):
        click.echo("Cancelled", err=app.machine_output)
        return
    app.emit(LinkService(app.settings).delete_link(link_id))
