"""StreetTalk CLI."""

from __future__ import annotations

import sys

import click

from streettalk.core.config import Settings


@click.group()
def cli() -> None:
    """StreetTalk: realtime feed with Markdown posts and emoji shortcodes."""


@cli.command()
@click.option("--host", default=None, help="Bind host (default from env or 127.0.0.1)")
@click.option("--port", default=None, type=int, help="Bind port (default from env or 51440)")
def serve(host: str | None, port: int | None) -> None:
    """Run the StreetTalk API server."""
    import uvicorn

    from streettalk.app import create_app

    settings = Settings()
    app = create_app(settings)
    uvicorn.run(app, host=host or settings.host, port=port or settings.port)


@cli.command()
@click.argument("text", default="-")
@click.option("--unsafe", is_flag=True, help="Skip the sanitizer stage.")
def render(text: str, unsafe: bool) -> None:
    """Render TEXT (or stdin when '-') to sanitized HTML."""
    from streettalk.emoji.dataset import default_index
    from streettalk.render.pipeline import ContentRenderer
    from streettalk.render.sanitizer import SanitizerLoader

    if text == "-":
        text = sys.stdin.read()
    sanitizer = SanitizerLoader(enabled=not unsafe)
    sanitizer.load_now()
    renderer = ContentRenderer(default_index(Settings()), sanitizer)
    click.echo(renderer.render_sanitized(text).sanitized_html, nl=False)


@cli.command()
@click.argument("query")
@click.option("--limit", default=None, type=int, help="Maximum suggestions (default from env or 12)")
def emoji(query: str, limit: int | None) -> None:
    """Show shortcode suggestions for QUERY."""
    from streettalk.emoji.dataset import default_index

    settings = Settings()
    index = default_index(settings)
    for entry in index.match(query, settings.suggestion_limit if limit is None else limit):
        click.echo(f"{entry.glyph}  :{entry.shortcode}:  {entry.display_name}")


if __name__ == "__main__":
    cli()
