# main.py — command line entry point
import logging

import click

from cache import DiskCache
from chatbot import Chatbot
from config import Settings
from crawler import CrawlError, Crawler
from documents import DocumentExtractor
from llm_interface import OllamaClient


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("pdfminer").setLevel(logging.WARNING)


def _build(settings: Settings) -> Chatbot:
    crawler = Crawler(settings, extract_document=DocumentExtractor())
    return Chatbot(settings, crawler=crawler, llm=OllamaClient.from_settings(settings))


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Debug logging.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Crawl a personal website + linked profiles and ask a local LLM about it."""
    _setup_logging(verbose)
    ctx.obj = Settings.from_env()


@cli.command()
@click.argument("site", required=False)
@click.option("--depth", type=int, help="Max hops from the root page (1-10).")
@click.option("--pages", type=int, help="Linked-page budget for this session.")
@click.option("--refresh", is_flag=True, help="Ignore disk + memory caches.")
@click.option("--internal/--no-internal", default=None, help="Follow same-site navigation links.")
@click.pass_obj
def crawl(settings: Settings, site, depth, pages, refresh, internal) -> None:
    """Crawl SITE (default: $WEBSITE_URL) and print the scraping summary."""
    settings = settings.with_overrides(
        website_url=site, max_depth=depth, max_pages_per_session=pages,
        refresh_content=refresh or None, enable_internal_links=internal,
    )
    if not settings.website_url:
        raise click.UsageError("give a SITE or set WEBSITE_URL")

    bot = _build(settings)
    click.echo(f"Crawling {settings.website_url} …")
    try:
        record = bot.refresh(force=settings.refresh_content)
    except CrawlError as exc:
        raise click.ClickException(str(exc))
    finally:
        bot.close()
    click.echo(bot.session.audit.format_report())
    click.echo(click.style(
        f"✓ {record.title or settings.website_url}: {len(record.linked_pages)} linked pages, "
        f"{len(record.documents)} documents.", fg="green"))


@cli.command()
@click.argument("question", nargs=-1, required=True)
@click.option("--site", help="Override $WEBSITE_URL.")
@click.pass_obj
def ask(settings: Settings, question: tuple, site) -> None:
    """Answer QUESTION about the crawled website."""
    settings = settings.with_overrides(website_url=site)
    if not settings.website_url:
        raise click.UsageError("give --site or set WEBSITE_URL")
    bot = _build(settings)
    try:
        reply = bot.ask(" ".join(question))
    finally:
        bot.close()
    if reply.degraded:
        click.echo(click.style("⚠️  degraded answer (LLM or website unavailable)", fg="yellow"))
    click.echo(reply.response)


@cli.command("clear-cache")
@click.pass_obj
def clear_cache(settings: Settings) -> None:
    """Delete every snapshot under the cache directory."""
    removed = DiskCache(settings.cache_dir).clear()
    click.echo(f"Removed {removed} cached site(s) from {settings.cache_dir}.")


@cli.command("check-llm")
@click.pass_obj
def check_llm(settings: Settings) -> None:
    """Is the Ollama endpoint answering?"""
    client = OllamaClient.from_settings(settings)
    up = client.is_available()
    client.close()
    if up:
        click.echo(click.style(f"✅  Ollama reachable at {client.base_url} ({client.model}).", fg="green"))
    else:
        click.echo(click.style(f"⚠️  Ollama NOT reachable at {client.base_url}.", fg="yellow"))


if __name__ == "__main__":
    cli()
