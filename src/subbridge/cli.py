"""CLI entry point for subbridge."""

import logging
from pathlib import Path

import click

from .bridge import convert
from .cache import TranslationCache
from .clients import PROVIDERS, create_client
from .config import Config
from .errors import ConfigurationError
from .models import SubtitleFormat
from .search import OpenSubtitlesClient, find_best_subtitle
from .service import find_subtitles, translate_media
from .subtitles import detect_format
from .translate import SubtitleTranslator

FORMAT_CHOICE = click.Choice([fmt.value for fmt in SubtitleFormat])


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """Translate and convert WebVTT/SubRip subtitles."""
    config = Config.from_env()
    _configure_logging("DEBUG" if verbose else config.log_level)
    ctx.obj = config


@main.command("translate")
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--from",
    "source_lang",
    default="en",
    show_default=True,
    help="Source language code (e.g., en, ja, es)",
)
@click.option(
    "--to",
    "target_lang",
    required=True,
    help="Target language code (e.g., el, fr, de)",
)
@click.option(
    "--llm",
    type=click.Choice(PROVIDERS),
    default=None,
    help="LLM provider for translation (default: SUBBRIDGE_PROVIDER or gemini)",
)
@click.option("--model", default=None, help="Model name for the selected provider")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    help="Output file path (default: input_name.{target}.{format})",
)
@click.option(
    "--format",
    "output_format",
    type=FORMAT_CHOICE,
    default=None,
    help="Output format (default: same as input)",
)
@click.pass_obj
def translate_command(
    config: Config,
    input_path: str,
    source_lang: str,
    target_lang: str,
    llm: str | None,
    model: str | None,
    output: str | None,
    output_format: str | None,
) -> None:
    """Translate a subtitle file into another language.

    \b
    Examples:
      subbridge translate movie.en.srt --to el
      subbridge translate movie.vtt --from en --to fr --llm ollama
    """
    provider = llm or config.provider
    try:
        client = create_client(provider, config, model=model)
    except (ConfigurationError, ValueError) as e:
        raise click.ClickException(str(e))

    input_p = Path(input_path)
    content = input_p.read_text(encoding="utf-8")
    fmt = SubtitleFormat(output_format) if output_format else detect_format(content)

    if output is None:
        base_name = input_p.stem
        if base_name.endswith(f".{source_lang}"):
            base_name = base_name[: -len(source_lang) - 1]
        output = str(input_p.with_name(f"{base_name}.{target_lang}.{fmt.value}"))

    click.echo(f"Input: {input_path}")
    click.echo(f"Translation: {source_lang} → {target_lang}")
    click.echo(f"LLM: {provider} ({client.model})")
    click.echo(f"Output: {output}")
    click.echo()

    def on_progress(batch: int, total: int) -> None:
        click.echo(f"  Batch {batch}/{total}")

    translator = SubtitleTranslator(
        client,
        cache=TranslationCache(ttl=config.cache_ttl),
        batch_size=config.batch_size,
        max_workers=config.max_workers,
        timeout=config.translation_timeout,
        on_progress=on_progress,
    )

    click.echo(f"Translating ({provider})...")
    translated = translator.translate(content, source_lang, target_lang)
    if translated == content:
        click.secho("Translation failed, writing original subtitles", fg="yellow", err=True)

    Path(output).write_text(convert(translated, fmt), encoding="utf-8")
    click.echo(f"  Saved to {output}")
    click.echo()
    click.secho("Done!", fg="green", bold=True)


@main.command("convert")
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--to",
    "target_format",
    type=FORMAT_CHOICE,
    default=None,
    help="Target format (default: the other format)",
)
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Output file path")
def convert_command(input_path: str, target_format: str | None, output: str | None) -> None:
    """Convert a subtitle file between WebVTT and SubRip."""
    input_p = Path(input_path)
    content = input_p.read_text(encoding="utf-8")
    target = SubtitleFormat(target_format) if target_format else detect_format(content).other

    converted = convert(content, target)
    if output is None:
        output = str(input_p.with_suffix(f".{target.value}"))
    Path(output).write_text(converted, encoding="utf-8")
    click.echo(f"Saved to {output}")


@main.command("search")
@click.argument("content_type", type=click.Choice(["movie", "series", "anime"]))
@click.argument("media_id")
@click.option("--to", "target_lang", default=None, help="Show the best source for this language")
@click.option("--translate", "do_translate", is_flag=True, help="Translate the best source into --to")
@click.option(
    "--llm",
    type=click.Choice(PROVIDERS),
    default=None,
    help="LLM provider for translation (default: SUBBRIDGE_PROVIDER or gemini)",
)
@click.option("--model", default=None, help="Model name for the selected provider")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    help="Output file path (default: {media_id}.{target}.{format})",
)
@click.pass_obj
def search_command(
    config: Config,
    content_type: str,
    media_id: str,
    target_lang: str | None,
    do_translate: bool,
    llm: str | None,
    model: str | None,
    output: str | None,
) -> None:
    """Search OpenSubtitles for a movie or episode.

    \b
    Examples:
      subbridge search movie tt0111161 --to el
      subbridge search series tt0944947:1:2 --to el --translate -o got.el.srt
    """
    if not config.has_opensubtitles():
        raise click.ClickException("OPENSUBTITLES_API_KEY environment variable required for search")
    if do_translate and not target_lang:
        raise click.UsageError("--translate requires --to")

    search_client = OpenSubtitlesClient(config.opensubtitles_api_key)
    search_cache = TranslationCache(ttl=config.cache_ttl)
    subtitles = find_subtitles(search_client, content_type, media_id, search_cache)
    if not subtitles:
        click.echo("No subtitles found")
        return

    for sub in subtitles:
        fmt = sub.format.value if sub.format else "-"
        click.echo(f"{sub.id}\t{sub.lang}\t{fmt}\t{sub.score:.1f}\t{sub.title or ''}")

    if not target_lang:
        return
    best = find_best_subtitle(subtitles, target_lang)
    if best is None:
        click.echo(f"No source subtitle for {target_lang}")
        return
    click.secho(f"Best source for {target_lang}: {best.id} ({best.lang})", fg="green")
    if not do_translate:
        return

    provider = llm or config.provider
    try:
        client = create_client(provider, config, model=model)
    except (ConfigurationError, ValueError) as e:
        raise click.ClickException(str(e))

    translator = SubtitleTranslator(
        client,
        cache=TranslationCache(ttl=config.cache_ttl),
        batch_size=config.batch_size,
        max_workers=config.max_workers,
        timeout=config.translation_timeout,
    )
    click.echo(f"Translating ({provider})...")
    translated = translate_media(
        content_type, media_id, target_lang, translator, search_client, search_cache=search_cache
    )
    if translated is None:
        raise click.ClickException(f"Could not download subtitle {best.id}")

    if output is None:
        safe_id = media_id.replace(":", "_")
        output = f"{safe_id}.{target_lang}.{detect_format(translated).value}"
    Path(output).write_text(translated, encoding="utf-8")
    click.echo(f"  Saved to {output}")
    click.secho("Done!", fg="green", bold=True)


if __name__ == "__main__":
    main()
