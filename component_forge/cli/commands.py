"""Command-line interface for ComponentForge."""

import json
import logging
import os
import sys
from pathlib import Path

import click
import colorlog

VERSION = "0.3.0"
_PROVIDERS = ["auto", "groq", "openai", "anthropic", "gemini", "ollama"]


def setup_logging(verbose: bool = False) -> None:
    """Set up logging with color formatting."""
    log_level = logging.DEBUG if verbose else logging.INFO
    formatter = colorlog.ColoredFormatter(
        "%(log_color)s%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        log_colors={
            "DEBUG": "cyan",
            "INFO": "green",
            "WARNING": "yellow",
            "ERROR": "red",
            "CRITICAL": "red,bg_white",
        },
    )
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
    root_logger.addHandler(console_handler)


def _fail(ctx, message: str) -> None:
    logging.error(message)
    if ctx.obj.get("verbose"):
        import traceback

        traceback.print_exc()
    sys.exit(1)


@click.group(invoke_without_command=True)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.version_option(VERSION, prog_name="ComponentForge")
@click.pass_context
def cli(ctx, verbose):
    """ComponentForge - prompt-to-React-component generation with resilient JSON recovery."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    setup_logging(verbose)

    if ctx.invoked_subcommand is None:
        _interactive_menu(ctx)


@cli.command()
@click.option("--prompt", "-p", "prompt", type=str, default=None, help="Page description")
@click.option("--prompt-file", type=click.Path(exists=True, dir_okay=False), help="Read the description from a file")
@click.option("--output", "-o", required=True, type=click.Path(), help="Output directory")
@click.option("--provider", type=click.Choice(_PROVIDERS), default="auto", help="API provider")
@click.option("--chat-model", type=str, default=None, help="Override model for all agents")
@click.option("--threshold", type=click.FloatRange(0.0, 1.0), default=0.9, help="Required content utilization")
@click.option("--max-attempts", type=click.IntRange(1, 5), default=2, help="Code and validation attempts")
@click.option("--cache-dir", type=click.Path(), default=None, help="Response cache directory (default: $CACHE_DIR)")
@click.option("--no-cache", is_flag=True, help="Disable the response cache")
@click.pass_context
def generate(ctx, prompt, prompt_file, output, provider, chat_model, threshold, max_attempts, cache_dir, no_cache):
    """Generate a React component from a natural-language prompt."""
    from component_forge.pipeline import generate_component
    from component_forge.providers.manager import ProviderManager

    if prompt_file:
        prompt = Path(prompt_file).read_text(encoding="utf-8")
    if not prompt or not prompt.strip():
        _fail(ctx, "Provide --prompt or --prompt-file")

    prov = None if provider == "auto" else provider
    pm = ProviderManager(chat_model=chat_model, provider=prov)
    cache_dir = None if no_cache else (cache_dir or os.environ.get("CACHE_DIR"))

    try:
        result = generate_component(
            prompt=prompt.strip(),
            output_dir=output,
            provider_manager=pm,
            cache_dir=cache_dir,
            utilization_threshold=threshold,
            max_attempts=max_attempts,
        )
    except Exception as e:
        click.echo(pm.usage.format_summary())
        _fail(ctx, f"Error: {e}")

    click.echo(pm.usage.format_summary())
    if not result.success:
        _fail(ctx, f"Generation failed: {result.error}")
    if result.utilization:
        click.echo(f"\n  Content utilization: {result.utilization.utilization_percent}%")
    click.echo(f"  Component: {output}/component/{result.component_name}.jsx")
    click.echo(f"  Results:   {output}/manifest.json")


@cli.command()
@click.argument("source", type=click.File("r", encoding="utf-8"), default="-")
@click.option("--data-only", is_flag=True, help="Print only the recovered data")
@click.pass_context
def parse(ctx, source, data_only):
    """Recover JSON from a raw model response (file or stdin)."""
    from component_forge.utils.json_parsing import parse_structured

    result = parse_structured(source.read())
    if data_only and result.success:
        click.echo(json.dumps(result.data, indent=2, ensure_ascii=False))
    else:
        click.echo(result.model_dump_json(indent=2))
    if not result.success:
        sys.exit(1)


@cli.command("check-content")
@click.option("--content", "content_path", required=True, type=click.Path(exists=True, dir_okay=False),
              help="Content JSON (may be a raw model response)")
@click.option("--artifact", "artifact_path", required=True, type=click.Path(exists=True, dir_okay=False),
              help="Generated code or text to search")
@click.option("--threshold", type=click.FloatRange(0.0, 1.0), default=0.9, help="Required utilization")
@click.option("--prefix-length", type=click.IntRange(1), default=30, help="Prefix matched for long strings")
@click.option("--strict", is_flag=True, help="Exit with status 1 below the threshold")
@click.pass_context
def check_content(ctx, content_path, artifact_path, threshold, prefix_length, strict):
    """Report how much of a content set appears in a generated artifact."""
    from component_forge.analyzers.content_utilization import (
        ContentUtilizationValidator,
        report_to_dict,
    )
    from component_forge.utils.json_parsing import parse_structured

    parsed = parse_structured(Path(content_path).read_text(encoding="utf-8"))
    if not parsed.success:
        _fail(ctx, f"Could not parse content: {parsed.error}")

    validator = ContentUtilizationValidator(prefix_length=prefix_length, threshold=threshold)
    report = validator.validate(parsed.data, Path(artifact_path).read_text(encoding="utf-8"))
    click.echo(json.dumps(report_to_dict(report), indent=2, ensure_ascii=False))
    for line in validator.recommend(report):
        click.echo(f"  - {line}", err=True)
    if strict and not validator.meets_threshold(report):
        sys.exit(1)


@cli.command("list-models")
@click.pass_context
def list_models(ctx):
    """Discover and display available models from all configured providers."""
    from component_forge.providers.discovery import discover_available_models

    models = discover_available_models(force_refresh=True)
    if not models:
        click.echo("No models discovered. Check that at least one API key is set:")
        click.echo("  GROQ_API_KEY, OPENAI_API_KEY, ANTHROPIC_API_KEY, GEMINI_API_KEY")
        click.echo("  or start a local Ollama server")
        return

    by_provider: dict[str, list] = {}
    for m in models:
        by_provider.setdefault(m.provider, []).append(m)

    for provider, provider_models in sorted(by_provider.items()):
        click.echo(f"\n{provider.upper()} ({len(provider_models)} models)")
        click.echo("-" * 60)
        for m in provider_models:
            click.echo(f"  {m.id:<40} [{', '.join(m.capabilities)}]")

    click.echo(f"\nTotal: {len(models)} models across {len(by_provider)} providers")


@cli.command("clear-cache")
@click.option("--cache-dir", type=click.Path(), help="Path to cache directory")
@click.option("--older-than", type=int, help="Clear entries older than N seconds")
@click.option("--all", "clear_all", is_flag=True, help="Clear all cache entries")
@click.pass_context
def clear_cache(ctx, cache_dir, older_than, clear_all):
    """Clear the agent response cache."""
    if not cache_dir and not os.environ.get("CACHE_DIR"):
        _fail(ctx, "Cache directory not specified")

    cache_path = Path(cache_dir or os.environ.get("CACHE_DIR"))
    if not cache_path.exists():
        logging.warning(f"Cache directory does not exist: {cache_path}")
        return

    from component_forge.utils.api_cache import ApiCache

    namespaces = [d.name for d in cache_path.iterdir() if d.is_dir()]
    if not namespaces:
        logging.info("No cache namespaces found")
        return

    total_cleared = 0
    for namespace in namespaces:
        cache = ApiCache(cache_path, namespace)
        total_cleared += cache.clear(None if clear_all else older_than)
    logging.info(f"Total cleared: {total_cleared} entries")


def _interactive_menu(ctx):
    """Show an interactive menu when componentforge is run with no arguments."""
    click.echo()
    click.echo(f"  ComponentForge v{VERSION}")
    click.echo("  Prompt-to-React component generation")
    click.echo()
    click.echo("  1. Generate a component")
    click.echo("  2. Parse a model response")
    click.echo("  3. List available models")
    click.echo("  4. Clear cache")
    click.echo("  5. Show help")
    click.echo()

    choice = click.prompt("  Select an option", type=click.IntRange(1, 5))

    if choice == 1:
        prompt = click.prompt("  Describe the page")
        output_dir = click.prompt("  Output directory", type=click.Path())
        provider = click.prompt("  Provider", type=click.Choice(_PROVIDERS), default="auto")
        ctx.invoke(
            generate,
            prompt=prompt,
            prompt_file=None,
            output=output_dir,
            provider=provider,
            chat_model=None,
            threshold=0.9,
            max_attempts=2,
            cache_dir=None,
            no_cache=False,
        )
    elif choice == 2:
        path = click.prompt("  Response file", type=click.Path(exists=True, dir_okay=False))
        with open(path, "r", encoding="utf-8") as f:
            ctx.invoke(parse, source=f, data_only=False)
    elif choice == 3:
        ctx.invoke(list_models)
    elif choice == 4:
        cache_dir = click.prompt("  Cache directory path", type=click.Path())
        clear_all = click.confirm("  Clear all entries?", default=True)
        ctx.invoke(clear_cache, cache_dir=cache_dir, older_than=None, clear_all=clear_all)
    elif choice == 5:
        click.echo()
        click.echo(ctx.get_help())


def main():
    """Entry point for command-line usage."""
    cli(obj={})


if __name__ == "__main__":
    main()
