import logging
import sys
from pathlib import Path
from typing import Iterable, List, Optional

import typer
from tqdm import tqdm

from . import __version__
from .config import (
    DEFAULT_DOMAIN,
    DEFAULT_LOCALE,
    DEFAULT_MODALITY,
    DEFAULT_STYLE,
    ConversionOptions,
    RuntimeConfig,
    load_config_file,
)
from .errors import AssetNotFoundError, ConfigurationError, ConversionError
from .pipeline import Latex2Sre

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="latex2sre",
    help="Convert LaTeX math expressions to spoken math text",
    add_completion=False
)


class OutputSink:
    """
    Collects or streams conversion results.

    In stream mode every result is written as soon as it is produced;
    otherwise results are accumulated and written once by flush(). A file
    target is always opened in append mode.
    """

    def __init__(self, output: Optional[Path] = None, stream: bool = False):
        self.output = output.resolve() if output else None
        self.stream = stream
        self.results: List[str] = []

    def emit(self, speech: str) -> None:
        if self.stream:
            self._write(speech + "\n")
        else:
            self.results.append(speech)

    def flush(self) -> None:
        if self.stream:
            return
        self._write("\n".join(self.results) + "\n")
        if self.output:
            logger.debug("Output written to: %s", self.output)

    def _write(self, text: str) -> None:
        if self.output:
            with open(self.output, 'a', encoding='utf-8') as f:
                f.write(text)
        else:
            typer.echo(text, nl=False)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="[%(name)s] %(message)s",
        stream=sys.stderr,
        force=True
    )


def _stdin_is_interactive() -> bool:
    return sys.stdin.isatty()


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"latex2sre {__version__}")
        raise typer.Exit()


def convert_entries(
    converter: Latex2Sre,
    entries: Iterable[str],
    sink: OutputSink,
    show_progress: bool = False
) -> int:
    """
    Convert entries in order, skipping blanks and reporting failures.

    A failing entry is reported on stderr and processing continues.

    Returns:
        Number of entries converted successfully
    """
    count = 0
    for entry in tqdm(entries, desc="Converting", unit="expr", disable=not show_progress, file=sys.stderr):
        trimmed = entry.strip()
        if not trimmed:
            continue
        try:
            speech = converter.convert(trimmed)
        except (ConversionError, AssetNotFoundError) as e:
            typer.echo(str(e), err=True)
            continue
        sink.emit(speech)
        count += 1
    return count


@app.command()
def convert(
    ctx: typer.Context,
    latex: Optional[str] = typer.Argument(
        None,
        help="LaTeX math expression (or use --input or stdin)"
    ),
    input_file: Optional[Path] = typer.Option(
        None,
        "--input", "-i",
        help="Input file containing LaTeX expressions (one per line for batch)"
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output", "-o",
        help="Output file (results are appended)"
    ),
    locale: str = typer.Option(
        DEFAULT_LOCALE,
        "--locale", "-l",
        help="Speech locale (e.g., en, de)"
    ),
    domain: str = typer.Option(
        DEFAULT_DOMAIN,
        "--domain", "-d",
        help="Speech domain (mathspeak, clearspeak)"
    ),
    style: str = typer.Option(
        DEFAULT_STYLE,
        "--style", "-s",
        help="Speech style (e.g., default, brief)"
    ),
    modality: str = typer.Option(
        DEFAULT_MODALITY,
        "--modality", "-m",
        help="Modality (speech, braille)"
    ),
    cache: bool = typer.Option(
        True,
        "--cache/--no-cache",
        help="Cache repeated conversions"
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        help="JSON config file for additional speech options"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Enable verbose logging"
    ),
    batch_delimiter: Optional[str] = typer.Option(
        None,
        "--batch-delimiter",
        help="Delimiter to split batch input lines (defaults to newline)"
    ),
    stream: bool = typer.Option(
        False,
        "--stream",
        help="Stream output line by line for stdin/batch inputs"
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit"
    )
):
    """
    Convert LaTeX math expressions to spoken math text.

    Input is taken from --input (batch), the LATEX argument, or piped
    standard input, in that order of priority.

    Examples:
        latex2sre "x=1" --domain clearspeak
        latex2sre --input formulas.txt --output speech.txt
        cat formulas.txt | latex2sre --stream --modality braille
    """
    _configure_logging(verbose)

    options = ConversionOptions(locale=locale, domain=domain, style=style, modality=modality)
    try:
        custom = load_config_file(config) if config else {}
        options = options.with_overrides(custom)
        json_path = custom.get("json")
        runtime = RuntimeConfig.from_env(Path(json_path) if json_path else None)

        converter = Latex2Sre(options, runtime, use_cache=cache)
        converter.setup()
    except ConfigurationError as e:
        typer.echo(f"SRE setup error: {e}", err=True)
        raise typer.Exit(1)

    sink = OutputSink(output, stream)
    delimiter = batch_delimiter or "\n"

    try:
        if input_file:
            try:
                content = input_file.resolve().read_text(encoding='utf-8')
            except OSError as e:
                typer.echo(f"Error reading input file: {e}", err=True)
                raise typer.Exit(1)
            count = convert_entries(converter, content.split(delimiter), sink, show_progress=verbose)
            logger.debug("Processed %d expressions from file.", count)
        elif latex:
            try:
                sink.emit(converter.convert(latex))
            except (ConversionError, AssetNotFoundError) as e:
                typer.echo(str(e), err=True)
                raise typer.Exit(1)
        elif not _stdin_is_interactive():
            convert_entries(converter, typer.get_text_stream("stdin", errors="replace"), sink)
        else:
            typer.echo(ctx.get_help())
            raise typer.Exit(0)

        sink.flush()
    except OSError as e:
        typer.echo(f"Error writing output file: {e}", err=True)
        raise typer.Exit(1)

    logger.debug(
        "Cache: %d hits, %d misses (%s)",
        converter.cache.hits, converter.cache.misses, "on" if cache else "off"
    )


def main():
    app()


if __name__ == "__main__":
    main()
