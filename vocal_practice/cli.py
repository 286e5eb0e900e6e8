"""Command-line interface for Vocal Practice.

Provides commands for:
- notes: List the practice note catalog
- classify: Match a single frequency against selected notes
- analyze: Run a practice session over a recorded audio file
- tones: Write reference tone WAV files
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

app = typer.Typer(
    name="vocal-practice",
    help="Singing practice: pitch detection and note matching",
    rich_markup_mode="markdown",
)
console = Console()


def setup_logging(verbose: bool = False) -> None:
    """Route package logs through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=False)],
        force=True,
    )


def load_config(config_file: Optional[Path], **overrides: Any):
    """Load a PracticeConfig from TOML (if given) and apply CLI overrides."""
    from .config import PracticeConfig

    config = PracticeConfig.from_toml(config_file) if config_file else PracticeConfig()
    return config.replace(**overrides)


@app.command()
def notes():
    """List the notes available for practice."""
    from .core import default_catalog

    table = Table(title="Practice Notes")
    table.add_column("Note", style="cyan")
    table.add_column("Frequency (Hz)", justify="right")
    table.add_column("MIDI", justify="right")

    for note in default_catalog():
        table.add_row(note.name, f"{note.frequency:.2f}", str(note.midi))

    console.print(table)


@app.command()
def classify(
    frequency: float = typer.Argument(..., help="Detected frequency in Hz"),
    select: Optional[List[str]] = typer.Option(
        None, "-s", "--select", help="Selected note (repeatable), e.g. -s A4 -s C5"
    ),
    tolerance: Optional[float] = typer.Option(
        None, "-t", "--tolerance", help="Match tolerance in Hz"
    ),
    config_file: Optional[Path] = typer.Option(
        None, "-c", "--config", help="TOML config file"
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Output result as JSON (for scripting)"
    ),
):
    """Match one frequency against the catalog and selected notes.

    **Examples:**

        vocal-practice classify 442 -s A4

        vocal-practice classify 450 -s A4 -t 12 --json
    """
    from .core import default_catalog, VocalPracticeError
    from .analysis import validate_frequency
    from .inference import PitchClassifier
    from .session import NoteSelection

    try:
        config = load_config(config_file, tolerance_hz=tolerance)
        catalog = default_catalog()
        selection = NoteSelection(catalog, select or [])
        classifier = PitchClassifier(catalog, config.tolerance_hz)
    except (VocalPracticeError, FileNotFoundError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if validate_frequency(frequency, config.min_frequency, config.max_frequency) is None:
        console.print(
            f"[yellow]{frequency} Hz is outside the vocal range "
            f"({config.min_frequency:.0f}-{config.max_frequency:.0f} Hz); no pitch[/yellow]"
        )
        raise typer.Exit(1)

    result = classifier.classify(frequency, selection.names)

    if json_output:
        print(json.dumps({
            "frequency": frequency,
            "nearest_note": result.nearest_note.name,
            "nearest_frequency": result.nearest_note.frequency,
            "distance_hz": round(result.distance_hz, 3),
            "cents": round(result.cents, 1),
            "within_tolerance": result.within_tolerance,
            "category": result.category.value,
            "feedback": result.feedback,
        }))
        return

    color = "green" if result.within_tolerance else "red"
    console.print(f"[{color}]{result.feedback}[/{color}]")
    console.print(
        f"  Nearest: {result.nearest_note.name} ({result.nearest_note.frequency:.2f} Hz), "
        f"off by {result.distance_hz:.2f} Hz ({result.cents:+.1f} cents)"
    )


@app.command()
def analyze(
    input_file: Path = typer.Argument(..., help="Recorded practice audio (WAV, MP3, ...)"),
    select: List[str] = typer.Option(
        ..., "-s", "--select", help="Notes practiced, in order (repeatable)"
    ),
    interval: Optional[float] = typer.Option(
        None, "-i", "--interval", help="Detection interval in seconds"
    ),
    tolerance: Optional[float] = typer.Option(
        None, "-t", "--tolerance", help="Match tolerance in Hz"
    ),
    method: str = typer.Option(
        "yin", "-m", "--method", help="Pitch method: yin/pyin"
    ),
    config_file: Optional[Path] = typer.Option(
        None, "-c", "--config", help="TOML config file"
    ),
    verbose: bool = typer.Option(
        False, "-v", "--verbose", help="Verbose output"
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Output results as JSON (for scripting)"
    ),
):
    """Replay a recording through a practice session and report how it matched.

    **Examples:**

        vocal-practice analyze take1.wav -s C4 -s E4 -s G4

        vocal-practice analyze take1.wav -s A4 -t 8 --json
    """
    from .core import default_catalog, VocalPracticeError
    from .analysis import LibrosaPitchEstimator
    from .audio import FileAudioSource, TimedPlayback
    from .inference import FeedbackCategory
    from .session import NoteSelection, PracticeSession, VirtualScheduler

    setup_logging(verbose)

    if not input_file.exists():
        console.print(f"[red]Error: File not found: {input_file}[/red]")
        raise typer.Exit(1)

    try:
        config = load_config(
            config_file, detection_interval=interval, tolerance_hz=tolerance
        )
        catalog = default_catalog()
        selection = NoteSelection(catalog, select)
        estimator = LibrosaPitchEstimator(
            fmin=config.min_frequency, fmax=config.max_frequency, method=method
        )

        if not json_output:
            console.print(f"[blue]Loading audio:[/blue] {input_file}")
        scheduler = VirtualScheduler()
        try:
            source = FileAudioSource(
                input_file,
                clock=scheduler.time,
                sample_rate=config.sample_rate,
                buffer_duration=config.buffer_duration,
            )
        except (FileNotFoundError, ValueError):
            raise
        except Exception as e:
            console.print(f"[red]Error loading audio: {e}[/red]")
            raise typer.Exit(1)
        player = TimedPlayback(scheduler, duration=config.reference_duration)
        session = PracticeSession(
            catalog, estimator, source, player, scheduler=scheduler, config=config
        )
    except (VocalPracticeError, FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if verbose:
        console.print(f"  Duration: {source.duration:.2f}s, Sample rate: {source.sample_rate}Hz")

    records: List[Dict[str, Any]] = []

    def collect(snapshot) -> None:
        if not snapshot.history:
            return
        sample = snapshot.history[-1]
        if records and records[-1]["sample"] is sample:
            return
        records.append({
            "sample": sample,
            "reference": snapshot.current_note.name if snapshot.current_note else "",
            "match": snapshot.category is FeedbackCategory.MATCH,
        })

    session.subscribe(collect)
    session.start(selection)
    scheduler.advance(source.duration)
    session.stop()

    matches = sum(1 for r in records if r["match"])
    match_rate = matches / len(records) if records else 0.0

    if json_output:
        print(json.dumps({
            "file": str(input_file),
            "notes": [n.name for n in selection.ordered_notes()],
            "tolerance_hz": config.tolerance_hz,
            "detections": len(records),
            "matches": matches,
            "match_rate": round(match_rate, 4),
            "samples": [
                {**r["sample"].to_dict(), "reference": r["reference"], "match": r["match"]}
                for r in records
            ],
        }, indent=2))
        return

    if not records:
        console.print("[yellow]No pitch detected in the recording[/yellow]")
        return

    table = Table(title=f"Practice Summary: {input_file.name}")
    table.add_column("Note", style="cyan")
    table.add_column("Detections", justify="right")
    table.add_column("Matches", justify="right")
    table.add_column("Mean offset (Hz)", justify="right")

    for note in catalog:
        hits = [r for r in records if r["sample"].matched_note == note.name]
        if not hits:
            continue
        offset = sum(r["sample"].frequency - note.frequency for r in hits) / len(hits)
        table.add_row(
            note.name,
            str(len(hits)),
            str(sum(1 for r in hits if r["match"])),
            f"{offset:+.2f}",
        )

    console.print(table)
    color = "green" if match_rate >= 0.5 else "yellow"
    console.print(
        f"[{color}]Matched {matches}/{len(records)} detections ({match_rate:.0%}) "
        f"within {config.tolerance_hz:g} Hz[/{color}]"
    )


@app.command()
def tones(
    output_dir: Path = typer.Argument(..., help="Directory for the WAV files"),
    duration: float = typer.Option(
        2.0, "-d", "--duration", help="Tone length in seconds"
    ),
    sample_rate: int = typer.Option(
        44100, "--sr", help="Sample rate"
    ),
):
    """Write a reference tone WAV for every catalog note."""
    from .core import default_catalog
    from .analysis import write_reference_tones

    if duration <= 0:
        console.print("[red]Error: duration must be positive[/red]")
        raise typer.Exit(1)

    paths = write_reference_tones(default_catalog(), output_dir, duration, sample_rate)
    for path in paths:
        console.print(f"  [green]Wrote[/green] {path}")
    console.print(f"[bold]{len(paths)} reference tones written to {output_dir}[/bold]")


if __name__ == "__main__":
    app()
