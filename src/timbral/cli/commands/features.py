"""CLI command for spectral/harmonic feature extraction."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from ...global_config import (
    DEFAULT_FRAME_DURATION,
    DEFAULT_HIGH_PITCH,
    DEFAULT_HOP_DURATION,
    DEFAULT_LOW_PITCH,
    DEFAULT_PEAK_COUNT,
    RAW_AUDIO_DIR,
)
from ...pipeline.features import run_features
from ..base import BaseCLI, parse_params

def features_command(
    files: Annotated[
        list[Path],
        typer.Argument(
            help="Audio file(s) to process. If omitted, all audio files in data/raw/audio are used.",
        ),
    ] = [],
    spectral: Annotated[
        str,
        typer.Option("--features", "-f", help="Spectral feature list, e.g. 'centroid,spread,c1+c2'. Default: all."),
    ] = "all",
    harmonic: Annotated[
        str | None,
        typer.Option("--harmonic", "-H", help="Harmonic feature list, e.g. 'inh,oer,t1+t2+t3'. Disabled if not set."),
    ] = None,
    frame: Annotated[
        float,
        typer.Option("--frame", help="Frame duration in seconds."),
    ] = DEFAULT_FRAME_DURATION,
    hop: Annotated[
        float,
        typer.Option("--hop", help="Hop duration in seconds."),
    ] = DEFAULT_HOP_DURATION,
    fft_size: Annotated[
        int,
        typer.Option("--fft-size", help="FFT size. Smaller than the frame means next power of two."),
    ] = 0,
    param: Annotated[
        list[str],
        typer.Option("--param", "-p", help="Feature parameter KEY=VALUE (minLevel, noiseFrequency, rolloffPercent)."),
    ] = [],
    peaks: Annotated[
        int,
        typer.Option("--peaks", help="Number of harmonic peaks."),
    ] = DEFAULT_PEAK_COUNT,
    low_pitch: Annotated[
        float,
        typer.Option("--low-pitch", help="Lower pitch search bound (Hz)."),
    ] = DEFAULT_LOW_PITCH,
    high_pitch: Annotated[
        float,
        typer.Option("--high-pitch", help="Upper pitch search bound (Hz)."),
    ] = DEFAULT_HIGH_PITCH,
    workers: Annotated[
        int,
        typer.Option("--workers", "-w", help="Worker threads per file (1 = sequential)."),
    ] = 1,
    no_log: Annotated[
        bool,
        typer.Option("--no-log", help="Do not write a log file to logs/."),
    ] = False,
) -> None:
    """Extract per-frame features and print per-feature statistics for each file.

    Feature lists use the delimiters , + - ; : and are case-insensitive.
    Use `timbral catalog` to list known feature names.
    """
    cli = BaseCLI("features")

    audio_list = list(files) if files else None
    parameters = parse_params(list(param))

    def _run() -> dict:
        return run_features(
            audio_files=audio_list,
            raw_audio_dir=RAW_AUDIO_DIR,
            features=spectral,
            harmonic_features=harmonic,
            frame_duration=frame,
            hop_duration=hop,
            fft_size=fft_size,
            parameters=parameters,
            peak_count=peaks,
            low_pitch=low_pitch,
            high_pitch=high_pitch,
            workers=workers,
        )

    pre_message = "Extracting features for " + (
        f"{len(audio_list)} file(s)..." if audio_list else "all audio in raw folder..."
    )
    inputs_desc = str([str(p) for p in audio_list]) if audio_list else f"all audio in {RAW_AUDIO_DIR}"
    cli.handle_cli_operation(
        operation="features",
        op_callable=_run,
        pre_message=pre_message,
        log_module="features",
        log_method="harmonic" if harmonic else "spectral",
        enable_log=not no_log,
        log_context={
            "inputs": inputs_desc,
            "features": spectral,
            "harmonic": harmonic,
            "parameters": parameters,
        },
    )
