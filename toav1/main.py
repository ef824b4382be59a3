import logging
import typer
import yaml
from pathlib import Path
from typing import Optional
from pydantic import ValidationError

from toav1.config.loader import load_config, apply_overrides
from toav1.domain.events import MoveFailed
from toav1.domain.exceptions import StartupError, TranscodeError, TranscodeInterrupted
from toav1.infrastructure.cpu import count_cpus, default_threads, effective_threads
from toav1.infrastructure.event_bus import EventBus
from toav1.infrastructure.ffmpeg import FFmpegAdapter
from toav1.infrastructure.ffprobe import FFprobeAdapter
from toav1.infrastructure.file_scanner import FileScanner
from toav1.infrastructure.logging import attach_event_log, setup_logging
from toav1.pipeline.lifecycle import FileLifecycleManager
from toav1.pipeline.orchestrator import Orchestrator

app = typer.Typer(help="to_av1 - batch SVT-AV1 transcoder (oldest file first)")


@app.command()
def transcode(
    crf: Optional[int] = typer.Option(None, "--crf", help="CRF value passed to SVT-AV1 [default: 32]"),
    preset: Optional[int] = typer.Option(None, "--preset", help="Preset value passed to SVT-AV1 [default: 4]"),
    max_height: Optional[int] = typer.Option(None, "--maxheight", help="Maximum height of output video [default: 1440]"),
    no_max_height: Optional[bool] = typer.Option(
        None,
        "--nomaxheight/--capheight",
        help="Disable (or re-enable) the maximum height filter and the height label [default: capped]"
    ),
    svtav1_params: Optional[str] = typer.Option(
        None,
        "--svtav1-params",
        help="SVT-AV1 params passed to ffmpeg [default: keyint=10s:fast-decode=2]"
    ),
    threads: Optional[int] = typer.Option(
        None,
        "--threads", "-t",
        help="Number of logical CPU cores passed to taskset [default: 70% of CPUs]"
    ),
    pattern: Optional[str] = typer.Option(None, "--pattern", help="Input video files pattern [default: *.mp4]"),
    input_dir: Optional[str] = typer.Option(None, "--dir", help="Directory scanned for videos [default: ./]"),
    processed_dir: Optional[str] = typer.Option(
        None, "--processeddir", help="Directory where processed sources are moved [default: ./_processed]"
    ),
    out_dir: Optional[str] = typer.Option(None, "--outdir", help="Directory for finished outputs [default: ./_out]"),
    temp_dir: Optional[str] = typer.Option(
        None, "--tempdir", help="Directory for the output being encoded [default: ./_temp]"
    ),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to YAML config"),
    log_path: Optional[Path] = typer.Option(None, "--log-path", help="Path to log file [default: <tempdir>/to_av1.log]"),
    debug: Optional[bool] = typer.Option(None, "--debug/--no-debug", help="Enable verbose debug logging"),
):
    """Transcode every matching file to AV1, then archive the source."""
    try:
        config = load_config(config_path)
        config = apply_overrides(config, {
            "encoder": {
                "crf": crf,
                "preset": preset,
                "max_height": max_height,
                "cap_height": None if no_max_height is None else not no_max_height,
                "svtav1_params": svtav1_params,
                "threads": threads,
            },
            "paths": {
                "pattern": pattern,
                "input_dir": input_dir,
                "processed_dir": processed_dir,
                "out_dir": out_dir,
                "temp_dir": temp_dir,
            },
            "general": {
                "log_path": str(log_path) if log_path is not None else None,
                "debug": debug,
            },
        })
    except (FileNotFoundError, ValidationError, yaml.YAMLError) as exc:
        typer.secho(f"Error: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    try:
        cpu_count = count_cpus()
        requested_threads = config.encoder.threads or default_threads(cpu_count)
        affinity_threads = effective_threads(requested_threads, cpu_count)

        lifecycle = FileLifecycleManager(config.paths)
        lifecycle.prepare()

        log_path_value = Path(config.general.log_path) if config.general.log_path else None
        logger = setup_logging(lifecycle.temp_dir, debug=config.general.debug, log_path=log_path_value)
        logger.info(
            f"to_av1 started: dir={config.paths.input_dir}, pattern={config.paths.pattern}, "
            f"out={lifecycle.out_dir}, processed={lifecycle.archive_dir}, temp={lifecycle.temp_dir}"
        )
        logger.info(
            f"Config: crf={config.encoder.crf}, preset={config.encoder.preset}, "
            f"max_height={config.encoder.max_height if config.encoder.cap_height else 'off'}, "
            f"svtav1_params={config.encoder.svtav1_params}, "
            f"threads={affinity_threads}/{cpu_count}, debug={config.general.debug}"
        )

        bus = EventBus()
        attach_event_log(bus)

        @bus.subscribe(MoveFailed)
        def _report_abandoned(event: MoveFailed):
            typer.secho(
                f"Warning: {event.job.source_path.name} abandoned at {event.stage} move: {event.error_message}",
                fg=typer.colors.YELLOW,
                err=True,
            )

        orchestrator = Orchestrator(
            config=config,
            event_bus=bus,
            file_scanner=FileScanner(config.paths.pattern),
            ffprobe_adapter=FFprobeAdapter(),
            ffmpeg_adapter=FFmpegAdapter(),
            lifecycle=lifecycle,
            threads=affinity_threads,
        )
        orchestrator.run()

    except StartupError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    except (TranscodeInterrupted, KeyboardInterrupt):
        typer.secho("Interrupted", fg=typer.colors.YELLOW, err=True)
        raise typer.Exit(code=130)

    except TranscodeError as e:
        typer.secho(str(e), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    except typer.Exit:
        raise

    except Exception as e:
        logging.getLogger(__name__).exception("Fatal error")
        typer.secho(f"Fatal Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
