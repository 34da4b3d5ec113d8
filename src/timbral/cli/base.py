from __future__ import annotations

import logging
import os
import sys
import traceback
from collections.abc import Callable, Generator
from contextlib import contextmanager
from datetime import datetime, timezone
from importlib.metadata import version
from typing import Any, TextIO

import typer

from ..global_config import LOGS_DIR

_LOGGING_CONFIGURED = False


def _get_timbral_version() -> str:
    try:
        return version("timbral")
    except Exception:  # noqa: BLE001
        return "unknown"


def configure_logging(level: int = logging.INFO) -> None:
    """Configure CLI-wide logging once.

    Sets up basic logging configuration for the CLI. Safe to call multiple
    times; only configures on first call.

    Args:
        level: Logging level (defaults to INFO).

    Side Effects:
        - Configures Python logging module globally.
        - Sets module-level flag to prevent reconfiguration.
    """
    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED:
        return

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    _LOGGING_CONFIGURED = True


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger hooked into the shared CLI configuration."""
    return logging.getLogger(name)


@contextmanager
def handle_errors(
    operation: str,
    *,
    logger: logging.Logger | None = None,
    log_file: TextIO | None = None,
) -> Generator[None, None, None]:
    """Provide consistent exception handling for CLI operations.

    Context manager that catches exceptions, logs them, displays user-friendly
    error messages, and exits with code 1. Re-raises typer.Exit to allow
    normal CLI exit flow.

    Args:
        operation: Human-readable operation name for error messages.
        logger: Logger instance. Defaults to module logger if None.
        log_file: Optional file handle to write error message and traceback.

    Raises:
        typer.Exit: Always exits with code 1 on exception (except typer.Exit
            which is re-raised).
    """
    logger = logger or get_logger(__name__)
    try:
        yield
    except typer.Exit:
        raise
    except Exception as exc:  # noqa: BLE001
        logger.exception("Error during %s", operation)
        typer.secho(f"✗ {operation} failed: {exc}", fg=typer.colors.RED)
        if log_file:
            log_file.write(f"\n✗ {operation} failed: {exc}\n")
            log_file.write(f"exception_type: {type(exc).__name__}\n")
            log_file.write(f"exception_message: {exc}\n")
            log_file.write("traceback:\n")
            log_file.write(traceback.format_exc())
            log_file.flush()
        raise typer.Exit(1) from exc


def format_result(result: Any, *, operation: str | None = None) -> str:
    """Format arbitrary result payloads into CLI-friendly text.

    Args:
        result: Result object to format. Can be dict, list, bool, str,
            or None.
        operation: Optional operation name to include in formatted output.

    Returns:
        Formatted string ready for CLI display.
    """
    op_label = operation or "Result"

    if result is None:
        return f"✓ {op_label}"

    if isinstance(result, bool):
        icon = "✓" if result else "✗"
        return f"{icon} {op_label}"

    if isinstance(result, str):
        return f"{op_label}: {result}"

    if isinstance(result, list):
        rendered_items = "\n".join(f"  • {item}" for item in result)
        return f"{op_label}:\n{rendered_items}" if rendered_items else f"{op_label}: []"

    if isinstance(result, dict):
        return _format_result_dict(result, op_label)

    return f"{op_label}: {result!r}"


class BaseCLI:
    """Utility base class for CLI command groups."""

    def __init__(self, domain: str) -> None:
        self.domain = domain
        self.logger = get_logger(__name__)

    def handle_cli_operation(
        self,
        *,
        operation: str,
        op_callable: Callable[[], Any],
        pre_message: str | None = None,
        success_message: str | None = None,
        log_module: str | None = None,
        log_method: str | None = None,
        enable_log: bool = True,
        log_context: dict[str, Any] | None = None,
    ) -> Any:
        """Run an operation with consistent logging, formatting, and errors.

        Args:
            operation: Human-readable operation name for error handling.
            op_callable: Callable that performs the operation and returns
                a result.
            pre_message: Optional message to display before operation starts.
            success_message: Optional message to display if operation succeeds
                (only shown if result is a dict with success=True).
            log_module: Module name for log filename (e.g. features).
            log_method: Method name for log filename (e.g. harmonic).
            enable_log: Whether to write to a log file (default True).
            log_context: Extra key-value pairs for metadata header.

        Returns:
            Result from op_callable.
        """
        log_file: TextIO | None = None
        use_log = enable_log and log_module is not None

        def _out(msg: str) -> None:
            typer.echo(msg)
            if log_file:
                log_file.write(msg + "\n")
                log_file.flush()

        if use_log:
            LOGS_DIR.mkdir(parents=True, exist_ok=True)
            ts = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
            parts = [ts, log_module]
            if log_method:
                parts.append(log_method)
            log_path = LOGS_DIR / f"{'_'.join(parts)}.log"
            log_file = open(log_path, "w", encoding="utf-8")  # noqa: SIM115
            header_lines = [
                "--- metadata ---",
                f"timestamp: {datetime.now(timezone.utc).isoformat()}",
                f"command: {log_module}",
                f"argv: {sys.argv}",
                f"cwd: {os.getcwd()}",
                f"timbral_version: {_get_timbral_version()}",
                f"python_version: {sys.version}",
            ]
            ctx = log_context or {}
            for k, v in ctx.items():
                header_lines.append(f"{k}: {v}")
            header_lines.append("---")
            log_file.write("\n".join(header_lines) + "\n")
            log_file.flush()

        try:
            if pre_message:
                _out(pre_message)

            with handle_errors(operation, logger=self.logger, log_file=log_file):
                result = op_callable()

            if success_message and isinstance(result, dict) and result.get("success"):
                _out(success_message)

            _out(format_result(result, operation=operation))
            return result
        finally:
            if log_file:
                log_file.close()


def parse_params(values: list[str]) -> dict[str, float]:
    """Parse repeated ``KEY=VALUE`` options into a parameter mapping.

    Raises:
        typer.BadParameter: If an entry is not ``KEY=VALUE`` or the value is not a number.
    """
    params: dict[str, float] = {}
    for raw in values:
        key, sep, value = raw.partition("=")
        if not sep or not key.strip():
            raise typer.BadParameter(f"Expected KEY=VALUE, got {raw!r}")
        try:
            params[key.strip()] = float(value)
        except ValueError as exc:
            raise typer.BadParameter(f"Value for {key.strip()!r} must be a number, got {value!r}") from exc
    return params


def _format_result_dict(result: dict[str, Any], op_label: str) -> str:
    """Format a dictionary result into CLI-friendly text.

    Formats structured result dictionaries with success status, statistics,
    messages, failures, and items into a multi-line formatted string.

    Args:
        result: Result dictionary with optional keys: success, total,
            succeeded, failed, skipped, elapsed_s, message, failures, items.
        op_label: Operation label to display.

    Returns:
        Formatted multi-line string.
    """
    icon = "✓" if result.get("success", True) else "✗"
    lines = [f"{icon} {op_label}"]

    stats_order = [
        ("total", "total"),
        ("succeeded", "succeeded"),
        ("failed", "failed"),
        ("skipped", "skipped"),
    ]
    stats = [
        f"{label}: {result[key]}"
        for key, label in stats_order
        if key in result and result[key] is not None
    ]
    if "elapsed_s" in result:
        stats.append(f"elapsed: {result['elapsed_s']:.2f}s")
    if stats:
        lines.append("  " + " | ".join(stats))

    message = result.get("message")
    if message:
        lines.append(f"  ℹ {message}")

    failures = result.get("failures") or []
    if failures:
        lines.append("  Failures:")
        for failure in failures:
            item = failure.get("item", "item")
            reason = failure.get("reason") or failure.get("error") or "Unknown error"
            lines.append(f"    • {item}: {reason}")

    items = result.get("items") or []
    if items:
        lines.append("  Items:")
        for item in items:
            if isinstance(item, dict):
                name = item.get("item") or item.get("file") or item.get("id", "item")
                status = item.get("status") or (
                    "success" if item.get("success", True) else "failed"
                )
                detail = item.get("detail") or item.get("error") or ""
                extra = f" ({detail})" if detail else ""
                lines.append(f"    • {name}: {status}{extra}")
                for line in _format_features_item_details(item) or []:
                    lines.append(f"      {line}")
            else:
                lines.append(f"    • {item}")

    return "\n".join(lines)


def _format_features_item_details(item: dict[str, Any]) -> list[str] | None:
    """Format optional feature-extraction item details for CLI display."""
    sr = item.get("sample_rate")
    num_frames = item.get("num_frames")
    feature_count = item.get("feature_count")
    fft_size = item.get("fft_size")
    stats = item.get("stats")

    if sr is None or num_frames is None or feature_count is None or fft_size is None or stats is None:
        return None

    lines = [f"sr={sr}Hz | fft={fft_size} | frames={num_frames} | features={feature_count}"]
    for row in stats:
        lines.append(
            f"{row['feature']}: mean={row['mean']:.4g} std={row['std']:.4g} "
            f"min/max={row['min']:.4g}/{row['max']:.4g}"
        )
    return lines
