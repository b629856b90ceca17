"""Sequential executor for md-to-pdf runs over explicit input paths."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Sequence

from .config import Config
from .converter import MarkdownInput, convert
from .core.files import is_md_file


class ConversionStatus(Enum):
    """Outcome status for a single input."""

    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class InputResult:
    """What happened to one requested input."""

    source: Path
    status: ConversionStatus
    output_path: Optional[Path] = None
    reason: Optional[str] = None
    error: Optional[Exception] = None


@dataclass(frozen=True)
class ExecutionSummary:
    """Aggregated results for an md-to-pdf run."""

    requested: tuple[Path, ...]
    results: tuple[InputResult, ...]

    @property
    def success_count(self) -> int:
        return self._count(ConversionStatus.SUCCESS)

    @property
    def skipped_count(self) -> int:
        return self._count(ConversionStatus.SKIPPED)

    @property
    def failure_count(self) -> int:
        return self._count(ConversionStatus.FAILED)

    @property
    def exit_code(self) -> int:
        return 1 if self.failure_count else 0

    def _count(self, status: ConversionStatus) -> int:
        return sum(1 for result in self.results if result.status is status)


def run_conversion(
    inputs: Sequence[Path],
    *,
    config: Config,
    overrides: Optional[Mapping[str, Any]] = None,
    logger: logging.Logger,
) -> ExecutionSummary:
    """Convert ``inputs`` one after another and summarise the outcome.

    A failing file is logged and recorded; the remaining files are still
    converted.
    """

    requested = tuple(_normalize_inputs(inputs))
    logger.info(
        "Starting md-to-pdf run",
        extra={
            "input_count": len(requested),
            "markdown_parser": config.markdown_parser.value,
            "as_html": config.as_html,
        },
    )

    results: list[InputResult] = []
    for source in requested:
        if not is_md_file(source.name):
            results.append(
                InputResult(
                    source=source,
                    status=ConversionStatus.SKIPPED,
                    reason="Not a Markdown file.",
                )
            )
            logger.info(
                "Skipped non-Markdown input", extra={"source": str(source)}
            )
            continue

        try:
            outcome = convert(
                MarkdownInput(path=source),
                config=config,
                overrides=overrides,
            )
        except Exception as exc:
            results.append(
                InputResult(
                    source=source,
                    status=ConversionStatus.FAILED,
                    reason=str(exc),
                    error=exc,
                )
            )
            logger.error(
                "Failed to convert document",
                exc_info=exc,
                extra={"source": str(source), "reason": str(exc)},
            )
            continue

        results.append(
            InputResult(
                source=source,
                status=ConversionStatus.SUCCESS,
                output_path=outcome.output_path,
            )
        )

    summary = ExecutionSummary(requested=requested, results=tuple(results))
    logger.info(
        "Completed md-to-pdf run",
        extra={
            "success_count": summary.success_count,
            "skipped_count": summary.skipped_count,
            "failure_count": summary.failure_count,
        },
    )
    return summary


def _normalize_inputs(inputs: Sequence[Path]) -> Iterable[Path]:
    seen: set[Path] = set()
    for raw in inputs:
        path = Path(raw).expanduser().resolve(strict=False)
        if path not in seen:
            seen.add(path)
            yield path


__all__ = [
    "ConversionStatus",
    "ExecutionSummary",
    "InputResult",
    "run_conversion",
]
