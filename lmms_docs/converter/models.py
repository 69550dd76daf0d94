"""Result types shared by the markup converters."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

Stage = tuple[str, "cabc.Callable[[str], str]"]


class ConversionError(RuntimeError):
    """Raised inside a converter when a transform stage fails.

    Attributes
    ----------
    stage : str
        Name of the transform that failed (``"toctree"``, ``"math"``...).
    """

    def __init__(self, stage: str, cause: BaseException) -> None:
        super().__init__(f"{stage} conversion failed: {cause}")
        self.stage = stage
        self.__cause__ = cause


@dc.dataclass(slots=True, frozen=True)
class ConversionResult:
    """Converted text, or the error that prevented conversion.

    Exactly one of ``text`` and ``error`` is meaningful: a failed conversion
    carries ``text=None``. Callers pick the fallback explicitly through
    :meth:`text_or`.
    """

    text: str | None
    error: ConversionError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.text is not None

    def text_or(self, fallback: str) -> str:
        """Return the converted text, or ``fallback`` when conversion failed."""
        if self.error is None and self.text is not None:
            return self.text
        return fallback


def run_stages(source: str, stages: cabc.Iterable[Stage]) -> ConversionResult:
    """Thread ``source`` through named ``stages``, stopping at the first failure."""
    text = source
    for name, stage in stages:
        try:
            text = stage(text)
        except Exception as exc:  # noqa: BLE001 - reported as a result
            return ConversionResult(text=None, error=ConversionError(name, exc))
    return ConversionResult(text=text)


__all__ = ["ConversionError", "ConversionResult", "Stage", "run_stages"]
