"""Image sinks: where finished frames are displayed or written to disk."""

from __future__ import annotations

import abc
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import PIL.Image

from .errors import SinkError
from .renderer import PixelBuffer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SaveResult:
    path: Path
    ok: bool
    error: Optional[str] = None


def to_image(buffer: PixelBuffer) -> PIL.Image.Image:
    """Convert ``buffer`` to an RGB Pillow image."""

    return PIL.Image.fromarray(buffer.to_rgb(), mode="RGB")


def write_single_image(buffer: PixelBuffer, output_path: Path) -> None:
    """Write ``buffer`` as an RGB PNG without alpha or metadata."""

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        to_image(buffer).save(str(output_path), format="PNG")
    except (OSError, ValueError) as exc:
        raise SinkError(f"could not write {output_path}: {exc}") from exc


class ImageSink(abc.ABC):
    """Destination for frames published by the controller."""

    @abc.abstractmethod
    def present(self, buffer: PixelBuffer) -> None:
        """Display ``buffer``."""

    def write_png(self, buffer: PixelBuffer, path: Union[str, Path]) -> SaveResult:
        output_path = Path(path).expanduser()
        if not output_path.suffix:
            output_path = output_path.with_suffix(".png")
        try:
            write_single_image(buffer, output_path)
        except SinkError as exc:
            logger.error("%s", exc)
            self.report_error(str(exc))
            return SaveResult(path=output_path, ok=False, error=str(exc))
        logger.info("Saved %dx%d image to %s", buffer.width, buffer.height, output_path)
        return SaveResult(path=output_path, ok=True)

    def report_error(self, message: str) -> None:
        """Show a non-fatal error to the user."""


class PngFileSink(ImageSink):
    """Headless sink: remembers the last presented frame and writes PNG files."""

    def __init__(self) -> None:
        self.presented: Optional[PixelBuffer] = None
        self.present_count = 0
        self.errors: list[str] = []

    def present(self, buffer: PixelBuffer) -> None:
        self.presented = buffer
        self.present_count += 1

    def report_error(self, message: str) -> None:
        self.errors.append(message)
