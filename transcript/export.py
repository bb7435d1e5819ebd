"""Image export hand-off.

Rasterising the rendered phone screen is done by an external exporter. This
module only suggests the file name, calls the exporter and reports the
outcome; the conversation state is never touched.
"""

import logging
import re
from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Optional

from pydantic import BaseModel

logger = logging.getLogger(__name__)


DEFAULT_EXPORT_SLUG = "whatsapp-chat"
DEFAULT_EXPORT_EXTENSION = "png"


class ImageExporter(ABC):
    """Renders a visual root to an image file."""

    @abstractmethod
    def export(self, visual_root: Any, filename: str) -> None:
        """Render the visual root to an image file.

        Args:
            visual_root: Opaque handle to the rendered phone screen.
            filename: Suggested file name.

        Raises:
            Exception: Any failure to produce the image.
        """
        pass


class ExportResult(BaseModel):
    """Outcome of an export request, used only for user feedback.

    Args:
        success: Whether the exporter finished without error.
        filename: File name handed to the exporter.
        error: Error description when the export failed.
    """

    success: bool
    filename: str
    error: Optional[str] = None


def slugify(text: str) -> str:
    """Turn a chat title into a file-name friendly slug."""
    slug = re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")
    return slug or DEFAULT_EXPORT_SLUG


def suggest_export_filename(
    slug: str = DEFAULT_EXPORT_SLUG,
    ext: str = DEFAULT_EXPORT_EXTENSION,
    today: Optional[date] = None,
) -> str:
    """Build the suggested export file name ``<slug>-<YYYY-MM-DD>.<ext>``.

    Args:
        slug: File name prefix.
        ext: File extension without the dot.
        today: Date to stamp (defaults to today).

    Returns:
        The suggested file name.
    """
    stamp = (today or date.today()).isoformat()
    return f"{slug}-{stamp}.{ext.lstrip('.')}"


def export_image(
    exporter: ImageExporter,
    visual_root: Any,
    slug: str = DEFAULT_EXPORT_SLUG,
    ext: str = DEFAULT_EXPORT_EXTENSION,
    today: Optional[date] = None,
) -> ExportResult:
    """Ask the exporter to render the visual root and report the outcome.

    Args:
        exporter: The external image exporter.
        visual_root: Opaque handle to the rendered phone screen.
        slug: File name prefix.
        ext: File extension.
        today: Date to stamp into the file name.

    Returns:
        ExportResult describing success or failure.
    """
    filename = suggest_export_filename(slug, ext, today)
    try:
        exporter.export(visual_root, filename)
    except Exception as e:
        logger.error(f"Error exporting image {filename}: {e}", exc_info=True)
        return ExportResult(success=False, filename=filename, error=str(e))

    logger.info(f"Exported conversation image {filename}")
    return ExportResult(success=True, filename=filename)
