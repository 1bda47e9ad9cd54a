from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path

from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont

logger = logging.getLogger(__name__)

_UNICODE_FONT_NAME = "SedationChartUnicode"
_FALLBACK_FONT_NAME = "Helvetica"


def _candidate_font_paths() -> list[Path]:
    env_font = os.getenv("SEDATIONCHART_PDF_FONT")
    paths: list[Path] = []
    if env_font:
        paths.append(Path(env_font))

    paths.extend(
        [
            # Windows
            Path("C:/Windows/Fonts/arial.ttf"),
            Path("C:/Windows/Fonts/segoeui.ttf"),
            # macOS
            Path("/Library/Fonts/Arial.ttf"),
            Path("/System/Library/Fonts/Supplemental/Arial.ttf"),
            # Linux
            Path("/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"),
            Path("/usr/share/fonts/dejavu/DejaVuSans.ttf"),
            Path("/usr/share/fonts/truetype/liberation2/LiberationSans-Regular.ttf"),
        ]
    )
    return paths


@lru_cache(maxsize=1)
def get_pdf_font_name() -> str:
    """Registered TTF font when one is available, else the built-in Helvetica."""
    if _UNICODE_FONT_NAME in pdfmetrics.getRegisteredFontNames():
        return _UNICODE_FONT_NAME

    for font_path in _candidate_font_paths():
        if not font_path.exists():
            continue
        try:
            pdfmetrics.registerFont(TTFont(_UNICODE_FONT_NAME, str(font_path)))
            return _UNICODE_FONT_NAME
        except Exception:  # noqa: BLE001
            logger.warning("Failed to register PDF font %s", font_path, exc_info=True)
            continue

    logger.info("No TTF font found for PDF export; using %s", _FALLBACK_FONT_NAME)
    return _FALLBACK_FONT_NAME
