"""
pipeline.ocr_adapter — OCR collaborator with per-stage timeouts.

Provides two ways of obtaining screenshot text:

1. **Plain-text file** — a pre-existing ``.txt`` transcription is read
   directly (useful for re-parsing and for tests).
2. **PaddleOCR engine** — the image is upscaled if small, converted to
   BGR and passed to PaddleOCR.

The engine is slow to load and can hang, so loading and recognition each
run under an explicit timeout.  Expiry raises :class:`OCRTimeoutError`
and tears the engine instance down so the next attempt starts fresh.
Languages are tried in order (Chinese first, then English), mirroring
the usual ``chi_sim`` → ``eng`` fallback.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

import cv2
import numpy as np
from PIL import Image

from .settings import OCRSettings

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Optional PaddleOCR dependency
# ---------------------------------------------------------------------------

try:
    from paddleocr import PaddleOCR  # type: ignore
except Exception:
    PaddleOCR = None


class OCRError(Exception):
    """Recognition failed; the caller may retry with a fresh engine."""

    retryable = True


class OCRUnavailableError(OCRError):
    """No OCR engine is installed."""

    retryable = False


class OCRInputError(OCRError):
    """The image could not be opened or decoded."""

    retryable = False


class OCRTimeoutError(OCRError):
    def __init__(self, stage: str, timeout: float):
        super().__init__(f"OCR stage '{stage}' timed out after {timeout:g}s")
        self.stage = stage
        self.timeout = timeout


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _run_with_timeout(fn: Callable[[], Any], timeout: float, stage: str) -> Any:
    # A stuck worker thread cannot be killed; it is abandoned and the
    # engine it was using is discarded by the caller.
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"ocr-{stage}")
    future = executor.submit(fn)
    try:
        return future.result(timeout=timeout)
    except FutureTimeoutError:
        raise OCRTimeoutError(stage, timeout) from None
    finally:
        executor.shutdown(wait=False)


def _paddle_factory(lang: str) -> Any:
    if PaddleOCR is None:
        raise OCRUnavailableError("paddleocr is not installed; install the 'ocr' extra or supply a .txt file")
    return PaddleOCR(use_angle_cls=True, lang=lang)


def load_image_rgb(image_path: Union[str, Path]) -> np.ndarray:
    """Load image as RGB uint8.  Unreadable files raise :class:`OCRInputError`."""
    # UnidentifiedImageError is an OSError subclass.
    try:
        with Image.open(image_path) as src:
            img = src.convert("RGB")
    except OSError as exc:
        raise OCRInputError(f"Cannot read image {image_path}: {exc}") from exc
    return np.array(img, dtype=np.uint8)


def prepare_image(rgb: np.ndarray, min_height: int) -> np.ndarray:
    """Upscale short screenshots and convert to the BGR layout PaddleOCR expects."""
    h, w = rgb.shape[:2]
    if 0 < h < min_height:
        scale = min_height / h
        rgb = cv2.resize(rgb, (int(round(w * scale)), min_height), interpolation=cv2.INTER_CUBIC)
    return cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR)


def collect_lines(result: Any) -> List[str]:
    """Flatten a PaddleOCR result into text lines.

    Accepts both the page/[box, (text, conf)] list layout and the
    per-page mapping layout carrying ``rec_texts``.
    """
    lines: List[str] = []
    for page in result or []:
        if not page:
            continue
        if hasattr(page, "get") and page.get("rec_texts") is not None:
            lines.extend(str(t) for t in page["rec_texts"])
            continue
        for item in page:
            _box, (text, _conf) = item
            lines.append(str(text))
    return lines


# ---------------------------------------------------------------------------
# Engine wrapper
# ---------------------------------------------------------------------------

class OCREngine:
    """
    Lazily loaded, timeout-bounded OCR engine.

    Usage:
        engine = OCREngine(settings.ocr)
        lines = engine.recognize(load_image_rgb("punch.png"))
    """

    def __init__(
        self,
        settings: Optional[OCRSettings] = None,
        engine_factory: Callable[[str], Any] = _paddle_factory,
    ):
        self.settings = settings or OCRSettings()
        self._factory = engine_factory
        self._engine: Any = None
        self.language: Optional[str] = None

    @property
    def loaded(self) -> bool:
        return self._engine is not None

    def load(self) -> Any:
        if self._engine is not None:
            return self._engine

        last_error: Optional[Exception] = None
        for lang in self.settings.languages:
            try:
                engine = _run_with_timeout(
                    lambda: self._factory(lang),
                    self.settings.engine_load_timeout,
                    f"engine_load:{lang}",
                )
            except OCRError:
                raise
            except Exception as exc:
                logger.warning("OCR language '%s' failed to load (%s); trying next.", lang, exc)
                last_error = exc
                continue
            logger.info("OCR engine loaded with language '%s'.", lang)
            self._engine = engine
            self.language = lang
            return engine

        raise OCRError(f"No OCR language could be loaded: {last_error}")

    def teardown(self) -> None:
        if self._engine is not None:
            logger.info("Discarding OCR engine instance.")
        self._engine = None
        self.language = None

    def recognize(self, rgb: np.ndarray) -> List[str]:
        engine = self.load()
        bgr = prepare_image(rgb, self.settings.upscale_min_height)
        try:
            result = _run_with_timeout(
                lambda: engine.ocr(bgr),
                self.settings.recognition_timeout,
                "recognition",
            )
        except OCRTimeoutError as exc:
            logger.warning("%s; engine will be rebuilt on next use.", exc)
            self.teardown()
            raise
        except Exception as exc:
            self.teardown()
            raise OCRError(f"OCR recognition failed: {exc}") from exc
        return collect_lines(result)[: self.settings.max_lines]


# ---------------------------------------------------------------------------
# Text-file reader
# ---------------------------------------------------------------------------

def read_txt_ocr(txt_path: Union[str, Path], max_lines: int = 300) -> List[str]:
    """Read a plain-text OCR transcription, skipping blank lines."""
    p = Path(txt_path)
    if not p.exists():
        return []
    lines: List[str] = []
    for ln in p.read_text(encoding="utf-8", errors="ignore").splitlines():
        ln = ln.strip()
        if ln:
            lines.append(ln)
        if len(lines) >= max_lines:
            break
    return lines


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def run_ocr(
    image_path: Optional[Union[str, Path]] = None,
    txt_path: Optional[Union[str, Path]] = None,
    engine: Optional[OCREngine] = None,
) -> Dict[str, Any]:
    """Obtain screenshot text and return ``{"engine", "lines", "text"}``.

    *txt_path* wins when given; otherwise *image_path* is recognised by
    *engine* (a default :class:`OCREngine` if omitted).
    """
    if txt_path is not None:
        lines = read_txt_ocr(txt_path)
        return {"engine": "txt", "lines": lines, "text": "\n".join(lines)}

    if image_path is None:
        raise ValueError("run_ocr needs an image_path or a txt_path")

    eng = engine or OCREngine()
    lines = eng.recognize(load_image_rgb(image_path))
    return {"engine": "paddleocr", "lines": lines, "text": "\n".join(lines)}
