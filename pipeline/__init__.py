from .ocr_adapter import OCREngine, OCRError, OCRInputError, OCRTimeoutError, OCRUnavailableError, run_ocr
from .record_store import RecordStore, RecordStoreError
from .screenshot_pipeline import Recognition, ScreenshotPipeline
from .settings import Settings, load_settings

__all__ = [
    "OCREngine",
    "OCRError",
    "OCRInputError",
    "OCRTimeoutError",
    "OCRUnavailableError",
    "run_ocr",
    "RecordStore",
    "RecordStoreError",
    "Recognition",
    "ScreenshotPipeline",
    "Settings",
    "load_settings",
]
