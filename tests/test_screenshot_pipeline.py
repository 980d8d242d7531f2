"""Tests for ScreenshotPipeline using text inputs and a mocked engine."""

from datetime import date
from unittest.mock import MagicMock

import pytest
from PIL import Image

from pipeline.ocr_adapter import OCREngine, OCRTimeoutError, OCRUnavailableError
from pipeline.screenshot_pipeline import MSG_CONFIRM, MSG_FAILED, MSG_READY, ScreenshotPipeline, logger

REF = date(2024, 6, 20)


def _txt(tmp_path, name, content):
    p = tmp_path / name
    p.write_text(content, encoding="utf-8")
    return p


def _png(tmp_path, name="shot.png"):
    p = tmp_path / name
    Image.new("RGB", (60, 40), color="white").save(p)
    return p


def _mock_engine(lines=None, error=None):
    engine = MagicMock(spec=OCREngine)
    if error is not None:
        engine.recognize.side_effect = error
    else:
        engine.recognize.return_value = lines
    return engine


def test_read_punch_from_text(tmp_path):
    p = _txt(tmp_path, "punch.txt", "2024年3月15日\n上班打卡 08:58\n下班打卡 19:30\n")
    rec = ScreenshotPipeline(engine=_mock_engine()).read_punch(p, is_text=True, reference_now=REF)
    assert rec.ok
    assert rec.engine == "txt"
    assert rec.message == MSG_READY
    assert rec.punch.date == "2024-03-15"
    assert (rec.punch.start_time, rec.punch.end_time) == ("08:58", "19:30")
    assert rec.warnings == []


def test_read_punch_incomplete_asks_for_confirmation(tmp_path):
    p = _txt(tmp_path, "punch.txt", "上班打卡 08:58\n")
    rec = ScreenshotPipeline(engine=_mock_engine()).read_punch(p, is_text=True, reference_now=REF)
    assert rec.ok
    assert rec.message == MSG_CONFIRM
    assert rec.punch.date == "2024-06-20"
    assert not rec.punch.is_valid
    assert rec.warnings


def test_read_punch_from_image(tmp_path):
    engine = _mock_engine(lines=["3月9日 星期六", "09:00", "12:00"])
    rec = ScreenshotPipeline(engine=engine).read_punch(_png(tmp_path), reference_now=REF)
    assert rec.ok
    assert rec.engine == "paddleocr"
    assert rec.punch.date == "2024-03-09"
    assert rec.punch.times == ["09:00", "12:00"]
    engine.recognize.assert_called_once()


def test_ocr_timeout_becomes_retryable_failure(tmp_path):
    engine = _mock_engine(error=OCRTimeoutError("recognition", 30))
    rec = ScreenshotPipeline(engine=engine).read_punch(_png(tmp_path), reference_now=REF)
    assert not rec.ok
    assert rec.status == "error"
    assert rec.message == MSG_FAILED
    assert rec.retryable is True
    assert "timed out" in rec.error
    assert rec.punch is None


def test_missing_engine_is_not_retryable(tmp_path):
    engine = _mock_engine(error=OCRUnavailableError("paddleocr is not installed"))
    rec = ScreenshotPipeline(engine=engine).read_punch(_png(tmp_path), reference_now=REF)
    assert rec.status == "error"
    assert rec.retryable is False


def test_batch_continues_after_failure(tmp_path):
    engine = MagicMock(spec=OCREngine)
    engine.recognize.side_effect = [
        OCRTimeoutError("recognition", 30),
        ["2024-03-15", "09:00", "18:30"],
    ]
    paths = [_png(tmp_path, "a.png"), _png(tmp_path, "b.png")]
    results = ScreenshotPipeline(engine=engine).read_punches(paths, reference_now=REF)
    assert [r.status for r in results] == ["error", "success"]
    assert results[1].punch.is_valid


STATS = "2024年3月\n9.43\n平均工时\n23 出勤天数\n8 休息天数\n"


def test_unreadable_images_do_not_stop_the_batch(tmp_path):
    corrupt = tmp_path / "corrupt.png"
    corrupt.write_bytes(b"not an image")
    engine = _mock_engine(lines=["2024-03-15", "09:00", "18:30"])
    paths = [tmp_path / "missing.png", corrupt, _png(tmp_path, "good.png")]
    results = ScreenshotPipeline(engine=engine).read_punches(paths, reference_now=REF)
    assert [r.status for r in results] == ["error", "error", "success"]
    assert results[0].message == MSG_FAILED
    assert results[0].retryable is False
    assert results[1].retryable is False
    assert results[2].punch.is_valid
    engine.recognize.assert_called_once()


def test_read_stats_missing_image_is_failure(tmp_path):
    rec = ScreenshotPipeline(engine=_mock_engine()).read_stats(tmp_path / "missing.png", reference_now=REF)
    assert rec.status == "error"
    assert rec.stats is None


def test_read_stats_uses_recognised_month(tmp_path):
    p = _txt(tmp_path, "stats.txt", STATS)
    rec = ScreenshotPipeline(engine=_mock_engine()).read_stats(p, is_text=True, reference_now=REF)
    assert rec.ok
    assert rec.stats.workdays == 21
    assert rec.stats.total_hours == pytest.approx(216.89)
    assert rec.stats.correct_avg_hours == pytest.approx(216.89 / 21)
    assert rec.stats.weekend_work_days == 2


def test_read_stats_with_explicit_month(tmp_path):
    p = _txt(tmp_path, "stats.txt", STATS)
    rec = ScreenshotPipeline(engine=_mock_engine()).read_stats(
        p, is_text=True, month=date(2024, 2, 1), reference_now=REF,
    )
    assert rec.stats.workdays == 18
    assert rec.stats.weekend_work_days == 5


def test_read_stats_without_month_falls_back_to_reference(tmp_path):
    p = _txt(tmp_path, "stats.txt", "9.5 平均工时 20 出勤天数")
    rec = ScreenshotPipeline(engine=_mock_engine()).read_stats(
        p, is_text=True, reference_now=date(2024, 3, 20),
    )
    assert (rec.stats.year, rec.stats.month) == (2024, 3)
    assert rec.stats.workdays == 21


def test_recognition_to_dict(tmp_path):
    p = _txt(tmp_path, "punch.txt", "2024-03-15 09:00 18:30")
    out = ScreenshotPipeline(engine=_mock_engine()).read_punch(p, is_text=True).to_dict()
    assert out["status"] == "success"
    assert out["punch"]["start_time"] == "09:00"
    assert out["stats"] is None


def test_pipeline_logger_does_not_propagate():
    assert logger.propagate is False
    assert len(logger.handlers) == 1
