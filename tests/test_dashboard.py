"""Tests for the cpuview command line entry point."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from conftest import FakeMetricsSource
from cpuview.dashboard import CLEAR_SCREEN, build_parser, main


class TestParser:
    def test_defaults(self) -> None:
        args = build_parser().parse_args([])
        assert args.watch is False
        assert args.rate == 2

    def test_flags(self) -> None:
        args = build_parser().parse_args(["--watch", "--rate", "7"])
        assert args.watch is True
        assert args.rate == 7


class TestInvalidRate:
    @pytest.mark.parametrize("rate", ["0", "11"])
    def test_rejected_before_sampling(
        self,
        rate: str,
        fake_source: FakeMetricsSource,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        with pytest.raises(SystemExit) as exc:
            main(["--rate", rate], source=fake_source)
        assert exc.value.code == 1
        captured = capsys.readouterr()
        assert f"cpuview: invalid refresh rate: {rate}" in captured.err
        assert captured.out == ""
        assert fake_source.samples == []


class TestSnapshotMode:
    def test_prints_panel_once(
        self, fake_source: FakeMetricsSource, capsys: pytest.CaptureFixture[str]
    ) -> None:
        main([], source=fake_source)
        out = capsys.readouterr().out
        assert CLEAR_SCREEN not in out
        assert "Intel Core i7-9700K" in out
        assert "3600MHz" in out
        assert "Core 0" in out and "Core 1" in out
        assert "Thread 1" in out
        assert len(fake_source.samples) == 1

    def test_metrics_failure_is_fatal(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with pytest.raises(SystemExit) as exc:
            main([], source=FakeMetricsSource(fail_topology=True))
        assert exc.value.code == 1
        captured = capsys.readouterr()
        assert "cpuview: failed to fetch CPU info" in captured.err
        assert captured.out == ""


class TestWatchMode:
    @patch("cpuview.dashboard.time.sleep")
    def test_clears_and_redraws(
        self,
        mock_sleep: MagicMock,
        fake_source: FakeMetricsSource,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        mock_sleep.side_effect = [None, KeyboardInterrupt]
        main(["--watch", "--rate", "3"], source=fake_source)
        out = capsys.readouterr().out
        assert out.startswith(CLEAR_SCREEN)
        assert out.count(CLEAR_SCREEN) == 2
        assert out.count("Intel Core i7-9700K") == 2
        assert mock_sleep.call_count == 2
        mock_sleep.assert_called_with(3)
        assert len(fake_source.samples) == 2

    @patch("cpuview.dashboard.time.sleep")
    def test_sampling_failure_stops_loop(
        self, mock_sleep: MagicMock, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with pytest.raises(SystemExit) as exc:
            main(["--watch"], source=FakeMetricsSource(fail_sampling=True))
        assert exc.value.code == 1
        assert "error fetching CPU percentages" in capsys.readouterr().err
        mock_sleep.assert_not_called()


@patch("cpuview.dashboard.PsutilMetricsSource")
def test_uses_local_machine_by_default(
    mock_cls: MagicMock, capsys: pytest.CaptureFixture[str]
) -> None:
    mock_cls.return_value = FakeMetricsSource()
    main([])
    mock_cls.assert_called_once_with()
    assert "Core 1" in capsys.readouterr().out
