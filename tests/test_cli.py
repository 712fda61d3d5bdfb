# ==============================================
# Tests for CLI
# ==============================================

import signal

import pytest

from heapstats.cli import build_config, get_parser, main
from heapstats.config import AppConfig


class TestBuildConfig:
    """Tests for command-line overrides."""

    def test_overrides(self):
        args = get_parser().parse_args([
            "heap.json", "--output-dir", "out", "--top-strings", "3", "--top-types", "2",
            "--log-level", "WARNING",
        ])

        config = build_config(args, AppConfig())

        assert config.report.output_dir == "out"
        assert config.ranking.top_strings == 3
        assert config.ranking.top_types == 2
        assert config.log_level == "WARNING"

    def test_no_overrides_keeps_base(self):
        base = AppConfig()
        args = get_parser().parse_args(["heap.json"])

        config = build_config(args, base)

        assert config == base

    def test_positional_paths(self):
        args = get_parser().parse_args(["heap.json", "types.json", "srv*c:\\symbols"])

        assert args.dump_path == "heap.json"
        assert args.resolver_path == "types.json"
        assert args.symbol_path == "srv*c:\\symbols"


class TestMain:
    """Tests for the entry point."""

    def test_no_arguments_prints_usage(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main([])

        assert exc.value.code == 2
        assert "usage" in capsys.readouterr().err

    def test_missing_dump(self, tmp_path, capsys):
        code = main([str(tmp_path / "missing.json"), "--output-dir", str(tmp_path / "out")])

        assert code == 2
        out = capsys.readouterr().out
        assert "usage" in out
        assert "doesn't exist" in out
        assert not (tmp_path / "out").exists()

    def test_invalid_top_k(self, write_snapshot, sample_snapshot, capsys):
        code = main([write_snapshot(sample_snapshot), "--top-strings", "-1"])

        assert code == 2

    def test_unloadable_snapshot(self, tmp_path, capsys):
        dump = tmp_path / "heap.json"
        dump.write_text("{}", encoding="utf-8")

        code = main([str(dump), "--output-dir", str(tmp_path / "out")])

        assert code == 1
        assert "objects" in capsys.readouterr().out
        assert not (tmp_path / "report.txt").exists()

    def test_writes_report(self, write_snapshot, sample_snapshot, tmp_path, capsys):
        out_dir = tmp_path / "out"

        code = main([write_snapshot(sample_snapshot), "--output-dir", str(out_dir), "--log-level", "ERROR"])

        assert code == 0
        assert (out_dir / "report.txt").exists()
        assert (out_dir / "StringInstance1.txt").read_text(encoding="utf-8") == "hello"
        assert (out_dir / "StringInstance2.txt").read_text(encoding="utf-8") == "x"
        assert "✓ Report written" in capsys.readouterr().out

    def test_restores_sigint_handler(self, write_snapshot, sample_snapshot, tmp_path):
        before = signal.getsignal(signal.SIGINT)

        main([write_snapshot(sample_snapshot), "--output-dir", str(tmp_path / "out")])

        assert signal.getsignal(signal.SIGINT) is before
