"""
Tests cho CLI entry point (main.py).

Test cac case:
- Build + save thanh cong -> exit 0
- Root khong phai directory -> exit 1
- Save that bai -> exit 1 (khong terminate process)
- Settings sai -> exit 1
"""

import threading

import pytest

import main as cli
from config.build_settings import BuildSettings
from services.dictionary_store import load_dictionary


@pytest.fixture(autouse=True)
def default_settings(monkeypatch):
    """Khong doc ~/.lexicon-builder/settings.json cua user."""
    monkeypatch.setattr(cli, "load_build_settings", lambda: BuildSettings())


class TestMain:
    """Test main()."""

    def test_build_and_save(self, sample_tree, tmp_path):
        out = tmp_path / "dict.txt"
        code = cli.main([str(sample_tree), "-o", str(out), "--workers", "4", "--readers", "2"])

        assert code == cli.EXIT_OK
        snapshot = load_dictionary(out)
        assert snapshot.total_word_count == 13
        assert snapshot.unique_word_count == 9

    def test_build_without_output(self, sample_tree, tmp_path):
        assert cli.main([str(sample_tree), "--workers", "2"]) == cli.EXIT_OK

    def test_bloom_strategy(self, sample_tree, tmp_path):
        out = tmp_path / "dict.txt"
        code = cli.main(
            [
                str(sample_tree),
                "-o",
                str(out),
                "--workers",
                "2",
                "--strategy",
                "bloom",
                "--expected-items",
                "1000",
                "--fp-rate",
                "0.001",
            ]
        )
        assert code == cli.EXIT_OK
        assert load_dictionary(out).unique_word_count == 9

    def test_exclude_pattern(self, sample_tree, tmp_path):
        out = tmp_path / "dict.txt"
        code = cli.main(
            [str(sample_tree), "-o", str(out), "--workers", "2", "--exclude", "sub/"]
        )
        assert code == cli.EXIT_OK
        # Chi con a.txt: hello world / hello again
        assert load_dictionary(out).total_word_count == 4

    def test_not_a_directory(self, tmp_path):
        assert cli.main([str(tmp_path / "missing")]) == cli.EXIT_FAILURE

    def test_save_failure(self, sample_tree, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        code = cli.main([str(sample_tree), "-o", str(blocker / "dict.txt"), "--workers", "2"])
        assert code == cli.EXIT_FAILURE

    def test_invalid_settings(self, sample_tree):
        assert cli.main([str(sample_tree), "--workers", "0"]) == cli.EXIT_FAILURE

    def test_runs_outside_main_thread(self, sample_tree, tmp_path):
        """Goi main() tu worker thread: khong cai SIGINT handler, van build xong."""
        out = tmp_path / "dict.txt"
        codes = []
        errors = []

        def run():
            try:
                codes.append(cli.main([str(sample_tree), "-o", str(out), "--workers", "2"]))
            except Exception as e:
                errors.append(e)

        t = threading.Thread(target=run)
        t.start()
        t.join(timeout=30)

        assert errors == []
        assert codes == [cli.EXIT_OK]
        assert load_dictionary(out).unique_word_count == 9


class TestResolveSettings:
    """CLI flags override settings."""

    def test_flags_override(self):
        args = cli.build_parser().parse_args(
            ["data", "--workers", "5", "--strategy", "bloom", "--exclude", "*.log", "--gitignore"]
        )
        settings = cli.resolve_settings(args)
        assert settings.worker_count == 5
        assert settings.membership_strategy == "bloom"
        assert settings.excluded_patterns == ["*.log"]
        assert settings.use_gitignore is True
        assert settings.skip_binary_files is False

    def test_bare_output_flag_uses_default_file(self):
        args = cli.build_parser().parse_args(["data", "-o"])
        assert args.output == "dict.txt"
        assert cli.build_parser().parse_args(["data"]).output is None
