"""Tests for the command-line interface."""

import json

import pytest

from shortlinks.cli import build_parser, main


@pytest.fixture
def store_url(tmp_path):
    return f"sqlite:///{tmp_path / 'cli.db'}"


def run_cli(capsys, *argv):
    code = main(list(argv))
    out, err = capsys.readouterr()
    return code, out, err


def error_of(err: str) -> str:
    """The JSON error document, after any log lines on stderr."""
    return json.loads(err[err.index("{"):])["error"]


class TestCLI:
    """Test shortlinks commands against a SQLite store."""

    def test_shorten_then_resolve(self, capsys, store_url):
        code, out, _ = run_cli(capsys, "--store-url", store_url, "shorten", "https://example.com/cli")
        assert code == 0
        created = json.loads(out)
        assert created["original_url"] == "https://example.com/cli"
        assert created["short_url"].endswith("/" + created["code"])

        code, out, _ = run_cli(capsys, "--store-url", store_url, "resolve", created["code"])
        assert code == 0
        assert json.loads(out) == {"code": created["code"], "original_url": "https://example.com/cli"}

    def test_resolve_counts_hit_info_does_not(self, capsys, store_url):
        _, out, _ = run_cli(capsys, "--store-url", store_url, "shorten", "https://example.com/cli")
        short = json.loads(out)["code"]

        run_cli(capsys, "--store-url", store_url, "resolve", short)
        run_cli(capsys, "--store-url", store_url, "info", short)
        code, out, _ = run_cli(capsys, "--store-url", store_url, "info", short)

        assert code == 0
        assert json.loads(out)["hit_count"] == 1

    def test_codes_continue_across_runs(self, capsys, store_url):
        """Each run seeds the counter from the store size, so codes never repeat."""
        codes = set()
        for i in range(3):
            _, out, _ = run_cli(capsys, "--store-url", store_url, "shorten", f"https://example.com/{i}")
            codes.add(json.loads(out)["code"])

        assert len(codes) == 3

    def test_list_and_size(self, capsys, store_url):
        for i in range(3):
            run_cli(capsys, "--store-url", store_url, "shorten", f"https://example.com/{i}")

        code, out, _ = run_cli(capsys, "--store-url", store_url, "list", "--limit", "2")
        assert code == 0
        listing = json.loads(out)
        assert listing["count"] == 2
        assert listing["links"][0]["original_url"] == "https://example.com/2"

        code, out, _ = run_cli(capsys, "--store-url", store_url, "size")
        assert code == 0
        assert json.loads(out) == {"size": 3}

    def test_invalid_url(self, capsys, store_url):
        code, out, err = run_cli(capsys, "--store-url", store_url, "shorten", "not-a-valid-url")

        assert code == 1
        assert out == ""
        assert "valid URL" in error_of(err)

    def test_unknown_code(self, capsys, store_url):
        code, out, err = run_cli(capsys, "--store-url", store_url, "resolve", "nope00")

        assert code == 1
        assert out == ""
        assert error_of(err) == "Short code 'nope00' not found"

    def test_info_unknown_code(self, capsys, store_url):
        code, _, err = run_cli(capsys, "--store-url", store_url, "info", "nope00")

        assert code == 1
        assert "not found" in error_of(err)

    def test_unsupported_store(self, capsys):
        code, _, err = run_cli(capsys, "--store-url", "mysql://localhost/links", "size")

        assert code == 1
        assert "Unsupported store URL scheme" in error_of(err)

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    @pytest.mark.parametrize("limit", ["0", "-3", "many"])
    def test_list_rejects_bad_limit(self, capsys, limit):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["list", "--limit", limit])

        assert exc_info.value.code == 2
        assert "--limit" in capsys.readouterr().err
