"""
Test suite for the command-line interface.
"""

import pytest
from solders.keypair import Keypair

from walletsend import cli
from walletsend.config import Cluster
from walletsend.wallet.keypair import save_keypair


@pytest.fixture(autouse=True)
def no_logging_setup(monkeypatch):
    monkeypatch.setattr(cli, "setup_logging", lambda *args, **kwargs: None)


@pytest.fixture
def keypair_file(tmp_path):
    keypair = Keypair()
    path = tmp_path / "wallet.json"
    save_keypair(keypair, str(path))
    return keypair, str(path)


# ============================================================================
# Test Argument Parsing
# ============================================================================

class TestParser:
    """Tests for argument parsing and config overlay."""

    def test_send_arguments(self):
        args = cli.create_parser().parse_args([
            "send", "--cluster", "testnet", "--amount", "5000",
            "--recipient", "6xEeDTksyAhBz7QBgzPmYxJN2zbmT7twx5rr1ejnaona",
        ])

        assert args.command == "send"
        assert args.amount == 5000
        assert args.cluster == "testnet"
        assert args.reason is None

    def test_build_config_overrides(self):
        args = cli.create_parser().parse_args([
            "blockhash", "--cluster", "localnet", "--rpc-url", "http://node:8899",
            "--log-level", "DEBUG", "--log-json",
        ])

        config = cli.build_config(args)

        assert config.cluster == Cluster.LOCALNET
        assert config.endpoint_url == "http://node:8899"
        assert config.log_level == "DEBUG"
        assert config.log_json is True

    def test_invalid_amount_type(self):
        with pytest.raises(SystemExit):
            cli.create_parser().parse_args(["send", "--amount", "lots"])


# ============================================================================
# Test Commands
# ============================================================================

class TestMain:
    """Tests for the main entry point."""

    def test_no_command_prints_help(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.main([])

        assert exc_info.value.code == 1
        assert "usage" in capsys.readouterr().out

    def test_address_command(self, keypair_file, capsys):
        keypair, path = keypair_file

        with pytest.raises(SystemExit) as exc_info:
            cli.main(["address", "--keypair", path, "--rpc-url", "http://rpc.test"])

        assert exc_info.value.code == 0
        assert str(keypair.pubkey()) in capsys.readouterr().out

    def test_missing_keypair_file(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["address", "--keypair", str(tmp_path / "missing.json")])

        assert exc_info.value.code == 2
        assert "Keypair file not found" in capsys.readouterr().out

    def test_invalid_recipient_reports_failure(self, keypair_file, capsys):
        _, path = keypair_file

        with pytest.raises(SystemExit) as exc_info:
            cli.main([
                "send", "--keypair", path, "--rpc-url", "http://rpc.test",
                "--recipient", "not-an-address",
            ])

        assert exc_info.value.code == 1
        assert "Invalid address" in capsys.readouterr().out

    def test_zero_amount_is_reported_as_given(self, keypair_file, capsys):
        _, path = keypair_file

        with pytest.raises(SystemExit) as exc_info:
            cli.main(["send", "--keypair", path, "--rpc-url", "http://rpc.test", "--amount", "0"])

        out = capsys.readouterr().out
        assert exc_info.value.code == 1
        assert "Amount: 0 lamports" in out
        assert "Invalid amount" in out

    def test_invalid_environment_config(self, monkeypatch, capsys):
        monkeypatch.setenv("WALLETSEND_CLUSTER", "foo")

        with pytest.raises(SystemExit) as exc_info:
            cli.main(["blockhash"])

        assert exc_info.value.code == 2
        assert "Configuration error" in capsys.readouterr().out
