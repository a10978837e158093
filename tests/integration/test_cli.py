import httpx
from typer.testing import CliRunner

from connectors.blocklist import BlocklistClient
from core.config import settings
from core.errors import TransportError
from core.storage.block_store import BlockRecord, BlockStore
from scripts import sync_blocklist

runner = CliRunner()


def _quiet(monkeypatch):
    monkeypatch.setattr(sync_blocklist, "configure_logging", lambda level: None)


def test_sync_command_mirrors_feed(monkeypatch, tmp_path):
    _quiet(monkeypatch)
    body = {
        "query": {
            "blocks": [
                {
                    "id": 5,
                    "timestamp": "2020-05-05T00:00:00Z",
                    "expiry": "infinity",
                    "rangestart": "198.51.100.0",
                    "rangeend": "198.51.100.255",
                }
            ]
        }
    }
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json=body))
    original_init = BlocklistClient.__init__

    def init_with_mock(self, client=None):
        original_init(self, client=httpx.AsyncClient(transport=transport))

    monkeypatch.setattr(BlocklistClient, "__init__", init_with_mock)

    db = tmp_path / "wpbl.db"
    result = runner.invoke(sync_blocklist.app, ["sync", "--db", str(db)])

    assert result.exit_code == 0, result.output
    assert "Synced 1 block entries over 1 pages" in result.output
    with BlockStore(db) as store:
        assert store.ids() == [5]


def test_sync_command_exits_non_zero_on_failure(monkeypatch, tmp_path):
    _quiet(monkeypatch)

    async def failing_run_sync(db_path):
        raise TransportError("boom")

    monkeypatch.setattr(sync_blocklist, "run_sync", failing_run_sync)
    result = runner.invoke(sync_blocklist.app, ["sync", "--db", str(tmp_path / "wpbl.db")])
    assert result.exit_code == 1


def test_checkpoint_command_prints_resume_point(monkeypatch, tmp_path):
    _quiet(monkeypatch)
    db = tmp_path / "wpbl.db"
    result = runner.invoke(sync_blocklist.app, ["checkpoint", "--db", str(db)])
    assert result.exit_code == 0
    assert result.output.strip() == "1970-01-01T00:00:00Z"

    with BlockStore(db) as store:
        store.insert(BlockRecord(1, "2021-07-01T00:00:00Z", "infinity", "0A000000", "0A0000FF"))
    result = runner.invoke(sync_blocklist.app, ["checkpoint", "--db", str(db)])
    assert result.output.strip() == "2021-07-01T00:00:00Z"


def test_db_falls_back_to_settings(monkeypatch, tmp_path):
    _quiet(monkeypatch)
    db = tmp_path / "from-env.db"
    monkeypatch.setattr(settings, "blocklist_db_path", str(db))
    result = runner.invoke(sync_blocklist.app, ["checkpoint"])
    assert result.exit_code == 0
    assert db.exists()


def test_missing_db_is_a_usage_error(monkeypatch):
    _quiet(monkeypatch)
    monkeypatch.setattr(settings, "blocklist_db_path", None)
    result = runner.invoke(sync_blocklist.app, ["checkpoint"])
    assert result.exit_code == 2


def test_sync_command_reports_undecodable_body(monkeypatch, tmp_path):
    _quiet(monkeypatch)
    transport = httpx.MockTransport(lambda request: httpx.Response(200, content=b'{"query": {"blocks": []}}\xff\xfe'))
    original_init = BlocklistClient.__init__

    def init_with_mock(self, client=None):
        original_init(self, client=httpx.AsyncClient(transport=transport))

    monkeypatch.setattr(BlocklistClient, "__init__", init_with_mock)
    result = runner.invoke(sync_blocklist.app, ["sync", "--db", str(tmp_path / "wpbl.db")])
    assert result.exit_code == 1
    assert not isinstance(result.exception, UnicodeDecodeError)
