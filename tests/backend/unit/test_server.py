from coveytown.backend import server
from coveytown.backend.config import BackendSettings


SETTINGS = BackendSettings(server_salt="salt", host="127.0.0.1", port=8081, log_level="INFO")


def test_parse_args_defaults_to_settings() -> None:
    args = server.parse_args(SETTINGS, [])

    assert args.host == "127.0.0.1"
    assert args.port == 8081
    assert args.log_level == "INFO"


def test_parse_args_overrides_settings() -> None:
    args = server.parse_args(SETTINGS, ["--host", "0.0.0.0", "--port", "9000", "--log-level", "debug"])

    assert args.host == "0.0.0.0"
    assert args.port == 9000
    assert args.log_level == "DEBUG"


def test_main_runs_uvicorn_with_parsed_options(monkeypatch) -> None:
    calls: list[dict] = []
    monkeypatch.setattr(server, "load_settings", lambda: SETTINGS)
    monkeypatch.setattr(server, "configure_logging", lambda level: None)
    monkeypatch.setattr(server.uvicorn, "run", lambda app, **kwargs: calls.append(kwargs))

    exit_code = server.main(["--port", "9100"])

    assert exit_code == 0
    assert calls == [{"host": "127.0.0.1", "port": 9100, "log_level": "info"}]
