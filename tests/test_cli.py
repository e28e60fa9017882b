"""
Tests for the pullfinder command line.
"""
from unittest.mock import MagicMock

import pytest
import requests

import run
from tests.fixtures.install import GENSHIN_URL, embed


def _fake_api(monkeypatch, payload):
    response = MagicMock(status_code=200)
    response.json.return_value = payload
    fake_get = MagicMock(return_value=response)
    monkeypatch.setattr(requests, "get", fake_get)
    return fake_get


class TestArguments:

    def test_missing_argument(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            run.main([])
        assert excinfo.value.code == 2

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            run.main(["--version"])
        assert excinfo.value.code == 0
        assert capsys.readouterr().out.startswith("pullfinder ")

    @pytest.mark.parametrize("value", ["0", "-1", "soon"])
    def test_timeout_must_be_positive(self, tmp_path, capsys, value):
        with pytest.raises(SystemExit) as excinfo:
            run.main([str(tmp_path), "--timeout", value])
        assert excinfo.value.code == 2
        assert "--timeout" in capsys.readouterr().err

    def test_path_does_not_exist(self, tmp_path, capsys):
        assert run.main([str(tmp_path / "nope")]) == 1
        assert "does not exist" in capsys.readouterr().out


class TestMain:

    def test_no_validate_prints_url(self, genshin_install, capsys):
        assert run.main([str(genshin_install.root), "--no-validate"]) == 0
        assert capsys.readouterr().out.strip() == GENSHIN_URL

    def test_all_prints_every_candidate(self, install_factory, capsys):
        install = install_factory()
        other = GENSHIN_URL.replace("authkey=abc", "authkey=other")
        install.add_cache("1.0.0.0", embed(other, GENSHIN_URL))
        assert run.main([str(install.root), "--all"]) == 0
        assert capsys.readouterr().out.split() == [other, GENSHIN_URL]

    def test_validated_url_is_canonical(self, genshin_install, monkeypatch, capsys):
        fake_get = _fake_api(monkeypatch, {"retcode": 0, "message": "OK"})

        assert run.main([str(genshin_install.root), "--timeout", "4"]) == 0

        out = capsys.readouterr().out.strip()
        assert out.startswith("https://public-operation-hk4e-sg.hoyoverse.com/gacha_info/api/getGachaLog?")
        assert "authkey=abc%2Bdef%3D%3D" in out
        assert "device_type" not in out
        fake_get.assert_called_once_with(out, timeout=4.0)

    def test_rejected_url(self, genshin_install, monkeypatch, capsys):
        _fake_api(monkeypatch, {"retcode": -101, "message": "authkey timeout"})
        assert run.main([str(genshin_install.root)]) == 1
        out = capsys.readouterr().out
        assert "Failed to find gacha URL" in out
        assert "authkey timeout" in out

    def test_unknown_game(self, tmp_path, capsys):
        assert run.main([str(tmp_path)]) == 1
        assert "GenshinImpact_Data" in capsys.readouterr().out

    def test_no_url_in_cache(self, install_factory, capsys):
        install = install_factory()
        install.add_cache("1.0.0.0", b"\x00" * 128)
        assert run.main([str(install.root), "--no-validate"]) == 1
        assert "Failed to find gacha URL" in capsys.readouterr().out


class TestConfigFile:

    def test_validation_disabled_in_config(self, genshin_install, isolated_environment, monkeypatch, capsys):
        config_dir = isolated_environment / "config"
        config_dir.mkdir()
        (config_dir / "config.yml").write_text("validation:\n  enabled: false\n", encoding="utf-8")
        fake_get = _fake_api(monkeypatch, {"retcode": 0})

        assert run.main([str(genshin_install.root)]) == 0

        assert capsys.readouterr().out.strip() == GENSHIN_URL
        fake_get.assert_not_called()

    def test_extra_profile(self, tmp_path, capsys):
        url = "https://sg-public-api.example.com/event/e20211215gacha-v2/index.html?authkey=k&game_biz=hkrpg_global"
        cache = tmp_path / "sr" / "StarRail_Data" / "webCaches" / "2.0.0.0" / "Cache" / "Cache_Data"
        cache.mkdir(parents=True)
        (cache / "data_2").write_bytes(embed(url))
        config = tmp_path / "sr.yml"
        config.write_text(
            "profiles:\n"
            "  - name: star_rail\n"
            "    data_dir: StarRail_Data\n"
            "    markers: e20211215gacha-v2\n"
            "    url_start: https://sg-public-api.example.com/\n"
            "    url_end: game_biz=hkrpg_global\n",
            encoding="utf-8",
        )

        assert run.main([str(tmp_path / "sr"), "--config", str(config)]) == 0
        assert capsys.readouterr().out.strip() == url

    def test_invalid_config(self, genshin_install, tmp_path, capsys):
        config = tmp_path / "bad.yml"
        config.write_text("validation:\n  timeout_s: -1\n", encoding="utf-8")
        assert run.main([str(genshin_install.root), "--config", str(config)]) == 1
        assert "Invalid configuration" in capsys.readouterr().err

    def test_non_positive_timeout_environment_uses_default(self, genshin_install, monkeypatch, capsys):
        monkeypatch.setenv("PULLFINDER_TIMEOUT", "-5")
        fake_get = _fake_api(monkeypatch, {"retcode": 0, "message": "OK"})

        assert run.main([str(genshin_install.root)]) == 0

        out = capsys.readouterr().out.strip()
        fake_get.assert_called_once_with(out, timeout=10.0)

    def test_unwritable_log_file(self, genshin_install, tmp_path, capsys):
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        config = tmp_path / "log.yml"
        config.write_text(f"logging:\n  file: {blocker / 'sub' / 'pullfinder.log'}\n", encoding="utf-8")

        assert run.main([str(genshin_install.root), "--config", str(config), "--no-validate"]) == 1

        assert "Invalid configuration" in capsys.readouterr().err

