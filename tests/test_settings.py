"""Config loading: defaults, profile overlay, accessors."""

from omnioracle.config import Settings, get_settings, load_config


def test_defaults_without_config(tmp_path):
    s = get_settings(config_dir=tmp_path)
    assert s.db_path == "data/omnioracle.duckdb"
    assert s.impact_coefficient == 0.2
    assert s.oracle_timeout_sec == 10.0
    assert s.starting_balance == 2500.0
    assert s.oracle_seed is None
    assert s.seed_markets is True


def test_profile_deep_merges_over_default(tmp_path):
    (tmp_path / "default.toml").write_text(
        '[oracle]\ntimeout_sec = 10.0\nsuccess_rate = 0.95\n\n[logging]\nlevel = "INFO"\n'
    )
    (tmp_path / "fast.toml").write_text('[oracle]\ntimeout_sec = 2\nseed = 3\n\n[logging]\nlevel = "debug"\n')
    raw = load_config("fast", tmp_path)
    assert raw["oracle"] == {"timeout_sec": 2, "success_rate": 0.95, "seed": 3}
    s = Settings.from_dict(raw)
    assert s.oracle_timeout_sec == 2.0
    assert s.oracle_seed == 3
    assert s.logging_level == "DEBUG"


def test_missing_profile_keeps_default(tmp_path):
    (tmp_path / "default.toml").write_text("[amm]\ndefault_liquidity = 250.0\n")
    assert get_settings("nope", tmp_path).default_liquidity == 250.0
