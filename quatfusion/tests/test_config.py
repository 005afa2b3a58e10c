"""Tests for configuration loading."""

import math

import pytest

from quatfusion.core.config import (
    Config,
    FusionConfig,
    build_config,
    default_config_path,
    load_config,
)
from quatfusion.core.errors import ConfigurationError
from quatfusion.core.modes import (
    FUSION_MODES,
    DEFAULT_SLERP_POWER,
    DEFAULT_Q_VALUE,
    DEFAULT_R_VALUE,
)
from quatfusion.fusion import RtqfEstimator, FusionMode, create_strategy


class TestLoadConfig:
    """Tests for load_config."""

    def test_packaged_default(self, monkeypatch):
        """Without a path the packaged default file should be used."""
        monkeypatch.delenv("QUATFUSION_CONFIG_PATH", raising=False)
        config = load_config()

        assert default_config_path().exists()
        assert config.fusion.mode == "linear"
        assert config.fusion.q_value == pytest.approx(0.001)
        assert config.fusion.r_value == pytest.approx(0.0005)
        assert config.fusion.slerp_power == pytest.approx(0.02)

    def test_explicit_path(self, tmp_path):
        path = tmp_path / "fusion.yaml"
        path.write_text(
            "fusion:\n"
            "  mode: SLERP\n"
            "  slerp_power: 0.1\n"
            "  enable_compass: false\n"
            "calibration:\n"
            "  compass_declination_deg: 2.5\n",
            encoding="utf-8",
        )
        config = load_config(str(path))

        assert config.fusion.mode == "slerp"
        assert config.fusion.slerp_power == pytest.approx(0.1)
        assert not config.fusion.enable_compass
        assert config.calibration.compass_declination == pytest.approx(math.radians(2.5))
        assert config.validation.quaternion.norm_tolerance == pytest.approx(1e-6)

    def test_env_var(self, tmp_path, monkeypatch):
        path = tmp_path / "env.yaml"
        path.write_text("fusion:\n  q_value: 0.5\n", encoding="utf-8")
        monkeypatch.setenv("QUATFUSION_CONFIG_PATH", str(path))

        assert load_config().fusion.q_value == pytest.approx(0.5)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "nope.yaml"))

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")

        assert load_config(str(path)) == Config()


class TestBuildConfig:
    """Tests for build_config validation."""

    def test_unknown_mode(self):
        with pytest.raises(ConfigurationError):
            build_config({"fusion": {"mode": "kalman"}})

    def test_unknown_key(self):
        with pytest.raises(ConfigurationError):
            build_config({"fusion": {"gain": 0.1}})

    @pytest.mark.parametrize("fusion", [
        {"slerp_power": 1.5},
        {"slerp_power": -0.1},
        {"q_value": -1.0},
        {"r_value": -1.0},
    ])
    def test_out_of_range_gains(self, fusion):
        with pytest.raises(ConfigurationError):
            build_config({"fusion": fusion})

    def test_monitoring_section(self):
        config = build_config({"monitoring": {"window_size": 50}})

        assert config.monitoring.window_size == 50
        assert config.monitoring.log_interval_samples == 1000

    @pytest.mark.parametrize("data", [["fusion"], "linear", 3])
    def test_non_mapping_top_level(self, data):
        """A YAML list or scalar at the top level should be a configuration error."""
        with pytest.raises(ConfigurationError, match="must be a mapping"):
            build_config(data)

    @pytest.mark.parametrize("data", [
        {"fusion": "slerp"},
        {"validation": 5},
        {"validation": {"timestamp": [0.5]}},
    ])
    def test_non_mapping_section(self, data):
        with pytest.raises(ConfigurationError, match="must be a mapping"):
            build_config(data)

    def test_empty_section_uses_defaults(self):
        """A section key with no body should fall back to defaults."""
        config = build_config({"fusion": None, "monitoring": None})

        assert config == Config()

    def test_list_yaml_file(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- fusion\n- linear\n", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            load_config(str(path))


class TestModeDefaults:
    """Configuration and strategies share one set of modes and gains."""

    def test_config_defaults_match_estimator(self):
        """Default config should build the same strategy as the bare estimator."""
        from_config = RtqfEstimator.from_config(FusionConfig())
        bare = RtqfEstimator()

        assert from_config.mode is bare.mode
        assert from_config.strategy.q_value == DEFAULT_Q_VALUE == bare.strategy.q_value
        assert from_config.strategy.r_value == DEFAULT_R_VALUE == bare.strategy.r_value
        assert FusionConfig().slerp_power == DEFAULT_SLERP_POWER

    def test_modes_follow_enum(self):
        assert FUSION_MODES == tuple(mode.value for mode in FusionMode)
        assert FusionConfig().mode in FUSION_MODES

    @pytest.mark.parametrize("fusion", [
        {"mode": "kalman"},
        {"mode": "slerp", "slerp_power": 2.0},
        {"q_value": -0.5},
    ])
    def test_config_and_strategy_reject_alike(self, fusion):
        """Config validation and strategy construction should give the same error."""
        with pytest.raises(ConfigurationError) as from_config:
            build_config({"fusion": fusion})

        cfg = FusionConfig(**fusion)
        with pytest.raises(ConfigurationError) as from_strategy:
            create_strategy(cfg.mode, slerp_power=cfg.slerp_power,
                            q_value=cfg.q_value, r_value=cfg.r_value)

        assert str(from_config.value) == str(from_strategy.value)


class TestEstimatorFromConfig:
    """Tests for building an estimator from configuration."""

    def test_from_config(self):
        config = build_config({
            "fusion": {"mode": "slerp", "slerp_power": 0.3, "enable_gyro": False},
        })
        estimator = RtqfEstimator.from_config(config)

        assert estimator.mode is FusionMode.SLERP
        assert estimator.strategy.slerp_power == pytest.approx(0.3)
        assert not estimator.gyro_enabled
        assert estimator.accel_enabled

    def test_from_fusion_config(self):
        estimator = RtqfEstimator.from_config(FusionConfig(q_value=0.2, r_value=0.1))

        assert estimator.mode is FusionMode.LINEAR
        assert estimator.strategy.q_value == pytest.approx(0.2)
        assert estimator.strategy.r_value == pytest.approx(0.1)
