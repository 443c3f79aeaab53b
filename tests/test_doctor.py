"""Tests for configuration diagnostics."""

from image_resize.doctor import run_doctor


def write_config(tmp_path, content: str = ""):
    config_dir = tmp_path / ".image-resize"
    config_dir.mkdir()
    (config_dir / "config.toml").write_text(content)


class TestRunDoctor:
    """Tests for run_doctor."""

    def test_missing_config(self, tmp_path):
        errors, warnings, ok = run_doctor(tmp_path)
        assert len(errors) == 1
        assert "image-resize init" in errors[0]

    def test_invalid_toml(self, tmp_path):
        write_config(tmp_path, "[resize\n")
        errors, _, _ = run_doctor(tmp_path)
        assert "Invalid TOML" in errors[0]

    def test_healthy_project(self, tmp_path):
        write_config(tmp_path)
        (tmp_path / "resources").mkdir()
        (tmp_path / "resources" / ("a" * 32 + ".png")).write_bytes(b"x")

        errors, warnings, ok = run_doctor(tmp_path)

        assert errors == []
        assert warnings == []
        assert any("1 files" in message for message in ok)

    def test_missing_resources_dir_is_a_warning(self, tmp_path):
        write_config(tmp_path)
        errors, warnings, _ = run_doctor(tmp_path)
        assert errors == []
        assert "Resources directory not found" in warnings[0]

    def test_reports_bad_values(self, tmp_path, capsys):
        write_config(
            tmp_path,
            """
[resize]
default_mode = "stretch"
quick_percentages = [100, 0]

[dimensions]
fallback_width = 0

[logging]
level = "loud"
""",
        )

        errors, _, _ = run_doctor(tmp_path)

        assert any("default_mode" in e for e in errors)
        assert any("Quick percentages" in e for e in errors)
        assert any("Fallback dimensions" in e for e in errors)
        assert any("loud" in e for e in errors)

    def test_reports_bad_timeout(self, tmp_path):
        """The file value is reported even though loading falls back to the default."""
        write_config(tmp_path, "[dimensions]\nexternal_timeout = 0\n")

        errors, _, _ = run_doctor(tmp_path)

        assert errors == ["Timeouts in [dimensions] must be positive."]
