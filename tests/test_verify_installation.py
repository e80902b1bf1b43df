"""
Tests for the installation check script
"""

from verify_installation import check_file_exists, check_import


def test_check_import(capsys):
    assert check_import("numpy")
    assert not check_import("not_a_real_module_xyz", optional=True)

    out = capsys.readouterr().out
    assert "numpy: Installed" in out
    assert "(optional)" in out


def test_check_file_exists(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("markers: {}\n")

    assert check_file_exists(path, "Configuration file")
    assert not check_file_exists(tmp_path / "missing.yaml", "Configuration file")
