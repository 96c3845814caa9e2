from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]


def test_pyproject_contract():
    text = (ROOT / "pyproject.toml").read_text()
    # requirements documents are not package metadata
    assert "SPEC_FULL.md" not in text
    for dep in ["numpy", "pandas", "PyYAML"]:
        assert f'"{dep}>=' in text, f"missing dependency: {dep}"
    assert 'pythonpath = [".", "src"]' in text
