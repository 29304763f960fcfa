from aif_loader.cli import main

from conftest import make_image


def write_image(tmp_path, data, name="iBoot.bin"):
    path = tmp_path / name
    path.write_bytes(data)
    return path


def test_prints_load_summary(tmp_path, capsys):
    path = write_image(tmp_path, make_image(tag=b"SecureROM for t8101si", style=b"ROMRELEASE"))

    assert main([str(path)]) == 0

    out = capsys.readouterr().out
    assert "variant:  SecureROM (ROM)" in out
    assert "style:    ROMRELEASE (release)" in out
    assert "base:     0x1800000000" in out
    assert "section:  SecureROM 0x1800000000-0x1800001000" in out
    assert "symbol:   0x1800000000 function _start (auto)" in out
    assert "symbol:   0x1800000200 data     build_banner_string (auto)" in out


def test_base_override_and_durability(tmp_path, capsys):
    path = write_image(tmp_path, make_image())

    assert main([str(path), "--base", "0x4000", "--durability", "user"]) == 0

    out = capsys.readouterr().out
    assert "base:     0x4000" in out
    assert "symbol:   0x4000 function _start (user)" in out


def test_no_fixed_symbols(tmp_path, capsys):
    path = write_image(tmp_path, make_image())
    assert main([str(path), "--no-fixed-symbols"]) == 0
    assert "symbol:" not in capsys.readouterr().out


def test_unknown_base(tmp_path, capsys):
    path = write_image(tmp_path, make_image(words={}))
    assert main([str(path)]) == 0

    captured = capsys.readouterr()
    assert "base:     0x0 (unknown)" in captured.out
    assert "Failed to predict base address" in captured.err


def test_rejects_other_images(tmp_path, capsys):
    path = write_image(tmp_path, b"\xcf\xfa\xed\xfe" + bytes(0x1000), "kernelcache")
    assert main([str(path)]) == 1
    assert "not an iBoot-family image" in capsys.readouterr().err


def test_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / "missing.bin")]) == 1
    assert "cannot read" in capsys.readouterr().err
