from pathlib import Path

from image_conversion.ops.watermark import extract_watermark_path


def test_watermark_path_is_split():
    group = {"watermark": "/a/b/logo.png", "watermarkOpacity": 50}

    extracted, directory = extract_watermark_path(group)

    assert directory == "/a/b"
    assert extracted == {"watermark": "logo.png", "watermarkOpacity": 50}


def test_original_group_is_untouched():
    group = {"watermark": "/a/b/logo.png"}
    extracted, _ = extract_watermark_path(group)
    assert group == {"watermark": "/a/b/logo.png"}
    assert extracted is not group


def test_no_watermark_returns_copy_and_none():
    group = {"width": 10}
    extracted, directory = extract_watermark_path(group)
    assert directory is None
    assert extracted == group
    assert extracted is not group


def test_bare_filename_uses_current_directory():
    extracted, directory = extract_watermark_path({"watermark": "logo.png"})
    assert directory == "."
    assert extracted["watermark"] == "logo.png"


def test_pathlike_argument(tmp_path: Path):
    extracted, directory = extract_watermark_path({"watermark": tmp_path / "marks" / "logo.png"})
    assert directory == str(tmp_path / "marks")
    assert extracted["watermark"] == "logo.png"


def test_key_order_preserved():
    extracted, _ = extract_watermark_path({"width": 1, "watermark": "/x/m.png", "blur": 2})
    assert list(extracted) == ["width", "watermark", "blur"]


def test_trailing_separator_is_ignored():
    extracted, directory = extract_watermark_path({"watermark": "/a/b/logo.png/"})
    assert (extracted["watermark"], directory) == ("logo.png", "/a/b")
