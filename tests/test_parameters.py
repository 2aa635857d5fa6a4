import pytest

from image_conversion.exceptions import CouldNotConvert, UnknownManipulation
from image_conversion.ops.parameters import Manipulation, convert_to_engine_parameter, prepare_manipulations

EXPECTED = {
    "width": "w",
    "height": "h",
    "blur": "blur",
    "pixelate": "pixel",
    "crop": "fit",
    "manualCrop": "crop",
    "orientation": "or",
    "flip": "flip",
    "fit": "fit",
    "devicePixelRatio": "dpr",
    "brightness": "bri",
    "contrast": "con",
    "gamma": "gam",
    "sharpen": "sharp",
    "filter": "filt",
    "background": "bg",
    "border": "border",
    "quality": "q",
    "format": "fm",
    "watermark": "mark",
    "watermarkWidth": "markw",
    "watermarkHeight": "markh",
    "watermarkFit": "markfit",
    "watermarkPaddingX": "markx",
    "watermarkPaddingY": "marky",
    "watermarkPosition": "markpos",
    "watermarkOpacity": "markalpha",
}


@pytest.mark.parametrize(("name", "key"), sorted(EXPECTED.items()))
def test_translation_table(name, key):
    assert convert_to_engine_parameter(name) == key


def test_table_is_closed():
    assert {m.value for m in Manipulation} == set(EXPECTED)


@pytest.mark.parametrize("name", ["optimize", "Width", "resize", "", "mark"])
def test_unknown_names_raise(name):
    with pytest.raises(UnknownManipulation) as ei:
        convert_to_engine_parameter(name)
    assert ei.value.manipulation == name
    assert isinstance(ei.value, CouldNotConvert)
    assert repr(name) in str(ei.value)


def test_prepare_drops_optimize_and_keeps_order():
    group = {"width": 100, "optimize": {"jpegoptim": []}, "height": 50, "crop": "crop"}

    assert list(prepare_manipulations(group).items()) == [("w", 100), ("h", 50), ("fit", "crop")]


def test_prepare_only_optimize_is_empty():
    assert prepare_manipulations({"optimize": True}) == {}


def test_prepare_later_fit_wins():
    assert prepare_manipulations({"crop": "crop-top", "fit": "contain"}) == {"fit": "contain"}


def test_prepare_does_not_touch_input():
    group = {"blur": 5, "optimize": True}
    prepare_manipulations(group)
    assert group == {"blur": 5, "optimize": True}


def test_prepare_raises_on_first_unknown():
    with pytest.raises(UnknownManipulation) as ei:
        prepare_manipulations({"width": 1, "sepia": True, "nope": 2})
    assert ei.value.manipulation == "sepia"
