import re

from utils.slug import derive_slug, slug_base, random_suffix


def test_slug_base_normalizes_name():
    assert slug_base("  Brake Pads & Discs ") == "_brake_pads__discs_"
    assert slug_base("Oil   Filter") == "oil_filter"
    assert slug_base("--Front-Bumper--") == "front-bumper"


def test_slug_base_returns_empty_input_unchanged():
    assert slug_base("") == ""
    assert slug_base(None) is None


def test_derive_slug_appends_base36_suffix():
    slug = derive_slug("Air Filter")

    assert re.fullmatch(r"air_filter-[0-9a-z]{4}", slug)


def test_derive_slug_returns_empty_input_unchanged():
    assert derive_slug("") == ""
    assert derive_slug(None) is None


def test_derive_slug_differs_between_calls():
    slugs = {derive_slug("Spark Plug") for _ in range(20)}

    assert len(slugs) > 1
    assert all(slug.startswith("spark_plug-") for slug in slugs)


def test_random_suffix_length():
    assert len(random_suffix(6)) == 6
    assert len(random_suffix()) == 4
