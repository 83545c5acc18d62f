"""Tests for PDF page rendering."""

from pathlib import Path

import pymupdf
import pytest

from gdoc_diff.rasterizer import page_filename, render_pdf_to_pngs, scale_matrix


def _image_info(path: Path):
    pix = pymupdf.Pixmap(str(path))
    return pix.width, pix.height, pix.alpha, pix.n


class TestScaleMatrix:

    @pytest.mark.parametrize("dpi", [72, 96, 144, 150, 300])
    def test_scale_is_dpi_over_72(self, dpi):
        matrix = scale_matrix(dpi)
        assert matrix.a == pytest.approx(dpi / 72)
        assert matrix.d == pytest.approx(dpi / 72)
        assert matrix.b == 0 and matrix.c == 0

    def test_72_dpi_is_identity(self):
        assert tuple(scale_matrix(72)) == tuple(pymupdf.Identity)


def test_page_filename_is_one_based_and_padded():
    assert page_filename(0) == "0001.png"
    assert page_filename(41) == "0042.png"
    assert page_filename(9998) == "9999.png"


class TestRenderPdfToPngs:

    def test_one_image_per_page_in_order(self, make_pdf, tmp_path: Path):
        pdf = make_pdf(pages=5)
        out = tmp_path / "out" / "docs" / "spec"

        paths = render_pdf_to_pngs(pdf, out, 72)

        assert [p.name for p in paths] == [f"{i:04d}.png" for i in range(1, 6)]
        assert sorted(out.iterdir()) == paths

    def test_native_size_at_72_dpi(self, make_pdf, tmp_path: Path):
        pdf = make_pdf(pages=1, width=144, height=72)
        [path] = render_pdf_to_pngs(pdf, tmp_path / "out", 72)

        width, height, alpha, n = _image_info(path)
        assert (width, height) == (144, 72)
        assert alpha == 0
        assert n == 3

    def test_dimensions_scale_with_dpi(self, make_pdf, tmp_path: Path):
        pdf = make_pdf(pages=1, width=144, height=72)
        [path] = render_pdf_to_pngs(pdf, tmp_path / "out", 144)

        width, height, _, _ = _image_info(path)
        assert (width, height) == (288, 144)

    def test_rerender_is_stable(self, make_pdf, tmp_path: Path):
        pdf = make_pdf(pages=3)
        first = render_pdf_to_pngs(pdf, tmp_path / "a", 100)
        second = render_pdf_to_pngs(pdf, tmp_path / "b", 100)

        assert [p.name for p in first] == [p.name for p in second]
        assert [_image_info(p) for p in first] == [_image_info(p) for p in second]

    def test_unreadable_pdf_returns_empty_list(self, tmp_path: Path):
        bad = tmp_path / "bad.pdf"
        bad.write_bytes(b"this is not a pdf")
        out = tmp_path / "out"

        assert render_pdf_to_pngs(bad, out, 72) == []
        assert not out.exists()

    def test_missing_file_returns_empty_list(self, tmp_path: Path):
        assert render_pdf_to_pngs(tmp_path / "nope.pdf", tmp_path / "out", 72) == []

    def test_page_failure_returns_partial_result(self, make_pdf, tmp_path: Path, monkeypatch):
        pdf = make_pdf(pages=4)
        original_load_page = pymupdf.Document.load_page

        def flaky_load_page(self, page_id, *args, **kwargs):
            if page_id == 2:
                raise RuntimeError("corrupt page")
            return original_load_page(self, page_id, *args, **kwargs)

        monkeypatch.setattr(pymupdf.Document, "load_page", flaky_load_page)

        paths = render_pdf_to_pngs(pdf, tmp_path / "out", 72)

        assert [p.name for p in paths] == ["0001.png", "0002.png"]
        assert all(p.exists() for p in paths)
