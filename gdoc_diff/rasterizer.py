"""Renders PDF pages to PNG images with PyMuPDF."""

import logging
from pathlib import Path
from typing import List

import pymupdf

logger = logging.getLogger(__name__)

# PDF user space unit: 72 points per inch
PDF_POINTS_PER_INCH = 72


def page_filename(page_index: int) -> str:
    """File name for a 0-based page index: 1-based, zero-padded to 4 digits."""
    return f"{page_index + 1:04d}.png"


def scale_matrix(dpi: int) -> pymupdf.Matrix:
    """Uniform scaling from PDF points to pixels at ``dpi``."""
    scale = dpi / PDF_POINTS_PER_INCH
    return pymupdf.Matrix(scale, scale)


def render_pdf_to_pngs(pdf_path: Path, output_dir: Path, dpi: int) -> List[Path]:
    """
    Render every page of a PDF to ``output_dir/NNNN.png``.

    Pages are rendered as RGB without alpha. Each page and its pixmap are
    released before the next page is loaded.

    Never raises: if the document fails to open or a page fails to render,
    the error is logged and the pages written so far are returned.

    Args:
        pdf_path: Staged PDF file
        output_dir: Directory for the page images (created if missing)
        dpi: Output resolution

    Returns:
        Paths of the written images, in page order
    """
    generated: List[Path] = []
    doc = None
    try:
        doc = pymupdf.open(stream=Path(pdf_path).read_bytes(), filetype="pdf")
        page_count = doc.page_count
        output_dir.mkdir(parents=True, exist_ok=True)
        matrix = scale_matrix(dpi)

        for i in range(page_count):
            page = doc.load_page(i)
            pix = page.get_pixmap(matrix=matrix, colorspace=pymupdf.csRGB, alpha=False)
            try:
                out_path = output_dir / page_filename(i)
                pix.save(str(out_path), output="png")
                generated.append(out_path)
            finally:
                del pix, page

        logger.info(f"   - Rendered {len(generated)} page(s) at {dpi} DPI to {output_dir}")
        return generated
    except Exception as e:
        logger.error(f"Error during PDF to PNG conversion for {pdf_path}: {e}")
        return generated
    finally:
        if doc is not None:
            doc.close()
