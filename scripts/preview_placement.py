"""Preview where a signature lands on a PDF page.

Renders a page at a container width the same way the signing client does,
pastes a signature image at a pixel position and prints the matching
position in PDF points, so the client's pixel coordinates can be checked
against what the server-side compositor will produce.
"""

import argparse
import io
import sys
from pathlib import Path

import fitz
from PIL import Image, ImageDraw

from docsign.core.raster import to_data_url
from docsign.models.signature import (
    OverlayPosition,
    PageDimensions,
    PlacementRequest,
    SignatureArtifact,
    SignatureMode,
)
from docsign.services.overlay import display_size


def preview_placement(
    pdf_path: str,
    signature_path: str,
    x: float,
    y: float,
    page_number: int = 1,
    container_width: int = 800,
    output_path: str | None = None,
) -> Path:
    """Render the composite preview and return where it was saved."""
    pdf_file = Path(pdf_path)
    if not pdf_file.exists():
        raise FileNotFoundError(f"PDF not found: {pdf_path}")

    pdf_doc = fitz.open(pdf_file)
    if not 1 <= page_number <= len(pdf_doc):
        raise ValueError(f"Page {page_number} not found. PDF has {len(pdf_doc)} pages.")

    page = pdf_doc[page_number - 1]
    zoom = container_width / page.rect.width
    pix = page.get_pixmap(matrix=fitz.Matrix(zoom, zoom), alpha=False)
    page_img = Image.open(io.BytesIO(pix.tobytes("png"))).convert("RGBA")

    signature_bytes = Path(signature_path).read_bytes()
    signature = Image.open(io.BytesIO(signature_bytes)).convert("RGBA")
    artifact = SignatureArtifact(
        image_data=to_data_url(signature_bytes),
        source_mode=SignatureMode.UPLOAD,
        width=signature.width,
        height=signature.height,
    )
    sig_w, sig_h = display_size(artifact, pix.width)

    position = OverlayPosition(x=x, y=y).clamped(pix.width, pix.height, sig_w, sig_h)
    request = PlacementRequest(
        document_id="preview",
        page_number=page_number,
        signature_data=artifact.image_data,
        signature_position=position,
        pdf_page_dimensions=PageDimensions(width=pix.width, height=pix.height),
        signature_type=SignatureMode.UPLOAD,
        signature_file_extension="png",
    )
    x_pt, y_pt = request.to_page_points(page.rect.width, page.rect.height)

    resized = signature.resize((max(1, round(sig_w)), max(1, round(sig_h))), Image.LANCZOS)
    page_img.alpha_composite(resized, (round(position.x), round(position.y)))
    draw = ImageDraw.Draw(page_img)
    draw.rectangle(
        [(position.x, position.y), (position.x + sig_w, position.y + sig_h)],
        outline=(0, 0, 255, 255),
        width=1,
    )

    out = Path(output_path or f"placement_preview_page{page_number}.png")
    page_img.save(out)
    pdf_doc.close()

    print(f"Rendered page: {pix.width} x {pix.height} px (page {page.rect.width:.1f} x {page.rect.height:.1f} pt)")
    print(f"Signature position: ({position.x:.1f}, {position.y:.1f}) px")
    print(f"In PDF points (top-left origin): ({x_pt:.1f}, {y_pt:.1f})")
    print(f"Preview saved to: {out}")
    return out


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Preview a signature placement on a PDF page.")
    parser.add_argument("pdf", help="PDF document")
    parser.add_argument("signature", help="Signature image (PNG)")
    parser.add_argument("x", type=float, help="X offset in rendered pixels")
    parser.add_argument("y", type=float, help="Y offset in rendered pixels")
    parser.add_argument("--page", type=int, default=1, help="Page number (1-based)")
    parser.add_argument("--width", type=int, default=800, help="Container width in pixels")
    parser.add_argument("--output", help="Output PNG path")
    args = parser.parse_args()

    try:
        preview_placement(args.pdf, args.signature, args.x, args.y, args.page, args.width, args.output)
    except Exception as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
