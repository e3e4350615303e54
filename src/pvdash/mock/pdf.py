"""Single-page PDF writer for fallback reports.

Writes just enough of PDF 1.4 for any viewer to open the file: catalog, page
tree, one A4 page with Helvetica text lines, cross-reference table and
trailer.
"""

PAGE_WIDTH = 595
PAGE_HEIGHT = 842
MARGIN = 72
TITLE_SIZE = 18
BODY_SIZE = 12
LINE_GAP = 20


def _escape(text: str) -> bytes:
    """Encode text as a PDF literal string body."""
    escaped = text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")
    return escaped.encode("latin-1", errors="replace")


def _content_stream(title: str, lines: list[str]) -> bytes:
    y = PAGE_HEIGHT - MARGIN
    parts = [b"BT", b"/F1 %d Tf" % TITLE_SIZE, b"%d %d Td" % (MARGIN, y), b"(" + _escape(title) + b") Tj"]
    parts.append(b"/F1 %d Tf" % BODY_SIZE)
    for i, line in enumerate(lines):
        # First body line sits further below the title
        step = 2 * LINE_GAP if i == 0 else LINE_GAP
        parts.append(b"0 %d Td" % -step)
        parts.append(b"(" + _escape(line) + b") Tj")
    parts.append(b"ET")
    return b"\n".join(parts)


def render_pdf(title: str, lines: list[str]) -> bytes:
    """Render a one-page PDF with a title and text lines.

    Args:
        title: Heading at the top of the page.
        lines: Body lines, one per row.

    Returns:
        Complete PDF file content.
    """
    content = _content_stream(title, lines)
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 %d %d] "
        b"/Resources << /Font << /F1 4 0 R >> >> /Contents 5 0 R >>" % (PAGE_WIDTH, PAGE_HEIGHT),
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica /Encoding /WinAnsiEncoding >>",
        b"<< /Length %d >>\nstream\n" % len(content) + content + b"\nendstream",
    ]

    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + body + b"\nendobj\n"

    xref_offset = len(out)
    out += b"xref\n0 %d\n" % (len(objects) + 1)
    # Entries are exactly 20 bytes each
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\n" % (len(objects) + 1)
    out += b"startxref\n%d\n%%%%EOF\n" % xref_offset
    return bytes(out)
