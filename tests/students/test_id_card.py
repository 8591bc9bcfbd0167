from __future__ import annotations

import io

from PIL import Image

from src.school_attendance.school_attendance.students.id_card import normalize_photo, student_qr_png


def test_qr_png_is_a_square_png():
    data = student_qr_png("1001")

    assert data.startswith(b"\x89PNG")
    img = Image.open(io.BytesIO(data))
    assert img.size[0] == img.size[1]


def test_normalize_photo_downscales_to_jpeg():
    src = io.BytesIO()
    Image.new("RGBA", (1200, 800), (255, 0, 0, 128)).save(src, format="PNG")
    src.seek(0)

    out = Image.open(io.BytesIO(normalize_photo(src)))

    assert out.format == "JPEG"
    assert max(out.size) <= 400
