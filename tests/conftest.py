import pytest

from isodump.services.box_header import encode_header


def build_box(type_code: bytes, payload: bytes = b"", size=None) -> bytes:
    """Box with a 32-bit size header; size overrides the computed total"""
    if size is None:
        return encode_header(type_code, 8 + len(payload)) + payload
    return size.to_bytes(4, "big") + type_code + payload


@pytest.fixture
def make_box():
    return build_box


@pytest.fixture
def container_file(tmp_path, make_box):
    """moov (16) holding an empty trak (8)"""
    path = tmp_path / "moov.mp4"
    path.write_bytes(make_box(b"moov", make_box(b"trak")))
    return path
