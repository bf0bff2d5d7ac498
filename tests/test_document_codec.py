"""
Тесты кодека документов: байтовая точность бинарного пути,
текстовый путь, повреждённое содержимое и запись файла.
"""

import pytest
from hypothesis import given, strategies as st

from marches_publics.core.models import Document
from marches_publics.errors import CodecError
from marches_publics.services import document_codec
from marches_publics.services.document_codec import (
    DecodedBlob,
    decode_document,
    encode_document,
    encode_file,
    is_text_type,
    write_blob,
)


def _document(content, mime_type="application/pdf", name="rapport.pdf"):
    return Document(id="d1", name=name, mime_type=mime_type, size=0,
                    added_at="2024-01-01T00:00:00.000Z", content=content)


# =============================================================================
# Бинарный путь
# =============================================================================

@given(st.binary(min_size=1, max_size=4096),
       st.sampled_from(["application/pdf", "image/png", "application/octet-stream", ""]))
def test_binary_bytes_survive_encode_decode(data, mime_type):
    document = encode_document("fichier.bin", mime_type, data)

    assert document.content.startswith("data:")
    assert document.size == len(data)
    assert decode_document(document).data == data


def test_downloaded_length_matches_uploaded_length():
    data = bytes(range(256)) * 4

    document = encode_document("cahier.pdf", "application/pdf", data)
    blob = decode_document(document)

    assert document.content.startswith("data:application/pdf;base64,")
    assert len(blob.data) == 1024
    assert blob.mime_type == "application/pdf"


def test_missing_mime_type_falls_back_to_octet_stream():
    document = encode_document("archive.zip", None, b"PK\x03\x04")

    assert document.mime_type == "application/octet-stream"
    assert document.content.startswith("data:application/octet-stream;base64,")


def test_empty_file_produces_no_document():
    assert encode_document("vide.pdf", "application/pdf", b"") is None
    assert encode_document("vide.pdf", "application/pdf", None) is None


# =============================================================================
# Текстовый путь
# =============================================================================

def test_plain_text_is_stored_decoded():
    raw = "Réunion de lancement\nOrdre du jour".encode("utf-8")

    document = encode_document("compte-rendu.txt", "text/plain", raw)

    assert document.content == "Réunion de lancement\nOrdre du jour"
    assert decode_document(document).data == raw


def test_json_extension_is_treated_as_text_without_mime():
    document = encode_document("export.json", "", b'{"a": 1}')

    assert document.content == '{"a": 1}'


@pytest.mark.parametrize("mime_type, name, expected", [
    ("text/plain", "a.txt", True),
    ("text/html; charset=utf-8", "a.html", True),
    ("application/json", "a", True),
    ("application/xml", "a", True),
    ("", "donnees.CSV", True),
    ("application/pdf", "a.pdf", False),
    ("image/png", "a.png", False),
    (None, "a.docx", False),
])
def test_text_classification(mime_type, name, expected):
    assert is_text_type(mime_type, name) is expected


def test_encode_file_guesses_mime_type(tmp_path):
    path = tmp_path / "plan.png"
    path.write_bytes(b"\x89PNG\r\n\x1a\n")

    document = encode_file(path)

    assert document.name == "plan.png"
    assert document.mime_type == "image/png"
    assert decode_document(document).data == b"\x89PNG\r\n\x1a\n"


# =============================================================================
# Повреждённое содержимое
# =============================================================================

def test_corrupt_base64_raises_codec_error():
    with pytest.raises(CodecError):
        decode_document(_document("data:application/pdf;base64,@@not-base64@@"))


def test_binary_document_without_header_raises_codec_error():
    with pytest.raises(CodecError):
        decode_document(_document("%PDF-1.4 raw bytes"))


def test_document_without_content_raises_codec_error():
    with pytest.raises(CodecError):
        decode_document(_document(None))


def test_header_without_separator_raises_codec_error():
    with pytest.raises(CodecError):
        decode_document(_document("data:application/pdf;base64"))


def test_text_starting_with_data_prefix_is_returned_verbatim():
    raw = "data: 12, 14, 15\n".encode("utf-8")

    document = encode_document("mesures.txt", "text/plain", raw)

    assert document.content == "data: 12, 14, 15\n"
    assert decode_document(document).data == raw


@pytest.mark.parametrize("text", [
    "data:text/plain,Bonjour%20le%20monde",
    "data:",
    "data:application/json;base64,@@",
])
def test_text_document_keeps_malformed_data_header_as_text(text):
    blob = decode_document(_document(text, mime_type="text/plain", name="notes.txt"))

    assert blob.data == text.encode("utf-8")


@given(st.text(min_size=1, max_size=200).map(lambda s: "data:" + s))
def test_text_document_with_data_prefix_never_raises(text):
    document = _document(text, mime_type="text/plain", name="notes.txt")

    blob = decode_document(document)

    assert isinstance(blob.data, bytes)


def test_binary_data_url_without_base64_marker_raises_codec_error():
    with pytest.raises(CodecError):
        decode_document(_document("data:application/pdf,%25PDF"))


# =============================================================================
# Запись файла
# =============================================================================

def test_write_blob_adds_suffix_on_collision(tmp_path):
    blob = DecodedBlob(name="rapport.pdf", mime_type="application/pdf", data=b"v1")

    first = write_blob(blob, tmp_path)
    second = write_blob(DecodedBlob("rapport.pdf", "application/pdf", b"v2"), tmp_path)

    assert first.name == "rapport.pdf"
    assert second.name == "rapport (1).pdf"
    assert first.read_bytes() == b"v1"
    assert second.read_bytes() == b"v2"


def test_write_blob_strips_path_components(tmp_path):
    target = tmp_path / "downloads"

    path = write_blob(DecodedBlob("../../etc/passwd", "text/plain", b"x"), target)

    assert path == target / "passwd"


def test_write_blob_leaves_no_partial_file(tmp_path, monkeypatch):
    def failing_replace(src, dst):
        raise OSError("disque plein")

    monkeypatch.setattr(document_codec.os, "replace", failing_replace)

    with pytest.raises(OSError):
        write_blob(DecodedBlob("rapport.pdf", "application/pdf", b"data"), tmp_path)

    assert list(tmp_path.iterdir()) == []
