from __future__ import annotations
import gzip
import json
import zlib

import brotli
import pytest
import zstandard

from reqbuilder.application.ports.http_client_port import HttpResponse
from reqbuilder.domain.errors import DecodeError
from reqbuilder.infrastructure.adapters.decoding.content_decoder import ContentDecoder

PAYLOAD = json.dumps({"items": list(range(50)), "name": "reqbuilder"}).encode()

def _resp(body: bytes, encoding: str | None = None, status: int = 200) -> HttpResponse:
    headers = {"Content-Encoding": encoding} if encoding else {}
    return HttpResponse(status, body, "http://test/", headers)

def _raw_deflate(data: bytes) -> bytes:
    c = zlib.compressobj(wbits=-zlib.MAX_WBITS)
    return c.compress(data) + c.flush()

@pytest.mark.parametrize("encoding,compress", [
    ("gzip", gzip.compress),
    ("br", brotli.compress),
    ("zstd", lambda d: zstandard.ZstdCompressor().compress(d)),
    ("deflate", _raw_deflate),
])
def test_decompresses_each_encoding(encoding, compress):
    assert ContentDecoder().read_body(_resp(compress(PAYLOAD), encoding)) == PAYLOAD

def test_no_content_encoding_passes_body_through():
    assert ContentDecoder().read_body(_resp(b"\x1f\x8bnot really gzip")) == b"\x1f\x8bnot really gzip"

def test_unknown_encoding_passes_body_through():
    assert ContentDecoder().read_body(_resp(b"abc", "compress")) == b"abc"

def test_header_value_is_matched_loosely():
    assert ContentDecoder().read_body(_resp(gzip.compress(PAYLOAD), " GZIP ")) == PAYLOAD

def test_gzip_404_body_is_decoded():
    body = b'{"error":"not found"}'
    assert ContentDecoder().read_body(_resp(gzip.compress(body), "gzip", status=404)) == body

@pytest.mark.parametrize("encoding", ["gzip", "br", "zstd"])
def test_corrupt_stream_raises_decode_error(encoding):
    with pytest.raises(DecodeError):
        ContentDecoder().read_body(_resp(b"this is not a compressed stream", encoding))

def test_invalid_deflate_block_raises_decode_error():
    # reserved block type
    with pytest.raises(DecodeError):
        ContentDecoder().read_body(_resp(b"\xff\xff\xff", "deflate"))

@pytest.mark.parametrize("encoding,compress", [
    ("gzip", gzip.compress),
    ("br", brotli.compress),
    ("zstd", lambda d: zstandard.ZstdCompressor().compress(d)),
    ("deflate", _raw_deflate),
])
def test_truncated_stream_raises_decode_error(encoding, compress):
    body = compress(PAYLOAD * 20)
    with pytest.raises(DecodeError):
        ContentDecoder().read_body(_resp(body[: len(body) // 2], encoding))

def test_zstd_frame_missing_its_tail_raises_decode_error():
    body = zstandard.ZstdCompressor().compress(PAYLOAD)
    with pytest.raises(DecodeError):
        ContentDecoder().read_body(_resp(body[:-10], "zstd"))

def test_empty_zstd_body_is_empty():
    assert ContentDecoder().read_body(_resp(b"", "zstd")) == b""
