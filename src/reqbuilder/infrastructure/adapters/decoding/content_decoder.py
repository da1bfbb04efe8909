from __future__ import annotations

import gzip
import io
import zlib

import brotli
import zstandard

from reqbuilder.application.ports.body_decoder_port import BodyDecoderPort
from reqbuilder.application.ports.http_client_port import HttpResponse
from reqbuilder.domain.errors import DecodeError


class ContentDecoder(BodyDecoderPort):
    """Picks a decompressor from the ``Content-Encoding`` response header.

    - gzip: fails on an invalid stream header
    - br: Brotli
    - zstd: one complete frame
    - deflate: raw deflate, no zlib header expected, must reach end of stream
    - anything else (or no header): body returned untouched
    """

    def read_body(self, response: HttpResponse) -> bytes:
        encoding = response.header("Content-Encoding").strip().lower()
        body = response.content
        if encoding == "gzip":
            return self._gunzip(body)
        if encoding == "br":
            return self._unbrotli(body)
        if encoding == "zstd":
            return self._unzstd(body)
        if encoding == "deflate":
            return self._inflate(body)
        return body

    def _gunzip(self, body: bytes) -> bytes:
        try:
            with gzip.GzipFile(fileobj=io.BytesIO(body)) as reader:
                return reader.read()
        except (OSError, EOFError, zlib.error) as e:
            raise DecodeError(f"gzip: {e}") from e

    def _unbrotli(self, body: bytes) -> bytes:
        try:
            return brotli.decompress(body)
        except brotli.error as e:
            raise DecodeError(f"br: {e}") from e

    def _unzstd(self, body: bytes) -> bytes:
        if not body:
            return body
        try:
            decoder = zstandard.ZstdDecompressor().decompressobj()
            out = decoder.decompress(body)
        except zstandard.ZstdError as e:
            raise DecodeError(f"zstd: {e}") from e
        if not decoder.eof:
            raise DecodeError("zstd: unexpected end of frame")
        return out

    def _inflate(self, body: bytes) -> bytes:
        # raw deflate stream, negative window bits skip the zlib header
        inflater = zlib.decompressobj(-zlib.MAX_WBITS)
        try:
            out = inflater.decompress(body) + inflater.flush()
        except zlib.error as e:
            raise DecodeError(f"deflate: {e}") from e
        if not inflater.eof:
            raise DecodeError("deflate: unexpected end of stream")
        return out
