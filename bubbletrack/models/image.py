from __future__ import annotations

import base64
import binascii
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional, Union

ImageKind = Literal['remote', 'embedded', 'absent']


@dataclass(frozen=True)
class RemoteImage:
    url: str

    @property
    def kind(self) -> ImageKind:
        return 'remote'

    def to_url(self) -> Optional[str]:
        return self.url


@dataclass(frozen=True)
class EmbeddedImage:
    '''Inline image kept as its full data URI so it round-trips byte for byte.'''

    uri: str

    @property
    def kind(self) -> ImageKind:
        return 'embedded'

    @property
    def media_type(self) -> str:
        header = self.uri[len('data:'):].split(',', 1)[0]
        return header.split(';', 1)[0] or 'text/plain'

    def payload(self) -> Optional[bytes]:
        '''Decoded bytes, or None if the URI is malformed.'''
        header, sep, data = self.uri.partition(',')
        if not sep:
            return None
        if header.endswith(';base64'):
            try:
                return base64.b64decode(data, validate=True)
            except (binascii.Error, ValueError):
                return None
        return data.encode('utf-8')

    def to_url(self) -> Optional[str]:
        return self.uri


@dataclass(frozen=True)
class NoImage:
    @property
    def kind(self) -> ImageKind:
        return 'absent'

    def to_url(self) -> Optional[str]:
        return None


Image = Union[RemoteImage, EmbeddedImage, NoImage]

ABSENT = NoImage()


def image_from_url(value: Optional[str]) -> Image:
    '''Classify a stored `imageUrl` string.'''
    if not isinstance(value, str) or not value.strip():
        return ABSENT
    if value.startswith('data:'):
        return EmbeddedImage(value)
    return RemoteImage(value)


def image_from_file(path: Union[str, Path]) -> EmbeddedImage:
    '''Encode a picked file as a base64 data URI.'''
    path = Path(path)
    media_type = mimetypes.guess_type(path.name)[0] or 'application/octet-stream'
    encoded = base64.b64encode(path.read_bytes()).decode('ascii')
    return EmbeddedImage(f'data:{media_type};base64,{encoded}')


def resolve_image(image: Image, load_failed: bool, fallback: str) -> str:
    '''URL the presentation layer should load for this image.'''
    if load_failed or isinstance(image, NoImage):
        return fallback
    if isinstance(image, EmbeddedImage):
        # Only image/* payloads can be drawn in a bubble.
        if not image.media_type.startswith('image/') or image.payload() is None:
            return fallback
    return image.to_url() or fallback
