"""
Data structures that flow through the compression pipeline.

Every stage receives the previous stage's value and returns a new one;
all of them are frozen so nothing is mutated once computed.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from image_compressor.engine.errors import UnsupportedFormatError, ValidationError


class OutputFormat(str, Enum):
    """Target codecs supported by the service."""

    JPEG = 'jpeg'
    PNG = 'png'
    WEBP = 'webp'

    @classmethod
    def parse(cls, name) -> 'OutputFormat':
        """
        Resolve a user supplied format name, case-insensitively.

        ``jpg`` is accepted as an alias for ``jpeg``. Unknown names are a
        validation error, never a silent default.
        """
        if isinstance(name, cls):
            return name
        normalized = str(name or '').strip().lower()
        if normalized == 'jpg':
            normalized = 'jpeg'
        try:
            return cls(normalized)
        except ValueError:
            raise UnsupportedFormatError(
                f"Unsupported format '{name}'. Use: jpeg, png, or webp"
            ) from None

    @property
    def mime_type(self) -> str:
        return f'image/{self.value}'


def format_dimensions(width: int, height: int) -> str:
    return f'{width} × {height}'


@dataclass(frozen=True)
class Metadata:
    """Properties read from an encoded image without altering it."""

    width: int
    height: int
    format: Optional[str]  # container detected by the decoder, e.g. "jpeg"
    channels: int
    has_alpha: bool
    has_profile: bool  # embedded ICC profile
    byte_length: int  # size of the encoded input buffer

    @property
    def is_landscape(self) -> bool:
        return self.width > self.height

    @property
    def largest_dimension(self) -> int:
        return max(self.width, self.height)

    @property
    def dimensions(self) -> str:
        return format_dimensions(self.width, self.height)


@dataclass(frozen=True)
class ImageAsset:
    """Raw input bytes paired with their probed metadata."""

    data: bytes
    metadata: Metadata

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class CompressionRequest:
    """What the caller asked for."""

    format: OutputFormat = OutputFormat.JPEG
    quality: int = 80
    width: Optional[int] = None
    height: Optional[int] = None
    max_dimension: Optional[int] = None  # ultra path
    max_width: Optional[int] = None  # landscape path
    landscape_only: bool = False

    def __post_init__(self):
        object.__setattr__(self, 'format', OutputFormat.parse(self.format))
        if isinstance(self.quality, bool) or not isinstance(self.quality, int):
            raise ValidationError('Quality must be an integer between 1 and 100')
        if not 1 <= self.quality <= 100:
            raise ValidationError(f'Quality must be between 1 and 100, got {self.quality}')
        for name in ('width', 'height', 'max_dimension', 'max_width'):
            value = getattr(self, name)
            if value is not None and value <= 0:
                raise ValidationError(f'{name} must be a positive integer, got {value}')


@dataclass(frozen=True)
class GeometryPlan:
    """Resolved output dimensions. Targets never exceed the original."""

    original_width: int
    original_height: int
    target_width: int
    target_height: int

    def __post_init__(self):
        if self.target_width > self.original_width or self.target_height > self.original_height:
            raise ValueError(
                f'Target {self.target_width}x{self.target_height} would enlarge '
                f'{self.original_width}x{self.original_height}'
            )

    @classmethod
    def unchanged(cls, metadata: Metadata) -> 'GeometryPlan':
        return cls(metadata.width, metadata.height, metadata.width, metadata.height)

    @property
    def resized(self) -> bool:
        return (self.target_width, self.target_height) != (self.original_width, self.original_height)

    @property
    def target_size(self):
        return self.target_width, self.target_height

    @property
    def dimensions(self) -> str:
        return format_dimensions(self.target_width, self.target_height)


@dataclass(frozen=True)
class JpegParams:
    quality: int
    progressive: bool = True
    optimize: bool = True

    format = OutputFormat.JPEG


@dataclass(frozen=True)
class PngParams:
    # PNG output is lossless; quality is carried for reporting only.
    quality: int
    compress_level: int = 6

    format = OutputFormat.PNG


@dataclass(frozen=True)
class WebpParams:
    quality: int
    method: int = 4  # encoder effort, 0 (fast) to 6 (smallest)

    format = OutputFormat.WEBP


CodecParams = Union[JpegParams, PngParams, WebpParams]


@dataclass(frozen=True)
class QualityPlan:
    requested_quality: int
    base_quality: int  # after the resolution-based adjustment
    high_resolution: bool
    codec: CodecParams

    @property
    def format(self) -> OutputFormat:
        return self.codec.format

    @property
    def final_quality(self) -> int:
        return self.codec.quality

    @property
    def quality_adjusted(self) -> bool:
        return self.final_quality != self.requested_quality


@dataclass(frozen=True)
class EncodedImage:
    """Output of a single resize + encode attempt."""

    data: bytes
    geometry: GeometryPlan
    quality: QualityPlan

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class CompressionResult:
    data: bytes
    format: OutputFormat
    original_size: int
    original_dimensions: str
    new_dimensions: str
    requested_quality: int
    final_quality: int
    compression_type: str  # standard | high-resolution | landscape | ultra
    resized: bool = False
    quality_adjusted: bool = False
    high_res_optimized: bool = False
    escalated: bool = False
    is_landscape: bool = False

    @property
    def mime_type(self) -> str:
        return self.format.mime_type

    @property
    def compressed_size(self) -> int:
        return len(self.data)

    @property
    def reduction_percent(self) -> float:
        if not self.original_size:
            return 0.0
        return (self.original_size - self.compressed_size) / self.original_size * 100

    @property
    def reduction(self) -> str:
        return f'{self.reduction_percent:.2f}%'
