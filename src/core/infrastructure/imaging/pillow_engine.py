"""Pillow-backed decode / resize / encode primitives."""

from dataclasses import dataclass
import io

from PIL import Image

from core.models.media import FitStrategy, ImageFormat

_PIL_FORMATS: dict[str, str] = {"jpeg": "JPEG", "png": "PNG", "webp": "WEBP"}

# Pillow reports some JPEG containers under their own name
_FORMAT_ALIASES: dict[str, str] = {"mpo": "jpeg", "jpg": "jpeg"}


@dataclass(frozen=True)
class DecodedImage:
    image: Image.Image
    format: str | None

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height


@dataclass(frozen=True)
class EncodedImage:
    data: bytes
    width: int
    height: int


def _scaled(size: tuple[int, int], scale: float) -> tuple[int, int]:
    return max(1, round(size[0] * scale)), max(1, round(size[1] * scale))


def _letterbox(image: Image.Image, width: int, height: int) -> Image.Image:
    if image.mode in ("RGBA", "LA") or "transparency" in image.info:
        image = image.convert("RGBA")
        canvas = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    else:
        image = image.convert("RGB")
        canvas = Image.new("RGB", (width, height), (0, 0, 0))

    offset = ((width - image.width) // 2, (height - image.height) // 2)
    canvas.paste(image, offset)
    return canvas


class PillowImageEngine:
    """Image engine used by the transform step.

    ``resize`` never enlarges: when the requested box is bigger than the
    source the scale is capped at 1.
    """

    def decode(self, data: bytes) -> DecodedImage:
        image = Image.open(io.BytesIO(data))
        image.load()
        fmt = (image.format or "").lower() or None
        if fmt is not None:
            fmt = _FORMAT_ALIASES.get(fmt, fmt)
        return DecodedImage(image=image, format=fmt)

    def resize(
        self,
        image: Image.Image,
        *,
        width: int | None,
        height: int | None,
        fit: FitStrategy,
    ) -> Image.Image:
        source = image.size

        if width and height:
            scale_x = width / source[0]
            scale_y = height / source[1]
            if fit in ("cover", "outside"):
                scale = max(scale_x, scale_y)
            else:
                scale = min(scale_x, scale_y)
        elif width:
            scale = width / source[0]
        elif height:
            scale = height / source[1]
        else:
            return image

        if scale >= 1:
            if fit == "cover" and width and height:
                return self._crop_center(image, width, height)
            return image

        resized = image.resize(_scaled(source, scale), Image.Resampling.LANCZOS)

        if width and height:
            if fit == "cover":
                return self._crop_center(resized, width, height)
            if fit == "contain":
                return _letterbox(resized, width, height)

        return resized

    @staticmethod
    def _crop_center(image: Image.Image, width: int, height: int) -> Image.Image:
        box_w = min(width, image.width)
        box_h = min(height, image.height)
        if (box_w, box_h) == image.size:
            return image

        left = (image.width - box_w) // 2
        top = (image.height - box_h) // 2
        return image.crop((left, top, left + box_w, top + box_h))

    def encode(
        self,
        image: Image.Image,
        *,
        format: ImageFormat,
        quality: int | None = None,
    ) -> EncodedImage:
        if format == "jpeg" and image.mode not in ("RGB", "L"):
            image = image.convert("RGB")
        elif format in ("png", "webp") and image.mode not in ("RGB", "RGBA", "L", "LA", "P"):
            image = image.convert("RGBA")

        options: dict[str, object] = {}
        if quality is not None and format in ("jpeg", "webp"):
            options["quality"] = quality

        buffer = io.BytesIO()
        image.save(buffer, format=_PIL_FORMATS[format], **options)
        return EncodedImage(data=buffer.getvalue(), width=image.width, height=image.height)
