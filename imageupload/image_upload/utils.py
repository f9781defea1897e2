import base64
import binascii
import re
from collections.abc import Iterable

from imageupload.clipboard.blobs import Blob, is_blob_url
from imageupload.upload.exceptions import FetchError
from imageupload.upload.models import UploadResponse

_DATA_URI = re.compile(
    r"^data:(?P<content_type>[\w.+-]+/[\w.+-]+)?(?:;[\w.+-]+=[\w.+-]+)*;base64,(?P<payload>.*)$",
    re.DOTALL,
)
_IMAGE_SUBTYPE = re.compile(r"^image/(?P<subtype>[\w.+-]+)$")


def is_image_type(content_type: str, image_types: Iterable[str]) -> bool:
    match = _IMAGE_SUBTYPE.match(content_type or "")
    return match is not None and match["subtype"] in set(image_types)


def is_base64_image(src: str) -> bool:
    match = _DATA_URI.match(src)
    return match is not None and (match["content_type"] or "").startswith("image/")


def is_local_image_source(src: str) -> bool:
    """Sources that must be turned into files before they can be uploaded."""
    return is_base64_image(src) or is_blob_url(src)


def decode_data_uri(src: str) -> Blob:
    """Decode a base64 ``data:`` URI.

    Raises:
        FetchError: if the URI is malformed or the payload is not base64.
    """
    match = _DATA_URI.match(src)
    if match is None:
        raise FetchError("Not a base64 data URI")
    try:
        data = base64.b64decode(match["payload"].strip(), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise FetchError(f"Invalid base64 image data: {exc}") from exc
    return Blob(data=data, content_type=match["content_type"] or "")


def extension_for(content_type: str, default: str) -> str:
    """``image/png`` -> ``png``; anything unrecognised -> ``default``."""
    match = _IMAGE_SUBTYPE.match(content_type or "")
    if match is None:
        return default
    return match["subtype"].split("+")[0]


def responsive_attributes(response: UploadResponse, sizes: str) -> dict[str, object]:
    """``srcset``/``sizes``/``width`` for width-keyed variants in a response.

    Keys other than ``default`` that are not positive integers are ignored.
    Returns an empty dict when the response has no variants.
    """
    variants: dict[int, str] = {}
    for key, location in response.items():
        if key == "default":
            continue
        try:
            width = int(key)
        except (TypeError, ValueError):
            continue
        if width > 0:
            variants[width] = location
    if not variants:
        return {}
    srcset = ", ".join(f"{variants[width]} {width}w" for width in sorted(variants))
    return {"srcset": srcset, "sizes": sizes, "width": max(variants)}
