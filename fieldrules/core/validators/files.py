"""
File predicates: mimes and image.
"""

from typing import Any

from .base_validator import Predicate, ValidationContext

IMAGE_EXTENSIONS = ("jpeg", "png", "gif", "bmp")


def _usable_file(value: Any, validator: ValidationContext) -> bool:
    return validator.is_file(value) and value.is_valid() and value.path != ""


def validate_mimes(attribute: str, value: Any, parameters: tuple[str, ...],
                   validator: ValidationContext) -> bool:
    """The file's MIME type maps to one of the listed extensions."""
    if not _usable_file(value, validator):
        return False
    allowed = {extension.lower().lstrip(".") for extension in parameters}
    return bool(allowed.intersection(value.guess_extensions()))


def validate_image(attribute: str, value: Any, parameters: tuple[str, ...],
                   validator: ValidationContext) -> bool:
    return validate_mimes(attribute, value, IMAGE_EXTENSIONS, validator)


PREDICATES = (
    Predicate("mimes", validate_mimes, 1),
    Predicate("image", validate_image),
)
