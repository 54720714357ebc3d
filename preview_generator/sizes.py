"""
Derives the preview specifications for a run from size configuration.

Three buckets are read: square (cropped, width == height), height (fixed
height, width follows) and width (fixed width, height follows). Each bucket
defaults to powers of 4 from 64 up to the max preview size and can be
overridden with a space separated list of sizes.
"""
import re
from typing import Dict, Iterable, List, Tuple

from . import config
from .exceptions import ConfigurationError
from .models import PreviewSpecification

Sizes = Dict[str, Tuple[int, ...]]

INTEGER_RE = re.compile(r"[+-]?[0-9]+")


def parse_size(value, key: str) -> int:
    """Validates a single configured size. Never coerces floats or negatives."""
    if isinstance(value, bool):
        raise ConfigurationError(f"Invalid size {value!r} in {key}")
    if isinstance(value, int):
        size = value
    elif isinstance(value, str):
        token = value.strip()
        if not INTEGER_RE.fullmatch(token):
            raise ConfigurationError(f"Invalid size {value!r} in {key}: not an integer")
        size = int(token)
    else:
        raise ConfigurationError(f"Invalid size {value!r} in {key}: not an integer")

    if size <= 0:
        raise ConfigurationError(f"Invalid size {value!r} in {key}: must be positive")
    return size


def parse_size_list(raw, key: str) -> List[int]:
    """Accepts "32 64 32" style strings or sequences. Duplicates are kept here."""
    if raw is None:
        return []
    if isinstance(raw, str):
        tokens: Iterable = raw.split()
    else:
        tokens = raw
    return [parse_size(token, key) for token in tokens]


def dedupe(sizes: Iterable[int]) -> Tuple[int, ...]:
    # dict keeps first-occurrence order
    return tuple(dict.fromkeys(sizes))


def default_sizes(limit: int) -> List[int]:
    sizes = []
    size = config.DEFAULT_MIN_SIZE
    while size <= limit:
        sizes.append(size)
        size *= config.DEFAULT_SIZE_FACTOR
    return sizes


def max_preview_size(app_config) -> Tuple[int, int]:
    max_x = parse_size(app_config.get_system_value(config.KEY_PREVIEW_MAX_X, str(config.DEFAULT_PREVIEW_MAX)),
                       config.KEY_PREVIEW_MAX_X)
    max_y = parse_size(app_config.get_system_value(config.KEY_PREVIEW_MAX_Y, str(config.DEFAULT_PREVIEW_MAX)),
                       config.KEY_PREVIEW_MAX_Y)
    return max_x, max_y


def calculate_sizes(app_config) -> Sizes:
    """
    Returns the deduplicated sizes per bucket.

    app_config must provide get_system_value(key, default) and
    get_app_value(app_id, key, default).
    """
    max_x, max_y = max_preview_size(app_config)

    sizes: Dict[str, List[int]] = {
        config.BUCKET_SQUARE: default_sizes(max(max_x, max_y)),
        config.BUCKET_HEIGHT: default_sizes(max_y),
        config.BUCKET_WIDTH: default_sizes(max_x),
    }

    for bucket in config.BUCKETS:
        key = config.BUCKET_CONFIG_KEYS[bucket]
        custom = parse_size_list(app_config.get_app_value(config.APP_ID, key, ''), key)
        if custom:
            sizes[bucket] = custom

    return {bucket: dedupe(values) for bucket, values in sizes.items()}


def square_spec(size: int) -> PreviewSpecification:
    return PreviewSpecification(width=size, height=size, crop=True)


def height_spec(size: int) -> PreviewSpecification:
    return PreviewSpecification(width=config.UNBOUNDED, height=size, crop=False)


def width_spec(size: int) -> PreviewSpecification:
    return PreviewSpecification(width=size, height=config.UNBOUNDED, crop=False)


def build_specifications(sizes: Sizes) -> Tuple[PreviewSpecification, ...]:
    """Square specs first, then height, then width."""
    return (
        tuple(square_spec(s) for s in sizes.get(config.BUCKET_SQUARE, ()))
        + tuple(height_spec(h) for h in sizes.get(config.BUCKET_HEIGHT, ()))
        + tuple(width_spec(w) for w in sizes.get(config.BUCKET_WIDTH, ()))
    )


def compute_specifications(app_config) -> Tuple[PreviewSpecification, ...]:
    return build_specifications(calculate_sizes(app_config))
