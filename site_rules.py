"""
Naming and setting rules for the site, standard library only.

scripts/config_init.py imports this module directly, without pulumi installed.
"""
import ipaddress
import re
from enum import Enum

PRICE_CLASSES = ("PriceClass_100", "PriceClass_200", "PriceClass_All")
DEFAULT_PRICE_CLASS = "PriceClass_200"

_BUCKET_NAME_RE = re.compile(r"^[a-z0-9][a-z0-9.-]{1,61}[a-z0-9]$")
_RESERVED_PREFIXES = ("xn--", "sthree-", "amzn-s3-demo-")
_RESERVED_SUFFIXES = ("-s3alias", "--ol-s3", ".mrap", "--x-s3", "--table-s3")


class ConfigurationError(Exception):
    """Raised when the site inputs cannot produce a valid declaration."""


class RemovalPolicy(str, Enum):
    DESTROY = "destroy"
    RETAIN = "retain"


def validate_bucket_name(name: str) -> str:
    """
    Check a name against the S3 general purpose bucket naming rules.

    Returns the name unchanged so it can be used inline.
    """
    if not name:
        raise ConfigurationError("Missing bucket name.")
    if not _BUCKET_NAME_RE.match(name):
        raise ConfigurationError(
            f"Invalid bucket name '{name}': use 3-63 lowercase letters, digits, dots or hyphens, "
            "starting and ending with a letter or digit."
        )
    if ".." in name:
        raise ConfigurationError(f"Invalid bucket name '{name}': adjacent periods are not allowed.")
    try:
        ipaddress.IPv4Address(name)
    except ValueError:
        pass
    else:
        raise ConfigurationError(f"Invalid bucket name '{name}': must not be formatted as an IP address.")
    if name.startswith(_RESERVED_PREFIXES):
        raise ConfigurationError(f"Invalid bucket name '{name}': reserved prefix.")
    if name.endswith(_RESERVED_SUFFIXES):
        raise ConfigurationError(f"Invalid bucket name '{name}': reserved suffix.")
    return name


def parse_removal_policy(value) -> RemovalPolicy:
    if isinstance(value, RemovalPolicy):
        return value
    if not value:
        raise ConfigurationError("Missing bucket removal policy (destroy or retain).")
    try:
        return RemovalPolicy(str(value).strip().lower())
    except ValueError:
        raise ConfigurationError(
            f"Unknown bucket removal policy '{value}'. Expected one of: destroy, retain."
        ) from None


def validate_price_class(price_class: str | None) -> str:
    if price_class is None:
        return DEFAULT_PRICE_CLASS
    if price_class not in PRICE_CLASSES:
        raise ConfigurationError(
            f"Unknown price class '{price_class}'. Expected one of: {', '.join(PRICE_CLASSES)}."
        )
    return price_class
