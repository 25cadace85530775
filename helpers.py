from dataclasses import dataclass

import pulumi

from site_rules import (
    DEFAULT_PRICE_CLASS,
    PRICE_CLASSES,
    ConfigurationError,
    RemovalPolicy,
    parse_removal_policy,
    validate_bucket_name,
    validate_price_class,
)

# -------------------------------------------------------------------
# Helpers
# -------------------------------------------------------------------

INDEX_DOCUMENT = "index.html"

__all__ = [
    "DEFAULT_PRICE_CLASS",
    "INDEX_DOCUMENT",
    "PRICE_CLASSES",
    "ConfigurationError",
    "RemovalPolicy",
    "SiteInputs",
    "load_site_inputs",
    "parse_removal_policy",
    "validate_bucket_name",
    "validate_price_class",
]


@dataclass(frozen=True)
class SiteInputs:
    bucket_name: str
    removal_policy: RemovalPolicy
    function_arn: str | None = None
    function_name: str | None = None
    function_event_type: str = "viewer-request"
    price_class: str = DEFAULT_PRICE_CLASS


def load_site_inputs(cfg: pulumi.Config) -> SiteInputs:
    """
    Read the site settings from stack config.

    bucketName and bucketRemovalPolicy are required; there is no fallback for
    either since they decide naming and data retention.
    """
    bucket_name = validate_bucket_name(cfg.require("bucketName"))
    removal_policy = parse_removal_policy(cfg.require("bucketRemovalPolicy"))

    function_arn = cfg.get("functionArn")
    function_name = cfg.get("functionName")
    if function_arn and function_name:
        raise ConfigurationError("Set only one of functionArn or functionName.")

    return SiteInputs(
        bucket_name=bucket_name,
        removal_policy=removal_policy,
        function_arn=function_arn,
        function_name=function_name,
        function_event_type=cfg.get("functionEventType") or "viewer-request",
        price_class=validate_price_class(cfg.get("priceClass")),
    )
