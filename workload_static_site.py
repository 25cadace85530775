import pulumi_aws as aws

from helpers import ConfigurationError, parse_removal_policy, validate_bucket_name, validate_price_class
from workload_cloudfront import VIEWER_REQUEST, build_function_associations, create_cloudfront_distribution
from workload_s3_site import attach_oai_read_policy, create_origin_access_identity, create_site_bucket


def deploy_static_site_hosting(
    *,
    bucket_name: str,
    removal_policy,
    function=None,
    function_event_type: str = VIEWER_REQUEST,
    price_class: str | None = None,
    stack: str,
    target_provider: aws.Provider | None = None,
):
    """
    Declare the static site: private bucket, OAI, OAI read policy, distribution.

    Order matters only logically (the bucket must trust the OAI before the
    distribution uses it); the engine works out the real create order.

    Returns:
      {"site_bucket", "oai", "read_policy", "dist"}
    """
    if not bucket_name:
        raise ConfigurationError("bucket_name is required.")
    if removal_policy is None:
        raise ConfigurationError("removal_policy is required (destroy or retain).")

    bucket_name = validate_bucket_name(bucket_name)
    removal_policy = parse_removal_policy(removal_policy)
    price_class = validate_price_class(price_class)
    # raises on a bad function reference before anything is declared
    build_function_associations(function, function_event_type)

    # -------------------------------------------------------------------
    # S3 site bucket
    # -------------------------------------------------------------------
    site = create_site_bucket(
        bucket_name=bucket_name,
        removal_policy=removal_policy,
        stack=stack,
        target_provider=target_provider,
    )
    site_bucket = site["site_bucket"]

    # -------------------------------------------------------------------
    # Origin access identity + bucket read grant
    # -------------------------------------------------------------------
    oai = create_origin_access_identity(
        stack=stack,
        target_provider=target_provider,
    )

    read_policy = attach_oai_read_policy(
        site_bucket=site_bucket,
        oai=oai,
        public_access_block=site["public_access_block"],
        target_provider=target_provider,
    )

    # -------------------------------------------------------------------
    # CloudFront distribution
    # -------------------------------------------------------------------
    dist = create_cloudfront_distribution(
        stack=stack,
        site_bucket=site_bucket,
        oai=oai,
        read_policy=read_policy,
        function=function,
        function_event_type=function_event_type,
        price_class=price_class,
        target_provider=target_provider,
    )

    return {
        "site_bucket": site_bucket,
        "oai": oai,
        "read_policy": read_policy,
        "dist": dist,
    }
