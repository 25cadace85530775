import re

import pulumi
import pulumi_aws as aws

from helpers import INDEX_DOCUMENT, ConfigurationError, validate_price_class

SITE_ORIGIN_ID = "s3-site-origin"
VIEWER_REQUEST = "viewer-request"

READ_ONLY_METHODS = ["GET", "HEAD"]

# CloudFront defaults for a behavior without a cache policy
MIN_TTL = 0
DEFAULT_TTL = 86400
MAX_TTL = 31536000

_CF_FUNCTION_ARN_RE = re.compile(r"^arn:aws[a-z-]*:cloudfront::\d{12}:function/[A-Za-z0-9_-]{1,64}$")


def build_error_fallbacks() -> list[aws.cloudfront.DistributionCustomErrorResponseArgs]:
    """
    403/404 from the origin -> 200 + /index.html, never cached.

    Any path S3 doesn't have comes back as the app shell so client-side routing
    can take over (refresh on a deep link works).
    """
    return [
        aws.cloudfront.DistributionCustomErrorResponseArgs(
            error_code=error_code,
            response_code=200,
            response_page_path=f"/{INDEX_DOCUMENT}",
            error_caching_min_ttl=0,
        )
        for error_code in (403, 404)
    ]


def _function_arn(function) -> pulumi.Input[str]:
    if isinstance(function, aws.cloudfront.Function):
        return function.arn
    if isinstance(function, aws.lambda_.Function):
        raise ConfigurationError(
            "Lambda functions are Lambda@Edge associations, not CloudFront Function associations."
        )
    if isinstance(function, pulumi.Output):
        return function
    if isinstance(function, str):
        if ":lambda:" in function:
            raise ConfigurationError(
                f"'{function}' is a Lambda ARN; only CloudFront Functions can be associated here."
            )
        if not _CF_FUNCTION_ARN_RE.match(function):
            raise ConfigurationError(f"'{function}' is not a CloudFront Function ARN.")
        return function
    raise ConfigurationError(f"Unsupported function reference: {type(function).__name__}")


def build_function_associations(
    function=None,
    event_type: str = VIEWER_REQUEST,
) -> list[aws.cloudfront.DistributionDefaultCacheBehaviorFunctionAssociationArgs] | None:
    """
    None when no function is given, so the field is left out of the behavior
    rather than sent as an empty list.
    """
    if function is None:
        return None

    if event_type != VIEWER_REQUEST:
        raise ConfigurationError(
            f"Function trigger '{event_type}' is not supported; functions attach at {VIEWER_REQUEST} only."
        )

    return [
        aws.cloudfront.DistributionDefaultCacheBehaviorFunctionAssociationArgs(
            event_type=VIEWER_REQUEST,
            function_arn=_function_arn(function),
        )
    ]


def distribution_options(
    *,
    read_policy: aws.s3.BucketPolicy,
    target_provider: aws.Provider | None,
) -> pulumi.ResourceOptions:
    # the bucket has to trust the OAI before the distribution presents it
    return pulumi.ResourceOptions(
        provider=target_provider,
        depends_on=[read_policy],
    )


def create_cloudfront_distribution(
    *,
    # identity
    stack: str,
    # origin
    site_bucket: aws.s3.Bucket,
    oai: aws.cloudfront.OriginAccessIdentity,
    read_policy: aws.s3.BucketPolicy | None,
    # behavior components
    function=None,
    function_event_type: str = VIEWER_REQUEST,
    price_class: str | None = None,
    # provider
    target_provider: aws.Provider | None,
):
    """
    Create the CloudFront distribution for the site:
      - single S3 origin reached through the OAI
      - GET/HEAD only, HTTP redirected to HTTPS
      - optional CloudFront Function at viewer-request
      - 403/404 -> /index.html
    """
    if read_policy is None:
        raise ConfigurationError("Attach the OAI read policy to the site bucket before creating the distribution.")
    if not isinstance(read_policy, aws.s3.BucketPolicy):
        raise ConfigurationError(f"read_policy must be an aws.s3.BucketPolicy, got {type(read_policy).__name__}")

    price_class = validate_price_class(price_class)
    function_associations = build_function_associations(function, function_event_type)

    if function_associations:
        pulumi.log.info(f"Associating CloudFront Function at {VIEWER_REQUEST} on the default behavior.")

    dist = aws.cloudfront.Distribution(
        "siteDist",
        enabled=True,
        comment=f"static-site {stack}",
        is_ipv6_enabled=True,
        http_version="http2",
        default_root_object=INDEX_DOCUMENT,
        origins=[
            aws.cloudfront.DistributionOriginArgs(
                domain_name=site_bucket.bucket_regional_domain_name,
                origin_id=SITE_ORIGIN_ID,
                s3_origin_config=aws.cloudfront.DistributionOriginS3OriginConfigArgs(
                    origin_access_identity=oai.cloudfront_access_identity_path,
                ),
            ),
        ],
        default_cache_behavior=aws.cloudfront.DistributionDefaultCacheBehaviorArgs(
            target_origin_id=SITE_ORIGIN_ID,
            viewer_protocol_policy="redirect-to-https",
            allowed_methods=list(READ_ONLY_METHODS),
            cached_methods=list(READ_ONLY_METHODS),
            compress=True,
            min_ttl=MIN_TTL,
            default_ttl=DEFAULT_TTL,
            max_ttl=MAX_TTL,
            function_associations=function_associations,
            forwarded_values=aws.cloudfront.DistributionDefaultCacheBehaviorForwardedValuesArgs(
                query_string=False,
                cookies=aws.cloudfront.DistributionDefaultCacheBehaviorForwardedValuesCookiesArgs(
                    forward="none"
                ),
            ),
        ),
        custom_error_responses=build_error_fallbacks(),
        restrictions=aws.cloudfront.DistributionRestrictionsArgs(
            geo_restriction=aws.cloudfront.DistributionRestrictionsGeoRestrictionArgs(
                restriction_type="none"
            )
        ),
        viewer_certificate=aws.cloudfront.DistributionViewerCertificateArgs(
            cloudfront_default_certificate=True,
        ),
        price_class=price_class,
        opts=distribution_options(read_policy=read_policy, target_provider=target_provider),
    )

    pulumi.export("cloudFrontDomain", dist.domain_name)
    pulumi.export("cloudFrontZoneId", dist.hosted_zone_id)
    pulumi.export("cloudFrontDistId", dist.id)
    pulumi.export("cloudFrontDistArn", dist.arn)
    pulumi.export("siteUrl", pulumi.Output.concat("https://", dist.domain_name))

    return dist
