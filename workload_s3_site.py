from collections.abc import Mapping

import pulumi
import pulumi_aws as aws

from helpers import INDEX_DOCUMENT, ConfigurationError, RemovalPolicy, validate_bucket_name

OAI_READ_SID = "AllowCloudFrontOaiRead"


def create_site_bucket(
    *,
    bucket_name: str,
    removal_policy: RemovalPolicy,
    stack: str,
    target_provider: aws.Provider | None,
):
    """
    Creates:
      - site content bucket (private, website documents -> index.html)
      - ownership controls (ACLs disabled)
      - public access block (all four flags on, not configurable)
      - website configuration

    Returns:
      {"site_bucket": ..., "public_access_block": ...}
    """
    validate_bucket_name(bucket_name)
    if not isinstance(removal_policy, RemovalPolicy):
        raise ConfigurationError(f"removal_policy must be a RemovalPolicy, got {removal_policy!r}")

    retain = removal_policy is RemovalPolicy.RETAIN

    site_bucket = aws.s3.Bucket(
        "siteBucket",
        bucket=bucket_name,
        tags={"Project": "static-site", "Env": stack, "RemovalPolicy": removal_policy.value},
        opts=pulumi.ResourceOptions(
            provider=target_provider,
            retain_on_delete=retain,
        ),
    )

    if retain:
        pulumi.log.info(f"Bucket {bucket_name} is retained when the stack is destroyed.", resource=site_bucket)
    else:
        pulumi.log.info(f"Bucket {bucket_name} is deleted with the stack.", resource=site_bucket)

    aws.s3.BucketOwnershipControls(
        "siteBucketOwnership",
        bucket=site_bucket.id,
        rule=aws.s3.BucketOwnershipControlsRuleArgs(
            object_ownership="BucketOwnerEnforced",
        ),
        opts=pulumi.ResourceOptions(provider=target_provider, parent=site_bucket),
    )

    public_access_block = aws.s3.BucketPublicAccessBlock(
        "siteBucketPab",
        bucket=site_bucket.id,
        block_public_acls=True,
        ignore_public_acls=True,
        block_public_policy=True,
        restrict_public_buckets=True,
        opts=pulumi.ResourceOptions(provider=target_provider, parent=site_bucket),
    )

    aws.s3.BucketWebsiteConfiguration(
        "siteBucketWebsite",
        bucket=site_bucket.id,
        index_document=aws.s3.BucketWebsiteConfigurationIndexDocumentArgs(
            suffix=INDEX_DOCUMENT,
        ),
        error_document=aws.s3.BucketWebsiteConfigurationErrorDocumentArgs(
            key=INDEX_DOCUMENT,
        ),
        opts=pulumi.ResourceOptions(provider=target_provider, parent=site_bucket),
    )

    pulumi.export("siteBucketName", site_bucket.bucket)
    pulumi.export("siteBucketArn", site_bucket.arn)
    pulumi.export("siteBucketRetained", retain)

    return {
        "site_bucket": site_bucket,
        "public_access_block": public_access_block,
    }


def create_origin_access_identity(
    *,
    stack: str,
    target_provider: aws.Provider | None,
) -> aws.cloudfront.OriginAccessIdentity:
    """
    CloudFront Origin Access Identity for the site origin.

    iam_arn is the bucket policy principal; cloudfront_access_identity_path is
    what the distribution presents to S3.
    """
    oai = aws.cloudfront.OriginAccessIdentity(
        "siteOai",
        comment=f"static-site {stack} origin access identity",
        opts=pulumi.ResourceOptions(provider=target_provider),
    )

    pulumi.export("originAccessIdentityId", oai.id)

    return oai


def oai_read_statement(
    site_bucket: aws.s3.Bucket,
    oai: aws.cloudfront.OriginAccessIdentity,
) -> aws.iam.GetPolicyDocumentStatementArgs:
    return aws.iam.GetPolicyDocumentStatementArgs(
        sid=OAI_READ_SID,
        effect="Allow",
        actions=["s3:GetObject"],
        resources=[site_bucket.arn.apply(lambda arn: f"{arn}/*")],
        principals=[aws.iam.GetPolicyDocumentStatementPrincipalArgs(
            type="AWS",
            identifiers=[oai.iam_arn],
        )],
    )


def merge_policy_statements(
    existing: Mapping[str, aws.iam.GetPolicyDocumentStatementArgs] | None,
    additions: Mapping[str, aws.iam.GetPolicyDocumentStatementArgs],
) -> dict[str, aws.iam.GetPolicyDocumentStatementArgs]:
    """
    Merge statements keyed by Sid into a new mapping.

    Neither input is modified. A Sid present on both sides is an error, never an overwrite.
    """
    merged = dict(existing or {})
    for sid, statement in additions.items():
        if sid in merged:
            raise ConfigurationError(f"Bucket policy already has a statement with Sid '{sid}'.")
        merged[sid] = statement
    return merged


def read_policy_options(
    *,
    site_bucket: aws.s3.Bucket,
    public_access_block: aws.s3.BucketPublicAccessBlock | None,
    target_provider: aws.Provider | None,
) -> pulumi.ResourceOptions:
    # policy goes on only after the bucket is locked down
    return pulumi.ResourceOptions(
        provider=target_provider,
        parent=site_bucket,
        depends_on=[public_access_block] if public_access_block is not None else [],
    )


def attach_oai_read_policy(
    *,
    site_bucket: aws.s3.Bucket,
    oai: aws.cloudfront.OriginAccessIdentity,
    public_access_block: aws.s3.BucketPublicAccessBlock | None = None,
    existing_statements: Mapping[str, aws.iam.GetPolicyDocumentStatementArgs] | None = None,
    target_provider: aws.Provider | None,
) -> aws.s3.BucketPolicy:
    """
    Bucket policy: allow only the OAI to read objects from the site bucket.

    Statements already on the policy (existing_statements, keyed by Sid) are kept as they are.
    Keeps the Pulumi name 'siteBucketPolicy' stable.
    """
    if not isinstance(site_bucket, aws.s3.Bucket):
        raise ConfigurationError(
            f"Cannot attach a resource policy to {type(site_bucket).__name__}; an aws.s3.Bucket is required."
        )
    if not isinstance(oai, aws.cloudfront.OriginAccessIdentity):
        raise ConfigurationError("The read grant needs a CloudFront OriginAccessIdentity as principal.")

    statements = merge_policy_statements(
        existing_statements,
        {OAI_READ_SID: oai_read_statement(site_bucket, oai)},
    )

    bucket_policy_doc = aws.iam.get_policy_document_output(statements=list(statements.values()))

    return aws.s3.BucketPolicy(
        "siteBucketPolicy",
        bucket=site_bucket.id,
        policy=bucket_policy_doc.json,
        opts=read_policy_options(
            site_bucket=site_bucket,
            public_access_block=public_access_block,
            target_provider=target_provider,
        ),
    )
