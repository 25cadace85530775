import pulumi
import pulumi_aws as aws

from helpers import load_site_inputs
from providers import make_provider
from workload_static_site import deploy_static_site_hosting

cfg = pulumi.Config()

# -------------------------------------------------------------------
# Site config (bucketName / bucketRemovalPolicy required)
# -------------------------------------------------------------------
site_inputs = load_site_inputs(cfg)

# Optional cross-account deploy role
account_id = cfg.get("accountId")
role_name = cfg.get("deployRoleName")
region = cfg.get("region")

stack = pulumi.get_stack().split("-")[-1]
pulumi.export("stack", stack)

target_provider = make_provider(
    account_id=account_id,
    role_name=role_name,
    region=region,
)

# -------------------------------------------------------------------
# Pre-existing CloudFront Function (by ARN or by name), if any
# -------------------------------------------------------------------
function = site_inputs.function_arn
if site_inputs.function_name:
    function = aws.cloudfront.get_function_output(
        name=site_inputs.function_name,
        stage="LIVE",
        opts=pulumi.InvokeOptions(provider=target_provider),
    ).arn

deploy_static_site_hosting(
    bucket_name=site_inputs.bucket_name,
    removal_policy=site_inputs.removal_policy,
    function=function,
    function_event_type=site_inputs.function_event_type,
    price_class=site_inputs.price_class,
    stack=stack,
    target_provider=target_provider,
)
