import pulumi_aws as aws

from helpers import ConfigurationError


def make_provider(
    *,
    account_id: str | None,
    role_name: str | None,
    region: str | None = None,
) -> aws.Provider | None:
    """
    Create the AWS provider used for the site resources.

    - account_id + role_name: assume the deploy role in the target account
    - region only: explicit provider in that region
    - neither: None, resources fall back to the default provider (aws:region / aws:profile)
    """
    if bool(account_id) != bool(role_name):
        raise ConfigurationError("Set both accountId and deployRoleName, or neither.")

    if account_id and role_name:
        return aws.Provider(
            "target",
            assume_roles=[{
                "roleArn": f"arn:aws:iam::{account_id}:role/{role_name}",
                "sessionName": "pulumi",
            }],
            region=region,
        )

    if region:
        return aws.Provider("target", region=region)

    return None
