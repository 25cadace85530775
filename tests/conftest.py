import json

import pulumi
import pytest

OAI_IAM_ARN = "arn:aws:iam::cloudfront:user/CloudFront Origin Access Identity E2QWRUHEXAMPLE"
OAI_PATH = "origin-access-identity/cloudfront/E2QWRUHEXAMPLE"
DIST_DOMAIN = "d111111abcdef8.cloudfront.net"


def render_policy_document(statements: list[dict]) -> str:
    """Render statement args the way the IAM policy document data source lays them out."""
    rendered = []
    for s in statements:
        out = {"Sid": s.get("sid", ""), "Effect": s.get("effect", "Allow")}
        if s.get("actions"):
            out["Action"] = s["actions"]
        if s.get("resources"):
            out["Resource"] = s["resources"]
        if s.get("principals"):
            out["Principal"] = {p["type"]: p["identifiers"] for p in s["principals"]}
        if s.get("conditions"):
            out["Condition"] = {
                c["test"]: {c["variable"]: c["values"]} for c in s["conditions"]
            }
        rendered.append(out)
    return json.dumps({"Version": "2012-10-17", "Statement": rendered})


class SiteMocks(pulumi.runtime.Mocks):
    """Echo inputs back as outputs, fill in computed attributes, and record every registration."""

    def __init__(self):
        self.resources = []
        self.calls = []

    def new_resource(self, args: pulumi.runtime.MockResourceArgs):
        self.resources.append(args)
        outputs = dict(args.inputs)
        kind = args.typ.split(":")[-1]

        if kind == "Bucket":
            bucket = args.inputs.get("bucket")
            outputs["arn"] = f"arn:aws:s3:::{bucket}"
            outputs["bucketRegionalDomainName"] = f"{bucket}.s3.eu-west-2.amazonaws.com"
        elif kind == "OriginAccessIdentity":
            outputs["iamArn"] = OAI_IAM_ARN
            outputs["cloudfrontAccessIdentityPath"] = OAI_PATH
        elif kind == "Function":
            outputs["arn"] = f"arn:aws:cloudfront::123456789012:function/{args.inputs.get('name')}"
        elif kind == "Distribution":
            outputs["domainName"] = DIST_DOMAIN
            outputs["arn"] = "arn:aws:cloudfront::123456789012:distribution/EDFDVBD6EXAMPLE"
            outputs["hostedZoneId"] = "Z2FDTNDATAQYW2"

        return [f"{args.name}_id", outputs]

    def call(self, args: pulumi.runtime.MockCallArgs):
        self.calls.append(args)
        if args.token.endswith("getPolicyDocument"):
            document = render_policy_document(args.args.get("statements") or [])
            return {"id": "policy-document", "json": document, "minifiedJson": document}
        return {}

    def statements_of_policy(self) -> list[dict]:
        matches = [c.args for c in self.calls if c.token.endswith("getPolicyDocument")]
        assert len(matches) == 1, f"expected one policy document, got {len(matches)}"
        return matches[0]["statements"]

    def inputs_of(self, name: str) -> dict:
        matches = [r.inputs for r in self.resources if r.name == name]
        assert len(matches) == 1, f"expected one resource named {name}, got {len(matches)}"
        return matches[0]

    def names(self) -> list[str]:
        return sorted(r.name for r in self.resources)


@pytest.fixture
def mocks():
    m = SiteMocks()
    pulumi.runtime.set_mocks(m, project="static-site-hosting", stack="test", preview=False)
    return m


def run_program(fn):
    """Run fn as a Pulumi program and wait until every registration has finished."""
    result = {}

    @pulumi.runtime.test
    def program():
        result["value"] = fn()

    program()
    return result.get("value")
