#!/usr/bin/env python3
from __future__ import annotations

import argparse
import sys
from pathlib import Path


def repo_root_from_scripts_dir() -> Path:
    return Path(__file__).resolve().parents[1]


# site_rules lives in the repo root, next to the Pulumi program
sys.path.insert(0, str(repo_root_from_scripts_dir()))

from site_rules import (  # noqa: E402
    DEFAULT_PRICE_CLASS,
    PRICE_CLASSES,
    ConfigurationError,
    parse_removal_policy,
    validate_bucket_name,
    validate_price_class,
)


def write_text(path: Path, content: str, force: bool) -> bool:
    if path.exists() and not force:
        return False
    path.write_text(content, encoding="utf-8", newline="\n")
    return True


def build_pulumi_project_yaml(project_name: str) -> str:
    lines: list[str] = []
    lines.append(f"name: {project_name}")
    lines.append("description: Static website on a private S3 bucket behind CloudFront")
    lines.append("runtime:")
    lines.append("  name: python")
    lines.append("  options:")
    lines.append("    toolchain: pip")
    lines.append("    virtualenv: .venv")
    lines.append("")
    return "\n".join(lines)


def build_sorted_config_yaml(values: dict[str, str], comments: dict[str, str]) -> str:
    lines: list[str] = ["config:"]
    for key in sorted(values.keys()):
        if key in comments:
            lines.append(f"  # {comments[key]}")
        lines.append(f"  {key}: {values[key]}")
    lines.append("")
    return "\n".join(lines)


def build_stack_values(
    prefix: str,
    *,
    bucket_name: str,
    removal_policy: str,
    price_class: str | None,
    function_name: str | None,
    region: str | None,
    profile: str | None,
) -> dict[str, str]:
    """Validate the site settings and map them to stack config keys."""
    values = {
        f"{prefix}:bucketName": validate_bucket_name(bucket_name),
        f"{prefix}:bucketRemovalPolicy": parse_removal_policy(removal_policy).value,
        f"{prefix}:priceClass": validate_price_class(price_class),
    }
    if function_name:
        values[f"{prefix}:functionName"] = function_name
    if region:
        values["aws:region"] = region
    if profile:
        values["aws:profile"] = profile
    return values


def build_stack_yaml(prefix: str, values: dict[str, str]) -> str:
    comments = {
        "aws:profile": "AWS CLI profile used by the Pulumi AWS provider",
        "aws:region": "AWS region for the site bucket",
        f"{prefix}:bucketName": "Globally unique S3 bucket name for the site content",
        f"{prefix}:bucketRemovalPolicy": "destroy: delete the bucket with the stack; retain: keep it",
        f"{prefix}:functionName": "Existing CloudFront Function attached at viewer-request",
        f"{prefix}:priceClass": "CloudFront price class",
    }
    return build_sorted_config_yaml(values, comments)


def main() -> int:
    parser = argparse.ArgumentParser(description="Initialize Pulumi project and stack config for a static site.")
    parser.add_argument("--project", default="static-site-hosting", help="Pulumi project name")
    parser.add_argument("--stack", required=True, help="Stack name, e.g. dev or prod")
    parser.add_argument("--bucket-name", required=True, help="S3 bucket name for the site content")
    parser.add_argument(
        "--removal-policy",
        required=True,
        choices=["destroy", "retain"],
        help="What happens to the bucket when the stack is destroyed",
    )
    parser.add_argument(
        "--price-class",
        default=DEFAULT_PRICE_CLASS,
        choices=PRICE_CLASSES,
        help=f"CloudFront price class (default: {DEFAULT_PRICE_CLASS})",
    )
    parser.add_argument("--function-name", help="Existing CloudFront Function to run at viewer-request")
    parser.add_argument("--region", help="AWS region. Example: eu-west-2")
    parser.add_argument("--profile", help="AWS CLI profile")
    parser.add_argument("--force", action="store_true", help="Overwrite existing YAML files")
    args = parser.parse_args()

    prefix = args.project
    root = repo_root_from_scripts_dir()

    print("\n=== config_init.py ===")

    try:
        stack_values = build_stack_values(
            prefix,
            bucket_name=args.bucket_name,
            removal_policy=args.removal_policy,
            price_class=args.price_class,
            function_name=args.function_name,
            region=args.region,
            profile=args.profile,
        )
    except ConfigurationError as e:
        print(f"Invalid settings: {e}")
        return 1

    written: list[str] = []
    skipped: list[str] = []

    pulumi_yaml_path = root / "Pulumi.yaml"
    if write_text(pulumi_yaml_path, build_pulumi_project_yaml(prefix), force=args.force):
        written.append(pulumi_yaml_path.name)
    else:
        skipped.append(pulumi_yaml_path.name)

    stack_path = root / f"Pulumi.{args.stack}.yaml"
    if write_text(stack_path, build_stack_yaml(prefix, stack_values), force=args.force):
        written.append(stack_path.name)
    else:
        skipped.append(stack_path.name)

    print(f"Project: {prefix}")
    print(f"Stack: {args.stack}")
    if written:
        print("\nWritten/Updated:")
        for name in written:
            print(f"  - {name}")
    if skipped:
        print("\nSkipped (already exist, use --force to overwrite):")
        for name in skipped:
            print(f"  - {name}")

    print(f"\nNext: pulumi stack select {args.stack} && pulumi up")
    print("")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
