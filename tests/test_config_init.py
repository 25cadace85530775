import importlib.util
import subprocess
import sys
from pathlib import Path

import pytest

from helpers import ConfigurationError

_SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "config_init.py"
_spec = importlib.util.spec_from_file_location("config_init", _SCRIPT)
config_init = importlib.util.module_from_spec(_spec)
_spec.loader.exec_module(config_init)

PREFIX = "static-site-hosting"


def test_build_stack_values():
    values = config_init.build_stack_values(
        PREFIX,
        bucket_name="my-site-assets",
        removal_policy="retain",
        price_class=None,
        function_name="spa-rewrite",
        region="eu-west-2",
        profile=None,
    )

    assert values == {
        f"{PREFIX}:bucketName": "my-site-assets",
        f"{PREFIX}:bucketRemovalPolicy": "retain",
        f"{PREFIX}:priceClass": "PriceClass_200",
        f"{PREFIX}:functionName": "spa-rewrite",
        "aws:region": "eu-west-2",
    }


def test_build_stack_values_validates_bucket_name():
    with pytest.raises(ConfigurationError):
        config_init.build_stack_values(
            PREFIX,
            bucket_name="Bad_Name",
            removal_policy="destroy",
            price_class=None,
            function_name=None,
            region=None,
            profile=None,
        )


def test_stack_yaml_is_sorted_and_commented():
    yaml = config_init.build_stack_yaml(PREFIX, {
        f"{PREFIX}:bucketRemovalPolicy": "destroy",
        f"{PREFIX}:bucketName": "my-site-assets",
    })

    assert yaml.splitlines() == [
        "config:",
        "  # Globally unique S3 bucket name for the site content",
        f"  {PREFIX}:bucketName: my-site-assets",
        "  # destroy: delete the bucket with the stack; retain: keep it",
        f"  {PREFIX}:bucketRemovalPolicy: destroy",
    ]


def test_write_text_does_not_overwrite_without_force(tmp_path):
    target = tmp_path / "Pulumi.dev.yaml"
    target.write_text("original", encoding="utf-8")

    assert config_init.write_text(target, "new", force=False) is False
    assert target.read_text(encoding="utf-8") == "original"

    assert config_init.write_text(target, "new", force=True) is True
    assert target.read_text(encoding="utf-8") == "new"


def _run_script(*args):
    # -S: no site-packages, so the script must run on the standard library alone
    return subprocess.run(
        [sys.executable, "-S", str(_SCRIPT), *args],
        capture_output=True,
        text=True,
        cwd=_SCRIPT.parent,
    )


def test_script_runs_standalone():
    result = _run_script("--help")

    assert result.returncode == 0, result.stderr
    assert "--bucket-name" in result.stdout
    assert "--removal-policy" in result.stdout


def test_script_rejects_invalid_bucket_name_before_writing():
    result = _run_script(
        "--stack", "dev",
        "--bucket-name", "Not_A_Bucket",
        "--removal-policy", "destroy",
    )

    assert result.returncode == 1
    assert "Invalid settings" in result.stdout
