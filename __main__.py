import os
import pulumi
from cfnconfig import read_yaml
from deploy import CloudFormationStackBuilder
from typing import Any, Dict

def load_config(file_path: str, environment: str, params: Dict[str, Any]) -> Dict[Any, Dict[str, Any]]:
    """Read the shorthand YAML at the given path and serialize it for `environment`."""
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"Stack configuration file not found: {file_path}")
    with open(file_path, "r") as file:
        text = file.read()

    return read_yaml(text, environment, params)

def main():
    settings = pulumi.Config()
    file_path = settings.get("configFile") or "stacks.yaml"
    environment = settings.get("environment") or pulumi.get_stack()
    params = settings.get_object("params") or {}

    try:
        serialized = load_config(file_path, environment, params)
    except Exception as e:
        pulumi.log.error(f"Failed to read stack configuration '{file_path}': {e}")
        raise

    builder = CloudFormationStackBuilder(serialized)
    try:
        builder.build()
    except Exception as e:
        pulumi.log.error(f"Failed during stack build: {e}")
        raise

    builder.export()

if __name__ == "__main__":
    main()
