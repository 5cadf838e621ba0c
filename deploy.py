import json
import pulumi
import pulumi_aws as aws
from cfnconfig import get_ssm_param_names
from typing import Any, Callable, Dict, Mapping, Tuple


def _as_json(value: Any) -> Any:
    # YAML dates such as AWSTemplateFormatVersion: 2010-09-09 are written back as text
    return json.dumps(value, default=str) if isinstance(value, (dict, list)) else value


def _parameter_value(value: Any) -> str:
    if isinstance(value, bool):
        return json.dumps(value)
    if isinstance(value, (list, tuple)):
        return ",".join(_parameter_value(v) for v in value)
    return str(value)


def _pairs_to_dict(pairs: Any, key_field: str, value_field: str) -> Dict[str, str]:
    if isinstance(pairs, Mapping):
        items = pairs.items()
    else:
        items = [(p[key_field], p[value_field]) for p in pairs]
    return {str(k): _parameter_value(v) for k, v in items if v is not None}


# CloudFormation CreateStack field -> (Stack argument, conversion)
STACK_ARGUMENTS: Dict[str, Tuple[str, Callable[[Any], Any]]] = {
    "StackName": ("name", lambda v: v),
    "TemplateBody": ("template_body", _as_json),
    "TemplateURL": ("template_url", lambda v: v),
    "Parameters": ("parameters", lambda v: _pairs_to_dict(v, "ParameterKey", "ParameterValue")),
    "Capabilities": ("capabilities", lambda v: v),
    "DisableRollback": ("disable_rollback", lambda v: v),
    "NotificationARNs": ("notification_arns", lambda v: v),
    "OnFailure": ("on_failure", lambda v: v),
    "StackPolicyBody": ("policy_body", _as_json),
    "StackPolicyURL": ("policy_url", lambda v: v),
    "RoleARN": ("iam_role_arn", lambda v: v),
    "Tags": ("tags", lambda v: _pairs_to_dict(v, "Key", "Value")),
    "TimeoutInMinutes": ("timeout_in_minutes", lambda v: v),
}

# Without these there is no stack to create, so conversion errors are raised
REQUIRED_FIELDS = {"StackName", "TemplateBody", "TemplateURL"}


def stack_args(stack: Mapping[str, Any]) -> Dict[str, Any]:
    """Converts a serialized stack into keyword arguments for aws.cloudformation.Stack.

    Parameter and tag values are rendered as CloudFormation expects them: booleans in
    lowercase, lists comma separated, and unset (None) values left out.
    """
    args = {}
    for field, value in stack.items():
        if field not in STACK_ARGUMENTS:
            pulumi.log.warn(f"Unsupported stack option '{field}' on '{stack.get('StackName')}'. Skipping it.")
            continue
        if value is None:
            continue
        arg_name, convert = STACK_ARGUMENTS[field]
        if field in REQUIRED_FIELDS:
            args[arg_name] = convert(value)
            continue
        try:
            args[arg_name] = convert(value)
        except (KeyError, TypeError) as e:
            pulumi.log.warn(f"Malformed stack option '{field}' on '{stack.get('StackName')}': {e}. Skipping it.")
    return args


class CloudFormationStackBuilder:
    def __init__(self, serialized_config: Mapping[Any, Mapping[str, Any]]):
        self.config = serialized_config
        self.stacks: Dict[Any, aws.cloudformation.Stack] = {}

    def build(self):
        for key, stack in self.config.items():
            args = stack_args(stack)
            name = args.get("name", str(key))
            pulumi.log.debug(f"Final stack args for '{key}' => {sorted(args)}")
            self.stacks[key] = aws.cloudformation.Stack(name, **args)
            source = "template url" if "template_url" in args else "inline template"
            pulumi.log.info(f"Created stack: {name} ({source})")

    def export(self):
        for key, stack in self.stacks.items():
            try:
                pulumi.export(str(key), stack.id)
            except Exception as e:
                pulumi.log.warn(f"Failed to export stack '{key}': {e}")
        pulumi.export("ssmParamNames", get_ssm_param_names(self.config))
