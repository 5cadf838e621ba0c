import pulumi
import yaml
from typing import Any, Dict, List, Mapping, Optional, Type

from config import (
    InlineStack,
    LiteralContext,
    LiteralResolver,
    TupleResource,
    UrlStack,
    display_name,
    resource_declaration,
    stack_declaration,
)

SSM_PARAMETER_KEY = "SSM.Parameter"


# Config helpers

def derive_eid(key: Any, env: Any) -> str:
    """Environment unique id for identifier `key`, e.g. ("Bucket", "prod") -> "Bucket-prod"."""
    return f"{display_name(key)}-{display_name(env)}"


def derive_resource_type(key: Any) -> str:
    """Converts a 'Service.Module' key to its AWS type, i.e. S3.Bucket -> AWS::S3::Bucket."""
    return "::".join(["AWS"] + display_name(key).split("."))


SSM_PARAMETER_TYPE = derive_resource_type(SSM_PARAMETER_KEY)


def get_ssm_param_names(cfg: Mapping[str, Any]) -> List[str]:
    """Names of all SSM parameters declared in the templates of serialized config `cfg`."""
    names = []
    for template in cfg.values():
        body = template.get("TemplateBody")
        if not isinstance(body, Mapping):
            continue
        for resource in (body.get("Resources") or {}).values():
            if isinstance(resource, Mapping) and resource.get("Type") == SSM_PARAMETER_TYPE:
                names.append((resource.get("Properties") or {}).get("Name"))
    return names


# Literals

def kv_params(m: Mapping[Any, Any]) -> List[Dict[str, Any]]:
    return [{"ParameterKey": display_name(k), "ParameterValue": v} for k, v in m.items()]


def resource_ref(key: Any) -> Dict[str, str]:
    return {"Ref": display_name(key)}


def with_ssm_params(m: Mapping[Any, Any]) -> Dict[Any, Any]:
    """Adds an SSM parameter holding a reference to each resource declared in `m`."""
    result = dict(m)
    for key in m:
        name = display_name(key)
        result[f"{name}Param"] = [
            SSM_PARAMETER_KEY,
            {"Name": name, "Value": resource_ref(key), "Type": "String"},
        ]
    return result


def create_literals(environment: Any, parameters: Optional[Mapping[str, Any]] = None) -> Dict[str, LiteralResolver]:
    """Literal resolvers bound to one `environment` and `parameters` context.

    Names follow the intrinsic functions CloudFormation offers in YAML/JSON templates.
    """
    context = LiteralContext(environment=environment, parameters=dict(parameters or {}))
    return {
        "eid": lambda k: derive_eid(k, context.environment),
        "kvp": kv_params,
        "ref": resource_ref,
        "sub": lambda k: context.parameters.get(k),
        "with-ssm-params": with_ssm_params,
    }


def _construct_argument(loader: yaml.SafeLoader, node: yaml.Node) -> Any:
    if isinstance(node, yaml.MappingNode):
        return loader.construct_mapping(node, deep=True)
    if isinstance(node, yaml.SequenceNode):
        return loader.construct_sequence(node, deep=True)
    return loader.construct_scalar(node)


def _literal_constructor(resolver: LiteralResolver):
    def construct(loader: yaml.SafeLoader, node: yaml.Node) -> Any:
        return resolver(_construct_argument(loader, node))
    return construct


def literal_loader(literals: Mapping[str, LiteralResolver]) -> Type[yaml.SafeLoader]:
    """Fresh SafeLoader subclass resolving `!name arg` tags with `literals`.

    Constructors are registered on the subclass only, so yaml.SafeLoader and
    loaders built for other calls never see them.
    """
    loader = type("LiteralLoader", (yaml.SafeLoader,), {})
    for name, resolver in literals.items():
        loader.add_constructor(f"!{name}", _literal_constructor(resolver))
    return loader


# Shorthand serializer

def make_url_template(name: str, declaration: UrlStack) -> Dict[str, Any]:
    """Template from a url; options that are not a mapping are ignored."""
    template = {"StackName": name, "TemplateURL": declaration.url}
    if isinstance(declaration.options, Mapping):
        template.update(declaration.options)
    return template


def expand_resource(value: Any) -> Any:
    declaration = resource_declaration(value)
    if isinstance(declaration, TupleResource):
        return {
            "Type": derive_resource_type(declaration.type_key),
            "Properties": declaration.properties,
        }
    return declaration.declaration


def make_options_template(name: str, declaration: InlineStack) -> Dict[str, Any]:
    """Template with an inline body; tuple-shorthand resources are expanded to their map form.

    Bodies or Resources sections that are not mappings are passed through unchanged.
    """
    options = declaration.options if declaration.options is not None else {}
    if not isinstance(options, Mapping):
        return {"StackName": name, "TemplateBody": options}
    body = dict(options)
    resources = body.get("Resources") or {}
    if isinstance(resources, Mapping):
        body["Resources"] = {k: expand_resource(v) for k, v in resources.items()}
    return {"StackName": name, "TemplateBody": body}


def serialize_config(cfg: Optional[Mapping[Any, Any]]) -> Dict[Any, Dict[str, Any]]:
    """Expands config `cfg`, a mapping of stack keys to template declarations.

    A declaration is either a sequence `[url, options]` for a template hosted at
    a url, or a mapping of CloudFormation options whose `Resources` may use the
    `[Service.Module, properties]` shorthand.
    """
    serialized = {}
    for key, value in (cfg or {}).items():
        name = display_name(key)
        declaration = stack_declaration(value)
        if isinstance(declaration, UrlStack):
            serialized[key] = make_url_template(name, declaration)
        else:
            serialized[key] = make_options_template(name, declaration)
        pulumi.log.debug(f"Serialized stack '{name}' ({type(declaration).__name__})")
    return serialized


# Config reader

def read_yaml(text: str, environment: Any, parameters: Optional[Mapping[str, Any]] = None) -> Dict[Any, Dict[str, Any]]:
    """Reads shorthand config `text` for `environment` with optional `parameters` for !sub."""
    literals = create_literals(environment, parameters)
    cfg = yaml.load(text, Loader=literal_loader(literals))
    return serialize_config(cfg)
