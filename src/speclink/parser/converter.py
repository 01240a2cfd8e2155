"""Convert Swagger 2.0 documents to OpenAPI 3.0.

The link generator works on the OpenAPI 3.0 shape only, so legacy input is
converted first.  :func:`convert_swagger2` returns a new document:

* ``definitions``, ``parameters``, ``responses`` and ``securityDefinitions``
  move under ``components`` and every ``$ref`` is rewritten accordingly;
* ``host``/``basePath``/``schemes`` become ``servers``;
* ``body`` and ``formData`` parameters become a ``requestBody``;
* type keywords of the remaining parameters and headers move into ``schema``
  and ``collectionFormat`` maps to ``style``/``explode``;
* response ``schema``/``examples`` become ``content`` keyed by ``produces``.

``operationId`` values, schema structure and ``x-`` extensions are kept.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)

OPENAPI_VERSION = "3.0.3"

_HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch")

# Parameter/header keywords that describe the value and belong in "schema".
_SCHEMA_KEYWORDS = (
    "type", "format", "items", "default", "maximum", "exclusiveMaximum",
    "minimum", "exclusiveMinimum", "maxLength", "minLength", "pattern",
    "maxItems", "minItems", "uniqueItems", "enum", "multipleOf",
)

_REF_PREFIXES = {
    "#/definitions/": "#/components/schemas/",
    "#/parameters/": "#/components/parameters/",
    "#/responses/": "#/components/responses/",
}

_FORM_MEDIA_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")
_DEFAULT_MEDIA_TYPE = "application/json"

# collectionFormat -> (style, explode); "tsv" has no OpenAPI 3 equivalent.
_COLLECTION_FORMATS = {
    "csv": (None, False),
    "ssv": ("spaceDelimited", False),
    "pipes": ("pipeDelimited", False),
    "multi": ("form", True),
}


def convert_swagger2(spec: dict[str, Any]) -> dict[str, Any]:
    """Convert a Swagger 2.0 document to OpenAPI 3.0.3.

    The input is not modified.

    Args:
        spec: A parsed Swagger 2.0 document.

    Returns:
        The equivalent OpenAPI 3.0.3 document.
    """
    source = copy.deepcopy(spec)
    converter = _Converter(source)
    result = converter.convert()
    _rewrite_refs(result)
    return result


class _Converter:
    def __init__(self, source: dict[str, Any]) -> None:
        self.source = source
        self.consumes: list[str] = source.get("consumes") or [_DEFAULT_MEDIA_TYPE]
        self.produces: list[str] = source.get("produces") or [_DEFAULT_MEDIA_TYPE]
        self.global_params: dict[str, Any] = source.get("parameters") or {}

    def convert(self) -> dict[str, Any]:
        source = self.source
        result: dict[str, Any] = {"openapi": OPENAPI_VERSION, "info": source.get("info", {})}

        servers = self._servers()
        if servers:
            result["servers"] = servers
        for key in ("tags", "externalDocs"):
            if key in source:
                result[key] = source[key]

        result["paths"] = {
            path: self._path_item(item) if isinstance(item, dict) else item
            for path, item in (source.get("paths") or {}).items()
        }

        components = self._components()
        if components:
            result["components"] = components
        if "security" in source:
            result["security"] = source["security"]

        for key, value in source.items():
            if key.startswith("x-"):
                result[key] = value
        return result

    # -- top level ----------------------------------------------------------

    def _servers(self) -> list[dict[str, str]]:
        host = self.source.get("host")
        base_path = self.source.get("basePath", "")
        if host:
            schemes = self.source.get("schemes") or ["https"]
            return [{"url": f"{scheme}://{host}{base_path}"} for scheme in schemes]
        if base_path:
            return [{"url": base_path}]
        return []

    def _components(self) -> dict[str, Any]:
        components: dict[str, Any] = {}

        definitions = self.source.get("definitions")
        if definitions:
            components["schemas"] = {
                name: _convert_schema(schema) for name, schema in definitions.items()
            }

        parameters: dict[str, Any] = {}
        request_bodies: dict[str, Any] = {}
        for name, param in self.global_params.items():
            location = param.get("in") if isinstance(param, dict) else None
            if location == "body":
                request_bodies[name] = self._body_request(param, self.consumes)
            elif location != "formData":
                # formData parameters are inlined into each operation's requestBody.
                parameters[name] = _convert_parameter(param)
        if parameters:
            components["parameters"] = parameters
        if request_bodies:
            components["requestBodies"] = request_bodies

        responses = self.source.get("responses")
        if responses:
            components["responses"] = {
                name: _convert_response(response, self.produces)
                for name, response in responses.items()
            }

        security = self.source.get("securityDefinitions")
        if security:
            components["securitySchemes"] = {
                name: _convert_security_scheme(scheme) for name, scheme in security.items()
            }
        return components

    # -- paths ----------------------------------------------------------------

    def _path_item(self, item: dict[str, Any]) -> dict[str, Any]:
        result: dict[str, Any] = {}
        shared_payload: list[dict[str, Any]] = []
        kept: list[Any] = []
        for param in item.get("parameters") or []:
            if self._payload_location(param) is not None:
                shared_payload.append(param)
            else:
                kept.append(_convert_parameter(param))

        for key, value in item.items():
            if key in _HTTP_METHODS and isinstance(value, dict):
                result[key] = self._operation(value, shared_payload)
            elif key == "parameters":
                if kept:
                    result["parameters"] = kept
            else:
                result[key] = value
        return result

    def _operation(self, operation: dict[str, Any], shared_payload: list[Any]) -> dict[str, Any]:
        consumes = operation.get("consumes") or self.consumes
        produces = operation.get("produces") or self.produces

        params = list(operation.get("parameters") or [])
        own_names = {self._param_name(p) for p in params}
        params.extend(p for p in shared_payload if self._param_name(p) not in own_names)

        result: dict[str, Any] = {}
        converted: list[Any] = []
        body: Optional[dict[str, Any]] = None
        form_fields: list[dict[str, Any]] = []
        for param in params:
            location = self._payload_location(param)
            if location == "body":
                body = self._body_reference_or_request(param, consumes)
            elif location == "formData":
                form_fields.append(self._resolve_global(param))
            else:
                converted.append(_convert_parameter(param))

        for key, value in operation.items():
            if key in ("consumes", "produces", "schemes"):
                continue
            if key == "parameters":
                if converted:
                    result["parameters"] = converted
            elif key == "responses":
                result["responses"] = {
                    code: _convert_response(response, produces)
                    for code, response in (value or {}).items()
                }
            else:
                result[key] = value

        if body is None and form_fields:
            body = _form_request(form_fields, consumes)
        if body is not None:
            result["requestBody"] = body
        return result

    # -- parameters -----------------------------------------------------------

    def _resolve_global(self, param: Any) -> dict[str, Any]:
        """Return the global parameter *param* refers to, or *param* itself."""
        if isinstance(param, dict) and isinstance(param.get("$ref"), str):
            ref = param["$ref"]
            if ref.startswith("#/parameters/"):
                target = self.global_params.get(ref[len("#/parameters/"):])
                if isinstance(target, dict):
                    return target
        return param

    def _payload_location(self, param: Any) -> Optional[str]:
        resolved = self._resolve_global(param)
        if not isinstance(resolved, dict):
            return None
        location = resolved.get("in")
        return location if location in ("body", "formData") else None

    def _param_name(self, param: Any) -> Any:
        resolved = self._resolve_global(param)
        if not isinstance(resolved, dict):
            return None
        return resolved.get("name"), resolved.get("in")

    def _body_reference_or_request(self, param: dict[str, Any], consumes: list[str]) -> dict[str, Any]:
        ref = param.get("$ref")
        if isinstance(ref, str) and ref.startswith("#/parameters/"):
            return {"$ref": "#/components/requestBodies/" + ref[len("#/parameters/"):]}
        return self._body_request(param, consumes)

    def _body_request(self, param: dict[str, Any], consumes: list[str]) -> dict[str, Any]:
        media_types = [mt for mt in consumes if mt not in _FORM_MEDIA_TYPES] or [_DEFAULT_MEDIA_TYPE]
        schema = _convert_schema(param.get("schema", {}))
        request: dict[str, Any] = {}
        if "description" in param:
            request["description"] = param["description"]
        request["content"] = {mt: {"schema": copy.deepcopy(schema)} for mt in media_types}
        if param.get("required"):
            request["required"] = True
        _copy_extensions(param, request)
        return request


def _form_request(fields: list[dict[str, Any]], consumes: list[str]) -> dict[str, Any]:
    has_file = any(field.get("type") == "file" for field in fields)
    media_types = [mt for mt in consumes if mt in _FORM_MEDIA_TYPES]
    if has_file:
        media_types = ["multipart/form-data"]
    elif not media_types:
        media_types = ["application/x-www-form-urlencoded"]

    schema: dict[str, Any] = {"type": "object", "properties": {}}
    required: list[str] = []
    for field in fields:
        prop = _convert_schema({k: field[k] for k in _SCHEMA_KEYWORDS if k in field})
        if "description" in field:
            prop["description"] = field["description"]
        schema["properties"][field["name"]] = prop
        if field.get("required"):
            required.append(field["name"])
    if required:
        schema["required"] = required

    request: dict[str, Any] = {
        "content": {mt: {"schema": copy.deepcopy(schema)} for mt in media_types}
    }
    if required:
        request["required"] = True
    return request


def _convert_parameter(param: Any) -> Any:
    """Convert a query/header/path parameter (references are kept)."""
    if not isinstance(param, dict) or "$ref" in param:
        return param

    result: dict[str, Any] = {
        key: value
        for key, value in param.items()
        if key not in _SCHEMA_KEYWORDS and key != "collectionFormat"
    }
    schema = {key: param[key] for key in _SCHEMA_KEYWORDS if key in param}
    if "schema" not in result:
        result["schema"] = _convert_schema(schema)
    if result.get("in") == "path":
        result["required"] = True

    collection_format = param.get("collectionFormat")
    if param.get("type") == "array" and collection_format in _COLLECTION_FORMATS:
        style, explode = _COLLECTION_FORMATS[collection_format]
        if style is None:
            style = "form" if result.get("in") in ("query", "cookie") else "simple"
        result["style"] = style
        result["explode"] = explode
    elif collection_format == "tsv":
        logger.warning("collectionFormat 'tsv' of parameter '%s' has no OpenAPI 3 equivalent",
                       param.get("name"))
    return result


def _convert_header(header: Any) -> Any:
    if not isinstance(header, dict) or "$ref" in header:
        return header
    result = {
        key: value
        for key, value in header.items()
        if key not in _SCHEMA_KEYWORDS and key != "collectionFormat"
    }
    result["schema"] = _convert_schema({k: header[k] for k in _SCHEMA_KEYWORDS if k in header})
    return result


def _convert_response(response: Any, produces: list[str]) -> Any:
    if not isinstance(response, dict) or "$ref" in response:
        return response

    result: dict[str, Any] = {"description": response.get("description", "")}
    if "headers" in response:
        result["headers"] = {
            name: _convert_header(header) for name, header in response["headers"].items()
        }

    examples = response.get("examples") or {}
    if "schema" in response:
        schema = _convert_schema(response["schema"])
        content: dict[str, Any] = {}
        for media_type in produces:
            media: dict[str, Any] = {"schema": copy.deepcopy(schema)}
            if media_type in examples:
                media["example"] = examples[media_type]
            content[media_type] = media
        result["content"] = content

    _copy_extensions(response, result)
    return result


def _convert_schema(schema: Any) -> Any:
    """Adjust the few Swagger 2.0 schema keywords that changed in OpenAPI 3.0."""
    if isinstance(schema, list):
        return [_convert_schema(item) for item in schema]
    if not isinstance(schema, dict):
        return schema

    result: dict[str, Any] = {}
    for key, value in schema.items():
        if key == "x-nullable":
            result["nullable"] = value
        elif key == "discriminator" and isinstance(value, str):
            result["discriminator"] = {"propertyName": value}
        elif key in ("properties", "definitions", "patternProperties") and isinstance(value, dict):
            result[key] = {name: _convert_schema(sub) for name, sub in value.items()}
        elif key == "collectionFormat":
            continue
        elif key in ("example", "default", "enum") or key.startswith("x-"):
            result[key] = value
        else:
            result[key] = _convert_schema(value)

    if result.get("type") == "file":
        result["type"] = "string"
        result["format"] = "binary"
    return result


def _convert_security_scheme(scheme: dict[str, Any]) -> dict[str, Any]:
    kind = scheme.get("type")
    if kind == "basic":
        result: dict[str, Any] = {"type": "http", "scheme": "basic"}
    elif kind == "oauth2":
        flow: dict[str, Any] = {"scopes": scheme.get("scopes", {})}
        if "authorizationUrl" in scheme:
            flow["authorizationUrl"] = scheme["authorizationUrl"]
        if "tokenUrl" in scheme:
            flow["tokenUrl"] = scheme["tokenUrl"]
        flow_name = {
            "implicit": "implicit",
            "password": "password",
            "application": "clientCredentials",
            "accessCode": "authorizationCode",
        }.get(scheme.get("flow", ""), "implicit")
        result = {"type": "oauth2", "flows": {flow_name: flow}}
    else:
        result = {key: value for key, value in scheme.items() if not key.startswith("x-")}
    if "description" in scheme:
        result["description"] = scheme["description"]
    _copy_extensions(scheme, result)
    return result


def _copy_extensions(source: dict[str, Any], target: dict[str, Any]) -> None:
    for key, value in source.items():
        if key.startswith("x-") and key not in target:
            target[key] = value


def _rewrite_refs(node: Any) -> None:
    """Rewrite Swagger 2.0 ``$ref`` prefixes to their ``components`` locations in place."""
    if isinstance(node, dict):
        ref = node.get("$ref")
        if isinstance(ref, str):
            for old, new in _REF_PREFIXES.items():
                if ref.startswith(old):
                    node["$ref"] = new + ref[len(old):]
                    break
        for value in node.values():
            _rewrite_refs(value)
    elif isinstance(node, list):
        for item in node:
            _rewrite_refs(item)


def normalize_status_codes(document: dict[str, Any]) -> None:
    """Turn integer response keys (``200:`` in YAML) into strings, in place."""
    for item in (document.get("paths") or {}).values():
        if not isinstance(item, dict):
            continue
        for method, operation in item.items():
            if method not in _HTTP_METHODS + ("trace",) or not isinstance(operation, dict):
                continue
            responses = operation.get("responses")
            if isinstance(responses, dict) and any(not isinstance(k, str) for k in responses):
                operation["responses"] = {str(k): v for k, v in responses.items()}
