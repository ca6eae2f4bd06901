"""Resolution of provision parameters into a Bigtable instance configuration."""

import json
import re
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from bigtable_broker.exceptions import ParameterDecodeError, PlanConfigurationError
from bigtable_broker.services import name_generator

logger = logging.getLogger(__name__)

DEFAULT_ZONE = "us-east1-b"
CLUSTER_ID_SUFFIX = "-cluster"
# Bigtable cluster ids are capped at 30 characters, leaving 20 for the name prefix
MAX_CLUSTER_NAME_PREFIX = 20

# Request parameters the resolver reads; each must be a string when present
STRING_PARAMETERS = ("name", "cluster_id", "zone", "display_name")

# Signed decimal integer, ASCII digits only
INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")


class StorageType(str, Enum):
    """Storage media backing a Bigtable cluster."""
    SSD = "SSD"
    HDD = "HDD"


@dataclass(frozen=True)
class InstanceConfiguration:
    """Fully resolved settings for a create-instance call."""
    name: str
    cluster_id: str
    num_nodes: int
    storage_type: StorageType
    zone: str
    display_name: str


def decode_raw_parameters(raw_parameters: Optional[str]) -> Dict[str, Any]:
    """Decode the user supplied parameters; empty input is an empty mapping."""
    if raw_parameters is None or not raw_parameters.strip():
        return {}

    try:
        params = json.loads(raw_parameters)
    except json.JSONDecodeError as e:
        raise ParameterDecodeError("parameters", e) from e

    if not isinstance(params, dict):
        raise ParameterDecodeError(
            "parameters", TypeError(f"expected a JSON object, got {type(params).__name__}")
        )

    for key in STRING_PARAMETERS:
        if key in params and not isinstance(params[key], str):
            raise ParameterDecodeError(
                "parameters", TypeError(f"parameter '{key}' must be a string")
            )

    return params


def decode_plan_features(features: Optional[str]) -> Dict[str, Any]:
    """Decode the JSON plan features."""
    try:
        plan_features = json.loads(features or "")
    except json.JSONDecodeError as e:
        raise ParameterDecodeError("plan features", e) from e

    if not isinstance(plan_features, dict):
        raise ParameterDecodeError(
            "plan features", TypeError(f"expected a JSON object, got {type(plan_features).__name__}")
        )

    return plan_features


def derive_cluster_id(name: str) -> str:
    """Build the default cluster id for an instance name."""
    return name[:MAX_CLUSTER_NAME_PREFIX] + CLUSTER_ID_SUFFIX


def parse_num_nodes(value: Any) -> int:
    """Parse the ``num_nodes`` plan feature.

    Accepts an integer or a string of ASCII digits with an optional sign.
    Anything else, including floats and padded strings, is rejected rather
    than rounded.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return value

    if isinstance(value, str) and INTEGER_PATTERN.fullmatch(value):
        return int(value)

    raise PlanConfigurationError(
        f"Error converting num_nodes to int: invalid value {value!r}",
        feature="num_nodes", value=value
    )


def parse_storage_type(value: Any) -> StorageType:
    """Map the ``storage_type`` plan feature onto a StorageType.

    Unknown values are rejected instead of falling back to a default medium.
    """
    try:
        return StorageType(value)
    except ValueError as e:
        valid = ", ".join(member.value for member in StorageType)
        raise PlanConfigurationError(
            f"Unknown storage_type {value!r}, expected one of: {valid}",
            feature="storage_type", value=value, cause=e
        ) from e


def resolve_instance_configuration(
    raw_parameters: Optional[str],
    plan_features: Optional[str],
    generator: Optional[name_generator.BasicNameGenerator] = None,
    default_zone: str = DEFAULT_ZONE
) -> InstanceConfiguration:
    """Merge request parameters, plan features and defaults.

    Raises ParameterDecodeError when either JSON document is malformed and
    PlanConfigurationError when a plan feature cannot be used.
    """
    params = decode_raw_parameters(raw_parameters)
    features = decode_plan_features(plan_features)

    name = params.get("name")
    if not name:
        name = (generator or name_generator.basic).instance_name_with_separator("-")
        logger.debug(f"Generated instance name {name}")

    cluster_id = params.get("cluster_id", derive_cluster_id(name))
    num_nodes = parse_num_nodes(features.get("num_nodes"))
    storage_type = parse_storage_type(features.get("storage_type"))

    return InstanceConfiguration(
        name=name,
        cluster_id=cluster_id,
        num_nodes=num_nodes,
        storage_type=storage_type,
        zone=params.get("zone", default_zone),
        display_name=params.get("display_name", name)
    )
