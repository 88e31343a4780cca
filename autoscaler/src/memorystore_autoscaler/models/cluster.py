#!/usr/bin/env python3
"""
Pydantic models for the per-cluster scaling request produced by the poller
"""

from typing import Dict, Any, List, Optional
from enum import Enum

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class Engine(str, Enum):
    """Managed in-memory engines the scaler can resize"""
    REDIS = "REDIS"
    VALKEY = "VALKEY"


class Direction(str, Enum):
    """Scaling direction"""
    IN = "IN"
    OUT = "OUT"
    NONE = "NONE"


class ScalingMethodName(str, Enum):
    """Registered size calculation methods"""
    STEPWISE = "STEPWISE"
    LINEAR = "LINEAR"
    DIRECT = "DIRECT"


class ScalingProfileName(str, Enum):
    """Registered rule profiles"""
    CPU_AND_MEMORY = "CPU_AND_MEMORY"
    CPU = "CPU"
    MEMORY = "MEMORY"
    CUSTOM = "CUSTOM"


class MetricValue(BaseModel):
    """A named metric sample collected for this cycle"""
    name: str = Field(..., description="Metric name, used as the rule fact name")
    value: Optional[float] = Field(None, description="Sampled value")
    threshold: Optional[float] = Field(None, description="Threshold that triggered a linear calculation")

    class Config:
        frozen = True


class StateDatabase(BaseModel):
    """Where the scaling state of a cluster is persisted"""
    name: str = Field("firestore", description="Backend tag: firestore/mongodb or spanner/sql")
    instance_id: Optional[str] = Field(None, description="Relational instance identifier")
    database_id: Optional[str] = Field(None, description="Database identifier")

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        frozen = True
        extra = "ignore"


class ClusterRequest(BaseModel):
    """
    One cluster, its sizing configuration and the metrics gathered for it.

    Instances are immutable; a stage that needs to change a field (for
    example the method name after a fallback to the default) produces a
    new value with model_copy.
    """
    project_id: str = Field(..., description="Project owning the cluster")
    region_id: str = Field(..., description="Region of the cluster")
    cluster_id: str = Field(..., description="Cluster identifier")
    engine: Engine = Field(Engine.REDIS.value, description="REDIS or VALKEY")
    units: str = Field("SHARDS", description="Unit of scale")

    current_size: int = Field(..., ge=0, description="Current number of shards")
    min_size: int = Field(1, ge=0, description="Lowest size the scaler may choose")
    max_size: int = Field(10, ge=0, description="Highest size the scaler may choose")
    step_size: int = Field(1, ge=0, description="Shards added or removed by the stepwise method")
    scale_in_limit: Optional[int] = Field(None, ge=0, description="Max shards removed per linear scale in")
    scale_out_limit: Optional[int] = Field(None, ge=0, description="Max shards added per linear scale out")
    min_free_memory_percent: float = Field(30, ge=0, lt=100, description="Memory headroom kept free")

    scale_out_cooling_minutes: float = Field(10, ge=0, description="Cooldown after a scale out")
    scale_in_cooling_minutes: float = Field(20, ge=0, description="Cooldown after a scale in")

    scaling_profile: str = Field(ScalingProfileName.CPU_AND_MEMORY.value, description="Rule profile name")
    scaling_method: str = Field(ScalingMethodName.STEPWISE.value, description="Size calculation method name")
    scaling_rules: Optional[List[Dict[str, Any]]] = Field(None, description="Inline rules for the CUSTOM profile")

    state_project_id: Optional[str] = Field(None, description="Project hosting the state database")
    state_database: Optional[StateDatabase] = Field(None, description="State backend selection")
    downstream_stream: Optional[str] = Field(None, description="Redis stream receiving scaling events")

    metrics: List[MetricValue] = Field(default_factory=list, description="Metric samples for this cycle")

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        frozen = True
        extra = "ignore"
        use_enum_values = True

    @property
    def facts(self) -> Dict[str, Optional[float]]:
        """Metric samples keyed by name"""
        return {metric.name: metric.value for metric in self.metrics}

    @property
    def display_name(self) -> str:
        return f"{self.project_id}/{self.region_id}/{self.cluster_id}"
