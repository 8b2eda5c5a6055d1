from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field


class NodeAddress(BaseModel):
    model_config = ConfigDict(frozen=True)

    host: str
    port: int

    @classmethod
    def parse(cls, value: str) -> "NodeAddress":
        host, _, port = value.rpartition(":")
        if not host or not port.isdigit():
            raise ValueError(f"Invalid node address: {value!r}")
        return cls(host=host, port=int(port))

    @property
    def full_address(self) -> str:
        return f"{self.host}:{self.port}"

    def __lt__(self, other: "NodeAddress") -> bool:
        if not isinstance(other, NodeAddress):
            return NotImplemented
        return (self.host, self.port) < (other.host, other.port)

    def __str__(self) -> str:
        return self.full_address


class SeedNodeInfo(BaseModel):
    address: str
    operator: str
    slack_user: str = ""


class NodeMetricsDump(BaseModel):
    address: str
    request_durations: List[int] = Field(default_factory=list)
    error_messages: List[str] = Field(default_factory=list)
    received_objects_list: List[Dict[str, int]] = Field(default_factory=list)
