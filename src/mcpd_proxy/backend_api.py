# Copyright(c) Microsoft Corporation.
# Licensed under the MIT License.

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class HealthStatus(str, Enum):
    OK = "ok"
    TIMEOUT = "timeout"
    UNREACHABLE = "unreachable"
    UNKNOWN = "unknown"


class ServerHealth(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str
    status: str = HealthStatus.UNKNOWN.value
    latency: Optional[str] = None
    last_checked: Optional[str] = Field(default=None, alias="lastChecked")
    last_successful: Optional[str] = Field(default=None, alias="lastSuccessful")

    @property
    def is_ok(self) -> bool:
        return self.status == HealthStatus.OK.value


##
## Daemon problem details
##
class ErrorDetail(BaseModel):
    model_config = ConfigDict(extra="ignore")

    location: str = ""
    message: str = ""
    value: Any = None


class ErrorModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str = ""
    status: Optional[int] = None
    detail: str = ""
    errors: list[ErrorDetail] = Field(default_factory=list)


##
## Collaborator interfaces
##
class BackendInterface(ABC):
    """A single backend MCP server reachable through the daemon."""

    @abstractmethod
    async def list_tools(self) -> list[dict[str, Any]]:
        pass

    @abstractmethod
    async def list_prompts(self) -> list[dict[str, Any]]:
        pass

    @abstractmethod
    async def list_resources(self) -> list[dict[str, Any]]:
        pass

    @abstractmethod
    async def list_resource_templates(self) -> list[dict[str, Any]]:
        pass

    @abstractmethod
    async def call_tool(self, name: str, arguments: dict[str, Any]) -> Any:
        pass

    @abstractmethod
    async def read_resource(self, uri: str) -> list[dict[str, Any]]:
        pass

    @abstractmethod
    async def generate_prompt(
        self, name: str, arguments: Optional[dict[str, str]] = None
    ) -> dict[str, Any]:
        pass


class DirectoryInterface(ABC):
    """Enumerates backend servers and reports their health."""

    @abstractmethod
    async def list_servers(self) -> list[str]:
        pass

    @abstractmethod
    async def get_health(self) -> dict[str, ServerHealth]:
        pass

    @abstractmethod
    def server(self, name: str) -> BackendInterface:
        pass
