from enum import Enum
import ipaddress
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.exceptions import InvalidImportIdError


class ExpectedState(str, Enum):
    """What the poller waits for after a write."""
    PRESENT = "present"
    ABSENT = "absent"


class PollState(str, Enum):
    PENDING = "pending"
    SETTLED = "settled"
    ABSENT = "absent"
    TIMEOUT = "timeout"


# Input Models
class WhitelistInput(BaseModel):
    """Input model for a new whitelist entry"""
    model_config = ConfigDict(str_strip_whitespace=True)

    ip: str = Field(..., min_length=1, description="Network in CIDR notation.")
    description: str = Field(..., min_length=1, description="Free text shown in the Compose console.")

    @field_validator('ip')
    @classmethod
    def validate_cidr(cls, v: str) -> str:
        try:
            ipaddress.ip_network(v, strict=False)
        except ValueError as e:
            raise ValueError(f"Provided value '({v})' is not a valid IPv4 network: {e}")
        # ip_network accepts bare addresses, the API wants a prefix
        if "/" not in v:
            raise ValueError(f"Provided value '({v})' is not a valid IPv4 network: missing prefix length")
        return v

    @field_validator('description')
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Field cannot be empty")
        return v.strip()


class DeploymentWhitelistBody(BaseModel):
    whitelist: WhitelistInput


class AddWhitelistPayload(BaseModel):
    """Complete request body for POST deployments/{id}/whitelist"""
    deployment: DeploymentWhitelistBody

    @classmethod
    def from_input(cls, whitelist: WhitelistInput) -> "AddWhitelistPayload":
        return cls(deployment=DeploymentWhitelistBody(whitelist=whitelist))


# Response Models
class WhitelistEntry(BaseModel):
    """Whitelist entry as listed by the API"""
    model_config = ConfigDict(extra="ignore")

    id: str
    ip: str
    description: str = ""


class EmbeddedWhitelist(BaseModel):
    whitelist: List[WhitelistEntry] = Field(default_factory=list)


class WhitelistListResponse(BaseModel):
    """Body of GET deployments/{id}/whitelist"""
    model_config = ConfigDict(populate_by_name=True)

    embedded: EmbeddedWhitelist = Field(default_factory=EmbeddedWhitelist, alias="_embedded")


# State Models
class WhitelistState(BaseModel):
    """
    Durable state of one managed whitelist entry.

    The host persists this between invocations; `id` is what identifies the
    entry on the Compose side, together with `deployment_id`.
    """
    id: Optional[str] = None
    deployment_id: str = Field(..., min_length=1)
    ip: str
    description: str

    @classmethod
    def from_entry(cls, deployment_id: str, entry: WhitelistEntry) -> "WhitelistState":
        return cls(
            id=entry.id,
            deployment_id=deployment_id,
            ip=entry.ip,
            description=entry.description,
        )


class ImportId(BaseModel):
    deployment_id: str
    ip: str

    @classmethod
    def parse(cls, raw: str) -> "ImportId":
        """Splits '<deployment>@<ip>' into its two components."""
        parts = raw.split("@")
        if len(parts) != 2:
            raise InvalidImportIdError(raw)

        deployment_id, ip = parts[0].strip(), parts[1].strip()
        if not deployment_id or not ip:
            raise InvalidImportIdError(raw)

        return cls(deployment_id=deployment_id, ip=ip)
