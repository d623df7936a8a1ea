"""Onchain state supplied by the identity-registry reader."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from agent_metadata_resolver.resolver.validation.formats import is_caip10


class OnchainContext(BaseModel):
    """Onchain record the offchain document is checked against.

    Attributes:
        agent_id: Agent id assigned by the identity registry
        registry_address: CAIP-10 id of the identity registry contract
        onchain_agent_hash: Optional 32-byte content hash recorded onchain;
            0x-prefixed hex strings are accepted
    """

    model_config = ConfigDict(frozen=True)

    agent_id: int = Field(ge=0)
    registry_address: str
    onchain_agent_hash: bytes | None = None

    @field_validator("registry_address")
    @classmethod
    def _validate_registry_address(cls, v):
        if not is_caip10(v):
            raise ValueError(f'registry address "{v}" is not a CAIP-10 account id')
        return v

    @field_validator("onchain_agent_hash", mode="before")
    @classmethod
    def _validate_hash(cls, v):
        if v is None:
            return v
        if isinstance(v, str):
            text = v[2:] if v.lower().startswith("0x") else v
            try:
                v = bytes.fromhex(text)
            except ValueError as e:
                raise ValueError("onchain agent hash must be hex encoded") from e
        if isinstance(v, (bytes, bytearray)) and len(v) != 32:
            raise ValueError(f"onchain agent hash must be 32 bytes, got {len(v)}")
        return v
