"""Genesis document models."""

import json
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, StrictInt


class Allocation(BaseModel):
    """Initial balance assigned to an address at genesis."""
    address: str = Field(..., description="Funded address")
    balance: int = Field(..., ge=0, description="Initial balance")


class Genesis(BaseModel):
    """
    Genesis document - The shared initial state of a local network.

    Every node in a cluster must be started against the same genesis.
    Only the network identifier is interpreted by the runner; any other
    field is carried through to the node binary untouched.
    """
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    network_id: StrictInt = Field(..., alias="networkID", ge=0, description="Numeric network identifier")
    allocations: List[Allocation] = Field(
        default_factory=list,
        description="Initial balances"
    )
    initial_stakers: List[str] = Field(
        default_factory=list,
        alias="initialStakers",
        description="Node IDs staking from genesis"
    )
    start_time: Optional[int] = Field(None, alias="startTime", description="Unix start time")
    message: Optional[str] = Field(None, description="Free-form genesis message")

    def to_json(self) -> str:
        """Render the genesis document as the node binary expects it."""
        data = self.model_dump(by_alias=True, exclude_none=True, mode='json')
        return json.dumps(data, indent=2, sort_keys=True)
