"""
Server state models for the 'show servers state' output.

Reference: http://docs.haproxy.org/2.6/management.html#9.3-show%20servers%20state

Fields are declared in wire order; the position of a field in the model
is its zero-based column in the space separated row.
"""

from enum import Enum, IntEnum, IntFlag
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

Int = Annotated[int, Field(ge=-(2 ** 63), le=2 ** 63 - 1)]


class ServerState(str, Enum):
    """Administrative target states accepted by 'set server ... state'."""
    READY = "ready"
    DRAIN = "drain"
    MAINT = "maint"


class OperationalState(IntEnum):
    """Server operational state (SRV_ST_*)."""
    STOPPED = 0   # The server is down
    STARTING = 1  # The server is warming up (up but throttled)
    RUNNING = 2   # The server is fully up
    STOPPING = 3  # The server is up but soft-stopping (eg: 404)


class AdminState(IntFlag):
    """Server administrative state mask (SRV_ADMF_*). Several reasons may be set at once."""
    FORCED_MAINTENANCE = 0x01      # Explicitly forced into maintenance
    INHERITED_MAINTENANCE = 0x02   # Maintenance inherited from a tracked server
    CONFIGURED_MAINTENANCE = 0x04  # Maintenance because of the configuration
    FORCED_DRAIN = 0x08            # Explicitly forced into drain
    INHERITED_DRAIN = 0x10         # Drain inherited from a tracked server
    RESOLUTION_MAINTENANCE = 0x20  # Maintenance because of an address resolution failure
    HOST_MAINTENANCE = 0x40        # FQDN was set from the stats socket


MAINTENANCE_MASK = (
    AdminState.FORCED_MAINTENANCE
    | AdminState.INHERITED_MAINTENANCE
    | AdminState.CONFIGURED_MAINTENANCE
    | AdminState.RESOLUTION_MAINTENANCE
    | AdminState.HOST_MAINTENANCE
)
DRAIN_MASK = AdminState.FORCED_DRAIN | AdminState.INHERITED_DRAIN


class CheckResult(IntEnum):
    """Last check result (CHK_RES_*)."""
    UNKNOWN = 0   # Initialized to this by default
    NEUTRAL = 1   # Valid check but no status information
    FAILED = 2    # Check failed
    PASSED = 3    # Check succeeded and server is fully up again
    CONDPASS = 4  # Check reports the server doesn't want new sessions


class CheckState(IntFlag):
    """Health check / agent check state mask (CHK_ST_*)."""
    IN_PROGRESS = 0x01  # A check is currently running
    CONFIGURED = 0x02   # This check is configured and may be enabled
    ENABLED = 0x04      # This check is currently administratively enabled
    PAUSED = 0x08       # Checks are paused because of maintenance (health only)
    AGENT = 0x10        # Agent check, only meaningful in srv_agent_state


class ServerStateRecord(BaseModel):
    """One server row of 'show servers state'."""

    model_config = ConfigDict(frozen=True)

    be_id: Int = Field(default=0, description="Backend unique id")
    be_name: str = Field(default="", description="Backend label")
    srv_id: Int = Field(default=0, description="Server unique id (in the backend)")
    srv_name: str = Field(default="", description="Server label")
    srv_addr: str = Field(default="", description="Server IP address")
    srv_op_state: OperationalState = Field(
        default=OperationalState.STOPPED,
        description="Server operational state (UP/DOWN/...)"
    )
    srv_admin_state: AdminState = Field(
        default=AdminState(0),
        description="Server administrative state mask (MAINT/DRAIN/...)"
    )
    srv_uweight: Int = Field(default=0, description="User visible server weight")
    srv_iweight: Int = Field(default=0, description="Server initial weight")
    srv_time_since_last_change: Int = Field(default=0, description="Time since last operational change")
    srv_check_status: Int = Field(default=0, description="Last health check status")
    srv_check_result: CheckResult = Field(
        default=CheckResult.UNKNOWN,
        description="Last check result (FAILED/PASSED/...)"
    )
    srv_check_health: Int = Field(default=0, description="Checks rise / fall current counter")
    srv_check_state: CheckState = Field(
        default=CheckState(0),
        description="State of the health check mask (ENABLED/PAUSED/...)"
    )
    srv_agent_state: CheckState = Field(
        default=CheckState(0),
        description="State of the agent check mask (ENABLED/PAUSED/AGENT/...)"
    )
    bk_f_forced_id: bool = Field(default=False, description="Backend id forced by configuration")
    srv_f_forced_id: bool = Field(default=False, description="Server id forced by configuration")
    srv_fqdn: str = Field(default="", description="Server FQDN")
    srv_port: str = Field(default="", description="Server port")
    srvrecord: str = Field(default="", description="DNS SRV record associated to this server")
    srv_use_ssl: bool = Field(default=False, description="Use SSL for server connections")
    srv_check_port: str = Field(default="", description="Server health check port")
    srv_check_addr: str = Field(default="", description="Server health check address")
    srv_agent_addr: str = Field(default="", description="Server health agent address")
    srv_agent_port: str = Field(default="", description="Server health agent port")

    @property
    def in_maintenance(self) -> bool:
        """Check if any maintenance reason is set."""
        return bool(self.srv_admin_state & MAINTENANCE_MASK)

    @property
    def draining(self) -> bool:
        """Check if any drain reason is set."""
        return bool(self.srv_admin_state & DRAIN_MASK)
