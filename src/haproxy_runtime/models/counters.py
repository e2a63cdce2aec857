"""
Counter models for the 'show stat' CSV output.

Reference: http://docs.haproxy.org/2.6/management.html#9.1

Fields are declared in wire order; the position of a field in the model
is its zero-based column in the CSV row. The letters in brackets tell
which object types carry a value: L (listeners), F (frontends),
B (backends) and S (servers).
"""

from enum import IntEnum
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field

U32 = Annotated[int, Field(ge=0, le=0xFFFFFFFF)]
U64 = Annotated[int, Field(ge=0, le=0xFFFFFFFFFFFFFFFF)]
I64 = Annotated[int, Field(ge=-(2 ** 63), le=2 ** 63 - 1)]

FRONTEND = "FRONTEND"
BACKEND = "BACKEND"


class ObjectType(IntEnum):
    """Object type reported in the 'type' column."""
    FRONTEND = 0
    BACKEND = 1
    SERVER = 2
    LISTENER = 3


class CounterRecord(BaseModel):
    """One row of 'show stat': counters for a listener, frontend, backend or server."""

    model_config = ConfigDict(frozen=True)

    pxname: str = Field(default="", description="Proxy name [LFBS]")
    svname: str = Field(
        default="",
        description="FRONTEND for frontend, BACKEND for backend, any name for server/listener [LFBS]"
    )
    qcur: U32 = Field(default=0, description="Current queued requests [..BS]")
    qmax: U32 = Field(default=0, description="Max value of qcur [..BS]")
    scur: U32 = Field(default=0, description="Current sessions [LFBS]")
    smax: U32 = Field(default=0, description="Max sessions [LFBS]")
    slim: U32 = Field(default=0, description="Configured session limit [LFBS]")
    stot: U64 = Field(default=0, description="Cumulative number of sessions [LFBS]")
    bin: U64 = Field(default=0, description="Bytes in [LFBS]")
    bout: U64 = Field(default=0, description="Bytes out [LFBS]")
    dreq: U64 = Field(default=0, description="Requests denied because of security concerns [LFB.]")
    dresp: U64 = Field(default=0, description="Responses denied because of security concerns [LFBS]")
    ereq: U64 = Field(default=0, description="Request errors [LF..]")
    econ: U64 = Field(default=0, description="Requests that failed to connect to a server [..BS]")
    eresp: U64 = Field(default=0, description="Response errors [..BS]")
    wretr: U64 = Field(default=0, description="Connection retries to a server [..BS]")
    wredis: U64 = Field(default=0, description="Requests redispatched to another server [..BS]")
    status: str = Field(default="", description="UP/DOWN/NOLB/MAINT/MAINT(via)/MAINT(resolution)... [LFBS]")
    weight: U32 = Field(default=0, description="Effective weight [..BS]")
    act: U32 = Field(default=0, description="Active servers (backend), server is active (server) [..BS]")
    bck: U32 = Field(default=0, description="Backup servers (backend), server is backup (server) [..BS]")
    chkfail: U64 = Field(default=0, description="Failed checks while the server was up [...S]")
    chkdown: U64 = Field(default=0, description="UP->DOWN transitions [..BS]")
    lastchg: U32 = Field(default=0, description="Seconds since the last UP<->DOWN transition [..BS]")
    downtime: U32 = Field(default=0, description="Total downtime in seconds [..BS]")
    qlimit: U64 = Field(default=0, description="Configured maxqueue for the server [...S]")
    pid: U32 = Field(default=0, description="Process id (0 for first instance) [LFBS]")
    iid: U32 = Field(default=0, description="Unique proxy id [LFBS]")
    sid: U32 = Field(default=0, description="Server id, unique inside a proxy [L..S]")
    throttle: U64 = Field(default=0, description="Current throttle percentage during slowstart [...S]")
    lbtot: U64 = Field(default=0, description="Times a server was selected [..BS]")
    tracked: U32 = Field(default=0, description="Id of tracked proxy/server [...S]")
    type: U32 = Field(default=0, description="0=frontend, 1=backend, 2=server, 3=socket/listener [LFBS]")
    rate: U32 = Field(default=0, description="Sessions per second over the last second [.FBS]")
    rate_lim: U32 = Field(default=0, description="Configured limit on new sessions per second [.F..]")
    rate_max: U32 = Field(default=0, description="Max new sessions per second [.FBS]")
    check_status: str = Field(default="", description="Status of the last health check [...S]")
    check_code: U32 = Field(default=0, description="Layer5-7 code of the last health check [...S]")
    check_duration: U64 = Field(default=0, description="Duration of the last health check in ms [...S]")
    hrsp_1xx: U64 = Field(default=0, description="HTTP responses with 1xx code [.FBS]")
    hrsp_2xx: U64 = Field(default=0, description="HTTP responses with 2xx code [.FBS]")
    hrsp_3xx: U64 = Field(default=0, description="HTTP responses with 3xx code [.FBS]")
    hrsp_4xx: U64 = Field(default=0, description="HTTP responses with 4xx code [.FBS]")
    hrsp_5xx: U64 = Field(default=0, description="HTTP responses with 5xx code [.FBS]")
    hrsp_other: U64 = Field(default=0, description="HTTP responses with other codes [.FBS]")
    hanafail: U64 = Field(default=0, description="Failed health checks details [...S]")
    req_rate: U32 = Field(default=0, description="HTTP requests per second over the last second [.F..]")
    req_rate_max: U32 = Field(default=0, description="Max HTTP requests per second observed [.F..]")
    req_tot: U64 = Field(default=0, description="Total HTTP requests received [.FB.]")
    cli_abrt: U64 = Field(default=0, description="Data transfers aborted by the client [..BS]")
    srv_abrt: U64 = Field(default=0, description="Data transfers aborted by the server [..BS]")
    comp_in: U64 = Field(default=0, description="HTTP response bytes fed to the compressor [.FB.]")
    comp_out: U64 = Field(default=0, description="HTTP response bytes emitted by the compressor [.FB.]")
    comp_byp: U64 = Field(default=0, description="Bytes that bypassed the compressor [.FB.]")
    comp_rsp: U64 = Field(default=0, description="HTTP responses that were compressed [.FB.]")
    lastsess: I64 = Field(default=0, description="Seconds since the last session, -1 if never [..BS]")
    last_chk: str = Field(default="", description="Last health check contents or textual error [...S]")
    last_agt: str = Field(default="", description="Last agent check contents or textual error [...S]")
    qtime: U32 = Field(default=0, description="Average queue time in ms over the last 1024 requests [..BS]")
    ctime: U32 = Field(default=0, description="Average connect time in ms over the last 1024 requests [..BS]")
    rtime: U32 = Field(default=0, description="Average response time in ms over the last 1024 requests [..BS]")
    ttime: U32 = Field(default=0, description="Average total session time in ms over the last 1024 requests [..BS]")
    agent_status: str = Field(default="", description="Status of the last agent check [...S]")
    agent_code: U32 = Field(default=0, description="Numeric code reported by the agent [...S]")
    agent_duration: U64 = Field(default=0, description="Duration of the last agent check in ms [...S]")
    check_desc: str = Field(default="", description="Human-readable description of check_status [...S]")
    agent_desc: str = Field(default="", description="Human-readable description of agent_status [...S]")
    check_rise: U32 = Field(default=0, description="Server 'rise' setting [...S]")
    check_fall: U32 = Field(default=0, description="Server 'fall' setting [...S]")
    check_health: U32 = Field(default=0, description="Current health check level [...S]")
    agent_rise: U32 = Field(default=0, description="Agent 'rise' setting [...S]")
    agent_fall: U32 = Field(default=0, description="Agent 'fall' setting [...S]")
    agent_health: U32 = Field(default=0, description="Current agent health level [...S]")
    addr: str = Field(default="", description="address:port or 'unix' [L..S]")
    cookie: str = Field(default="", description="Server cookie value or backend cookie name [..BS]")
    mode: str = Field(default="", description="Proxy mode (tcp, http, health, unknown) [LFBS]")
    algo: str = Field(default="", description="Load balancing algorithm [..B.]")
    conn_rate: U32 = Field(default=0, description="Connections over the last second [.F..]")
    conn_rate_max: U32 = Field(default=0, description="Highest known conn_rate [.F..]")
    conn_tot: U64 = Field(default=0, description="Cumulative number of connections [.F..]")
    intercepted: U64 = Field(default=0, description="HTTP requests intercepted on the frontend [.FB.]")
    dcon: U64 = Field(default=0, description="Requests denied by 'tcp-request connection' rules [LF..]")
    dses: U64 = Field(default=0, description="Requests denied by 'tcp-request session' rules [LF..]")
    wrew: U64 = Field(default=0, description="Failed header rewriting warnings [LFBS]")
    connect: U64 = Field(default=0, description="Connection establishment attempts [..BS]")
    reuse: U64 = Field(default=0, description="Connection reuses [..BS]")
    cache_lookups: U64 = Field(default=0, description="Cache lookups [.FB.]")
    cache_hits: U64 = Field(default=0, description="Cache hits [.FB.]")
    srv_icur: U32 = Field(default=0, description="Idle connections available for reuse [...S]")
    srv_ilim: U32 = Field(default=0, description="Limit on available idle connections [...S]")
    qtime_max: U32 = Field(default=0, description="Maximum observed queue time in ms [..BS]")
    ctime_max: U32 = Field(default=0, description="Maximum observed connect time in ms [..BS]")
    rtime_max: U32 = Field(default=0, description="Maximum observed response time in ms [..BS]")
    ttime_max: U32 = Field(default=0, description="Maximum observed total session time in ms [..BS]")
    eint: U64 = Field(default=0, description="Internal errors [LFBS]")
    idle_conn_cur: U32 = Field(default=0, description="Current unsafe idle connections [...S]")
    safe_conn_cur: U32 = Field(default=0, description="Current safe idle connections [...S]")
    used_conn_cur: U32 = Field(default=0, description="Current connections in use [...S]")
    need_conn_est: U32 = Field(default=0, description="Estimated needed connections [...S]")
    uweight: U32 = Field(default=0, description="User weight [..BS]")

    @property
    def is_frontend(self) -> bool:
        """Check if this is a frontend aggregate row."""
        return self.svname == FRONTEND

    @property
    def is_backend(self) -> bool:
        """Check if this is a backend aggregate row."""
        return self.svname == BACKEND

    @property
    def is_aggregate(self) -> bool:
        return self.is_frontend or self.is_backend

    @property
    def object_type(self) -> Optional[ObjectType]:
        """The 'type' column as an ObjectType, None for unknown values."""
        try:
            return ObjectType(self.type)
        except ValueError:
            return None
