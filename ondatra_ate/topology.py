"""Test topology description consumed by the ATE config builder."""
import enum

from pydantic import BaseModel


class RouteOrigin(enum.IntEnum):
    ROUTE_ORIGIN_UNSPECIFIED = 0
    INTERNAL = 1
    EXTERNAL = 2


class BgpOrigin(enum.IntEnum):
    ORIGIN_IGP = 0
    ORIGIN_EGP = 1
    ORIGIN_INCOMPLETE = 2


class CoBits(enum.IntEnum):
    CO_BITS_00 = 0
    CO_BITS_01 = 1
    CO_BITS_10 = 2
    CO_BITS_11 = 3


class AsPathSegmentType(enum.IntEnum):
    TYPE_AS_SEQ = 0
    TYPE_AS_SET = 1
    TYPE_AS_SEQ_CONFEDERATION = 2
    TYPE_AS_SET_CONFEDERATION = 3


class AsnSetMode(enum.IntEnum):
    ASN_SET_MODE_DO_NOT_INCLUDE_LOCAL_AS = 0
    ASN_SET_MODE_AS_SEQ = 1
    ASN_SET_MODE_AS_SET = 2
    ASN_SET_MODE_AS_SEQ_CONFEDERATION = 3
    ASN_SET_MODE_AS_SET_CONFEDERATION = 4
    ASN_SET_MODE_PREPEND_TO_FIRST_SEGMENT = 5


class RouteTableFormat(enum.IntEnum):
    ROUTE_TABLE_FORMAT_UNSPECIFIED = 0
    ROUTE_TABLE_FORMAT_CISCO = 1
    ROUTE_TABLE_FORMAT_JUNIPER = 2


class BgpSessionType(str, enum.Enum):
    INTERNAL = "internal"
    EXTERNAL = "external"


class NetworkEth(BaseModel):
    mac_address: str = ""
    count: int = 0
    vlan_id: int = 0


class IpRange(BaseModel):
    address_cidr: str = ""
    count: int = 0


class IPReachability(BaseModel):
    """IS-IS reachability of a network."""

    metric: int = 0
    route_origin: RouteOrigin = RouteOrigin.ROUTE_ORIGIN_UNSPECIFIED
    algorithm: int = 0
    enable_sid_index_label: bool = False
    sid_index_label: int = 0
    flag_readvertise: bool = False
    flag_node_sid: bool = False
    flag_no_php: bool = False
    flag_explicit_null: bool = False
    flag_value: bool = False
    flag_local: bool = False


class BgpCommunities(BaseModel):
    no_export: bool = False
    no_advertise: bool = False
    no_export_subconfed: bool = False
    llgr_stale: bool = False
    no_llgr: bool = False
    # "asn:value"
    private_communities: list[str] = []


class Color(BaseModel):
    co_bits: CoBits = CoBits.CO_BITS_00
    reserved_bits: int = 0
    value: int = 0


class ExtendedCommunity(BaseModel):
    color: Color | None = None


class AsPathSegment(BaseModel):
    type: AsPathSegmentType = AsPathSegmentType.TYPE_AS_SEQ
    asns: list[int] = []


class StringIncRange(BaseModel):
    start: str = ""
    step: str = ""


class BgpAttributes(BaseModel):
    active: bool = False
    next_hop_address: str = ""
    origin: BgpOrigin = BgpOrigin.ORIGIN_IGP
    local_preference: int = 0
    communities: BgpCommunities | None = None
    extended_communities: list[ExtendedCommunity] = []
    asn_set_mode: AsnSetMode = AsnSetMode.ASN_SET_MODE_DO_NOT_INCLUDE_LOCAL_AS
    as_path_segments: list[AsPathSegment] = []
    originator_id: StringIncRange | None = None
    cluster_ids: list[str] = []


class ImportedBgpRoutes(BaseModel):
    route_table_format: RouteTableFormat = RouteTableFormat.ROUTE_TABLE_FORMAT_UNSPECIFIED
    ipv4_routes_path: str = ""
    ipv6_routes_path: str = ""


class Network(BaseModel):
    name: str
    eth: NetworkEth | None = None
    ipv4: IpRange | None = None
    ipv6: IpRange | None = None
    isis: IPReachability | None = None
    bgp_attributes: BgpAttributes | None = None
    imported_bgp_routes: ImportedBgpRoutes | None = None


class Ipv4Config(BaseModel):
    address_cidr: str = ""
    default_gateway: str = ""


class Ipv6Config(BaseModel):
    address_cidr: str = ""
    default_gateway: str = ""


class BgpPeer(BaseModel):
    name: str = ""
    active: bool = True
    peer_address: str
    local_asn: int = 0
    type: BgpSessionType = BgpSessionType.EXTERNAL
    hold_timer_sec: int = 0
    keepalive_timer_sec: int = 0
    # Peer from the loopback address instead of the interface address.
    on_loopback: bool = False


class InterfaceConfig(BaseModel):
    name: str
    port: str = ""
    mac_address: str = ""
    mtu: int = 0
    ipv4: Ipv4Config | None = None
    ipv6: Ipv6Config | None = None
    ipv4_loopback_cidr: str = ""
    ipv6_loopback_cidr: str = ""
    bgp_peers: list[BgpPeer] = []
    networks: list[Network] = []
