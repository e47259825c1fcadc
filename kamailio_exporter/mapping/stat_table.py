"""Well-known ``stats.fetch all`` keys and the metrics they feed."""

from typing import List, Tuple

from ..utils.metrics import MetricDescriptor, ValueKind
from .engine import StatMapping

CORE_REQUEST_TOTAL = MetricDescriptor.build("", "core_request_total", "Request counters", ("method",))
CORE_RCV_REQUEST_TOTAL = MetricDescriptor.build("", "core_rcv_request_total", "Received requests by method", ("method",))
CORE_REPLY_TOTAL = MetricDescriptor.build("", "core_reply_total", "Reply counters", ("type",))
CORE_RCV_REPLY_TOTAL = MetricDescriptor.build("", "core_rcv_reply_total", "Received replies by code", ("code",))
SHM_BYTES = MetricDescriptor.build("", "shm_bytes", "Shared memory sizes", ("type",))
SHM_FRAGMENTS = MetricDescriptor.build("", "shm_fragments", "Shared memory fragment count")
DNS_FAILED = MetricDescriptor.build("", "dns_failed_request_total", "Failed dns requests")
BAD_URI = MetricDescriptor.build("", "bad_uri_total", "Messages with bad uri")
BAD_MSG_HDR = MetricDescriptor.build("", "bad_msg_hdr", "Messages with bad message header")
SL_REPLY_TOTAL = MetricDescriptor.build("", "sl_reply_total", "Stateless replies by code", ("code",))
SL_TYPE_TOTAL = MetricDescriptor.build("", "sl_type_total", "Stateless replies by type", ("type",))
TCP_TOTAL = MetricDescriptor.build("", "tcp_total", "TCP connection counters", ("type",))
TCP_CONNECTIONS = MetricDescriptor.build("", "tcp_connections", "Opened TCP connections")
TCP_WRITEQUEUE = MetricDescriptor.build("", "tcp_writequeue", "TCP write queue size")
TMX_CODE_TOTAL = MetricDescriptor.build("", "tmx_code_total", "Completed Transaction counters by code", ("code",))
TMX_TYPE_TOTAL = MetricDescriptor.build("", "tmx_type_total", "Completed Transaction counters by type", ("type",))
TMX = MetricDescriptor.build("", "tmx", "Ongoing Transactions", ("type",))
TMX_RPL_TOTAL = MetricDescriptor.build("", "tmx_rpl_total", "Tmx reply counters", ("type",))
DIALOG = MetricDescriptor.build("", "dialog", "Ongoing Dialogs", ("type",))

COUNTER = ValueKind.COUNTER
GAUGE = ValueKind.GAUGE


def _group(descriptor: MetricDescriptor, kind: ValueKind, entries: List[Tuple[str, str]]) -> List[StatMapping]:
    return [StatMapping(key, descriptor, label, kind) for key, label in entries]


STAT_MAPPINGS: List[StatMapping] = (
    _group(CORE_REQUEST_TOTAL, COUNTER, [
        ("core.drop_requests", "drop"),
        ("core.err_requests", "err"),
        ("core.fwd_requests", "fwd"),
        ("core.rcv_requests", "rcv"),
    ])
    + _group(CORE_RCV_REQUEST_TOTAL, COUNTER, [
        ("core.rcv_requests_ack", "ack"),
        ("core.rcv_requests_bye", "bye"),
        ("core.rcv_requests_cancel", "cancel"),
        ("core.rcv_requests_info", "info"),
        ("core.rcv_requests_invite", "invite"),
        ("core.rcv_requests_message", "message"),
        ("core.rcv_requests_notify", "notify"),
        ("core.rcv_requests_options", "options"),
        ("core.rcv_requests_prack", "prack"),
        ("core.rcv_requests_publish", "publish"),
        ("core.rcv_requests_refer", "refer"),
        ("core.rcv_requests_register", "register"),
        ("core.rcv_requests_subscribe", "subscribe"),
        ("core.rcv_requests_update", "update"),
        ("core.unsupported_methods", "unsupported"),
    ])
    + _group(CORE_REPLY_TOTAL, COUNTER, [
        ("core.drop_replies", "drop"),
        ("core.err_replies", "err"),
        ("core.fwd_replies", "fwd"),
        ("core.rcv_replies", "rcv"),
    ])
    + _group(CORE_RCV_REPLY_TOTAL, COUNTER, [
        ("core.rcv_replies_18x", "18x"),
        ("core.rcv_replies_1xx", "1xx"),
        ("core.rcv_replies_2xx", "2xx"),
        ("core.rcv_replies_3xx", "3xx"),
        ("core.rcv_replies_401", "401"),
        ("core.rcv_replies_404", "404"),
        ("core.rcv_replies_407", "407"),
        ("core.rcv_replies_408", "408"),
        ("core.rcv_replies_480", "480"),
        ("core.rcv_replies_486", "486"),
        ("core.rcv_replies_4xx", "4xx"),
        ("core.rcv_replies_5xx", "5xx"),
        ("core.rcv_replies_6xx", "6xx"),
    ])
    + _group(SHM_BYTES, GAUGE, [
        ("shmem.free_size", "free"),
        ("shmem.max_used_size", "max_used"),
        ("shmem.real_used_size", "real_used"),
        ("shmem.total_size", "total"),
        ("shmem.used_size", "used"),
    ])
    + [
        StatMapping("shmem.fragments", SHM_FRAGMENTS, None, GAUGE),
        StatMapping("dns.failed_dns_request", DNS_FAILED, None, COUNTER),
        StatMapping("core.bad_URIs_rcvd", BAD_URI, None, COUNTER),
        StatMapping("core.bad_msg_hdr", BAD_MSG_HDR, None, COUNTER),
    ]
    + _group(SL_REPLY_TOTAL, COUNTER, [
        ("sl.1xx_replies", "1xx"),
        ("sl.200_replies", "200"),
        ("sl.202_replies", "202"),
        ("sl.2xx_replies", "2xx"),
        ("sl.300_replies", "300"),
        ("sl.301_replies", "301"),
        ("sl.302_replies", "302"),
        ("sl.3xx_replies", "3xx"),
        ("sl.400_replies", "400"),
        ("sl.401_replies", "401"),
        ("sl.403_replies", "403"),
        ("sl.404_replies", "404"),
        ("sl.407_replies", "407"),
        ("sl.408_replies", "408"),
        ("sl.483_replies", "483"),
        ("sl.4xx_replies", "4xx"),
        ("sl.500_replies", "500"),
        ("sl.5xx_replies", "5xx"),
        ("sl.6xx_replies", "6xx"),
    ])
    + _group(SL_TYPE_TOTAL, COUNTER, [
        ("sl.failures", "failure"),
        ("sl.received_ACKs", "received_ack"),
        ("sl.sent_err_replies", "sent_err_reply"),
        ("sl.sent_replies", "sent_reply"),
        ("sl.xxx_replies", "xxx_reply"),
    ])
    + _group(TCP_TOTAL, COUNTER, [
        ("tcp.con_reset", "con_reset"),
        ("tcp.con_timeout", "con_timeout"),
        ("tcp.connect_failed", "connect_failed"),
        ("tcp.connect_success", "connect_success"),
        ("tcp.established", "established"),
        ("tcp.local_reject", "local_reject"),
        ("tcp.passive_open", "passive_open"),
        ("tcp.send_timeout", "send_timeout"),
        ("tcp.sendq_full", "sendq_full"),
    ])
    + [
        StatMapping("tcp.current_opened_connections", TCP_CONNECTIONS, None, GAUGE),
        StatMapping("tcp.current_write_queue_size", TCP_WRITEQUEUE, None, GAUGE),
    ]
    + _group(TMX_CODE_TOTAL, COUNTER, [
        ("tmx.2xx_transactions", "2xx"),
        ("tmx.3xx_transactions", "3xx"),
        ("tmx.4xx_transactions", "4xx"),
        ("tmx.5xx_transactions", "5xx"),
        ("tmx.6xx_transactions", "6xx"),
    ])
    + _group(TMX_TYPE_TOTAL, COUNTER, [
        ("tmx.UAC_transactions", "uac"),
        ("tmx.UAS_transactions", "uas"),
    ])
    + _group(TMX, GAUGE, [
        ("tmx.active_transactions", "active"),
        ("tmx.inuse_transactions", "inuse"),
    ])
    + _group(TMX_RPL_TOTAL, COUNTER, [
        ("tmx.rpl_absorbed", "absorbed"),
        ("tmx.rpl_generated", "generated"),
        ("tmx.rpl_received", "received"),
        ("tmx.rpl_relayed", "relayed"),
        ("tmx.rpl_sent", "sent"),
    ])
    + _group(DIALOG, COUNTER, [
        ("dialog.active_dialogs", "active_dialogs"),
        ("dialog.early_dialogs", "early_dialogs"),
        ("dialog.expired_dialogs", "expired_dialogs"),
        ("dialog.failed_dialogs", "failed_dialogs"),
        ("dialog.processed_dialogs", "processed_dialogs"),
    ])
)
